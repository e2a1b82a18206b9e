"""
Announcement Scanner: recipient side.

For each announcement (E, address, view_tag, metadata):

    1. S         = v · E                   (skip entry if E is undecodable)
    2. h         = Hash(compressed(S))
    3. h[:12] != view_tag           -> skip (cheap rejection)
    4. offset    = int(h) mod n
    5. P_stealth = P_spend + offset · G ;  candidate = address(P_stealth)
    6. candidate != address         -> skip (view tag false positive)
    7. emit (announcement, StealthKeyPair(s + offset, P_stealth))

A non-matching announcement costs one scalar multiplication and one hash.
Another recipient's announcement passes the view tag with probability
1/256^12 and is then caught by the address comparison.

Scans are pure filter-maps over a lazy sequence: no session state, one bad
entry never aborts the scan, and the caller can stop pulling at any time.
The recipient's own keys are validated before the first entry is read;
errors there propagate.

Delegated scanning:
    A service holding only the viewing private key and the spending public
    key can run steps 1-6 (scan_announcements_view_only). The matched
    StealthKeyPair then has private_scalar=None; the owner recovers the
    spendable key later with compute_stealth_key().
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable, Iterable, Iterator
from concurrent.futures import ThreadPoolExecutor, as_completed
from itertools import islice

from stealth_kit.core.generator import (
    compute_shared_secret,
    derive_offset_scalar,
    derive_stealth_public_point,
    extract_view_tag,
    hash_shared_secret,
)
from stealth_kit.core.models import Announcement, ScanMatch
from stealth_kit.crypto.address import addresses_equal
from stealth_kit.crypto.curve import SECP256K1, CurveAdapter, Point
from stealth_kit.crypto.hashing import SHA256, HashAdapter
from stealth_kit.crypto.keys import PublicKeyLike, StealthKeyPair, as_public_point, decode_public_key
from stealth_kit.errors import (
    InvalidAddress,
    InvalidPoint,
    InvalidScalar,
    MalformedKey,
    SharedSecretDerivationFailed,
    StealthError,
)

logger = logging.getLogger("stealth_kit.scanner")

ErrorSink = Callable[[Announcement, StealthError], None]
"""Diagnostic callback receiving (skipped announcement, reason)."""

ProgressSink = Callable[[Announcement], None]
"""Callback receiving the last announcement up to which the input is fully processed."""

_RECOVERABLE = (
    MalformedKey,
    InvalidPoint,
    InvalidScalar,
    InvalidAddress,
    SharedSecretDerivationFailed,
)

DEFAULT_SCAN_WORKERS = 4
DEFAULT_CHUNK_SIZE = 256


# ==============================================================================
# Single announcement checks
# ==============================================================================


def _match_stealth_point(
    announcement: Announcement,
    viewing_private: int,
    spending_public: Point,
    curve: CurveAdapter,
    hasher: HashAdapter,
) -> tuple[Point, int] | None:
    """Steps 1-6. Returns (stealth public point, offset) on a match."""
    ephemeral_public = decode_public_key(announcement.ephemeral_public_key, curve)
    shared_secret = compute_shared_secret(viewing_private, ephemeral_public, curve)
    secret_hash = hash_shared_secret(shared_secret, curve, hasher)

    if extract_view_tag(secret_hash) != announcement.view_tag_bytes:
        return None

    offset = derive_offset_scalar(secret_hash, curve)
    stealth_point = derive_stealth_public_point(spending_public, offset, curve)
    if not addresses_equal(curve.point_to_address(stealth_point), announcement.stealth_address):
        logger.debug(f"View tag matched but address differs at offset {announcement.offset}")
        return None
    return stealth_point, offset


def check_announcement(
    announcement: Announcement,
    spending_private: int,
    viewing_private: int,
    *,
    spending_public: PublicKeyLike | None = None,
    curve: CurveAdapter = SECP256K1,
    hasher: HashAdapter = SHA256,
) -> StealthKeyPair | None:
    """
    Check whether one announcement belongs to the recipient.

    Args:
        announcement: The announcement to test.
        spending_private: Recipient's spending private scalar.
        viewing_private: Recipient's viewing private scalar.
        spending_public: Precomputed spending public key; derived when omitted.
        curve: Curve adapter used by the sender.
        hasher: Secret hash used by the sender.

    Returns:
        The StealthKeyPair controlling the announced address, or None.

    Raises:
        MalformedKey: If the announcement's ephemeral key is undecodable.
        InvalidScalar: If a recipient scalar is invalid.
        SharedSecretDerivationFailed: On a degenerate shared secret.
    """
    check = _recipient_checker(spending_private, viewing_private, curve, hasher, spending_public)
    return check(announcement)


def check_stealth_address(
    announcement: Announcement,
    viewing_private: int,
    spending_public: PublicKeyLike,
    *,
    curve: CurveAdapter = SECP256K1,
    hasher: HashAdapter = SHA256,
) -> StealthKeyPair | None:
    """
    View-only check: does this announcement belong to the holder of `spending_public`?

    Returns:
        StealthKeyPair with private_scalar=None on a match, else None.

    Raises:
        MalformedKey: If the ephemeral key or spending public key is undecodable.
    """
    return _view_only_checker(viewing_private, spending_public, curve, hasher)(announcement)


def compute_stealth_key(
    ephemeral_public_key: PublicKeyLike,
    spending_private: int,
    viewing_private: int,
    *,
    curve: CurveAdapter = SECP256K1,
    hasher: HashAdapter = SHA256,
) -> StealthKeyPair:
    """
    Recover the spendable stealth key pair for a known ephemeral public key.

    No view tag or address check is performed; use this after a delegated
    scan has already identified the announcement.

    Raises:
        MalformedKey / InvalidScalar / SharedSecretDerivationFailed.
    """
    curve.validate_scalar(spending_private)
    ephemeral_public = as_public_point(ephemeral_public_key, curve)
    shared_secret = compute_shared_secret(viewing_private, ephemeral_public, curve)
    offset = derive_offset_scalar(hash_shared_secret(shared_secret, curve, hasher), curve)
    private_scalar = curve.add_scalars(spending_private, offset)
    return StealthKeyPair(
        private_scalar=private_scalar,
        public_point=curve.multiply_generator(private_scalar),
        curve=curve,
    )


# ==============================================================================
# Sequence scans
# ==============================================================================


def _skip(announcement: Announcement, error: StealthError, on_error: ErrorSink | None) -> None:
    logger.warning(f"Skipping announcement at offset {announcement.offset}: {error}")
    if on_error is not None:
        on_error(announcement, error)


def _try_check(
    check: Callable[[Announcement], StealthKeyPair | None],
    announcement: Announcement,
    on_error: ErrorSink | None,
) -> StealthKeyPair | None:
    try:
        return check(announcement)
    except _RECOVERABLE as e:
        _skip(announcement, e, on_error)
        return None


def _scan(
    announcements: Iterable[Announcement],
    check: Callable[[Announcement], StealthKeyPair | None],
    on_error: ErrorSink | None,
) -> Iterator[ScanMatch]:
    for announcement in announcements:
        key_pair = _try_check(check, announcement, on_error)
        if key_pair is not None:
            logger.debug(f"Matched announcement at offset {announcement.offset}")
            yield ScanMatch(announcement, key_pair)


def _recipient_checker(
    spending_private: int,
    viewing_private: int,
    curve: CurveAdapter,
    hasher: HashAdapter,
    spending_public: PublicKeyLike | None = None,
) -> Callable[[Announcement], StealthKeyPair | None]:
    """Validate the recipient keys once and bind them into a per-entry check."""
    curve.validate_scalar(spending_private)
    curve.validate_scalar(viewing_private)
    spend_pub = (
        as_public_point(spending_public, curve)
        if spending_public is not None
        else curve.multiply_generator(spending_private)
    )

    def check(announcement: Announcement) -> StealthKeyPair | None:
        matched = _match_stealth_point(announcement, viewing_private, spend_pub, curve, hasher)
        if matched is None:
            return None
        stealth_point, offset = matched
        return StealthKeyPair(
            private_scalar=curve.add_scalars(spending_private, offset),
            public_point=stealth_point,
            curve=curve,
        )

    return check


def _view_only_checker(
    viewing_private: int,
    spending_public: PublicKeyLike,
    curve: CurveAdapter,
    hasher: HashAdapter,
) -> Callable[[Announcement], StealthKeyPair | None]:
    curve.validate_scalar(viewing_private)
    spend_pub = as_public_point(spending_public, curve)

    def check(announcement: Announcement) -> StealthKeyPair | None:
        matched = _match_stealth_point(announcement, viewing_private, spend_pub, curve, hasher)
        if matched is None:
            return None
        return StealthKeyPair(private_scalar=None, public_point=matched[0], curve=curve)

    return check


def scan_announcements(
    announcements: Iterable[Announcement],
    spending_private: int,
    viewing_private: int,
    *,
    on_error: ErrorSink | None = None,
    curve: CurveAdapter = SECP256K1,
    hasher: HashAdapter = SHA256,
) -> Iterator[ScanMatch]:
    """
    Lazily yield every announcement that resolves to the recipient.

    Args:
        announcements: Any iterable, typically AnnouncementLog.iterate(offset).
        spending_private: Recipient's spending private scalar.
        viewing_private: Recipient's viewing private scalar.
        on_error: Called with (announcement, error) for each skipped entry.

    Returns:
        Iterator of ScanMatch(announcement, stealth_key_pair), in input order.

    Raises:
        InvalidScalar: Immediately, if a recipient scalar is invalid.
    """
    check = _recipient_checker(spending_private, viewing_private, curve, hasher)
    return _scan(announcements, check, on_error)


def scan_announcements_view_only(
    announcements: Iterable[Announcement],
    viewing_private: int,
    spending_public: PublicKeyLike,
    *,
    on_error: ErrorSink | None = None,
    curve: CurveAdapter = SECP256K1,
    hasher: HashAdapter = SHA256,
) -> Iterator[ScanMatch]:
    """
    Delegated scan using only the viewing private key and spending public key.

    Matches carry a StealthKeyPair with private_scalar=None.

    Raises:
        InvalidScalar / MalformedKey: Immediately, on invalid recipient keys.
    """
    check = _view_only_checker(viewing_private, spending_public, curve, hasher)
    return _scan(announcements, check, on_error)


def _chunks(items: Iterable[Announcement], size: int) -> Iterator[list[Announcement]]:
    it = iter(items)
    while chunk := list(islice(it, size)):
        yield chunk


def _completed_in_order(
    executor: ThreadPoolExecutor,
    check: Callable[[Announcement], StealthKeyPair | None],
    chunk: list[Announcement],
    on_error: ErrorSink | None,
) -> Iterator[tuple[int, StealthKeyPair | None]]:
    results = executor.map(lambda a: _try_check(check, a, on_error), chunk)
    yield from enumerate(results)


def _completed_as_ready(
    executor: ThreadPoolExecutor,
    check: Callable[[Announcement], StealthKeyPair | None],
    chunk: list[Announcement],
    on_error: ErrorSink | None,
) -> Iterator[tuple[int, StealthKeyPair | None]]:
    futures = {
        executor.submit(_try_check, check, a, on_error): i
        for i, a in enumerate(chunk)
    }
    for future in as_completed(futures):
        yield futures[future], future.result()


def _parallel_scan(
    announcements: Iterable[Announcement],
    check: Callable[[Announcement], StealthKeyPair | None],
    on_error: ErrorSink | None,
    on_progress: ProgressSink | None,
    workers: int,
    chunk_size: int,
    preserve_order: bool,
) -> Iterator[ScanMatch]:
    completed = _completed_in_order if preserve_order else _completed_as_ready
    with ThreadPoolExecutor(max_workers=workers) as executor:
        for chunk in _chunks(announcements, chunk_size):
            done = [False] * len(chunk)
            # Entries before `frontier` are all processed
            frontier = reported = 0
            for index, key_pair in completed(executor, check, chunk, on_error):
                done[index] = True
                while frontier < len(chunk) and done[frontier]:
                    frontier += 1
                due = key_pair is not None or frontier == len(chunk)
                if on_progress is not None and due and frontier > reported:
                    on_progress(chunk[frontier - 1])
                    reported = frontier
                if key_pair is not None:
                    yield ScanMatch(chunk[index], key_pair)


def scan_announcements_parallel(
    announcements: Iterable[Announcement],
    spending_private: int,
    viewing_private: int,
    *,
    max_workers: int = DEFAULT_SCAN_WORKERS,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    preserve_order: bool = True,
    on_error: ErrorSink | None = None,
    on_progress: ProgressSink | None = None,
    curve: CurveAdapter = SECP256K1,
    hasher: HashAdapter = SHA256,
) -> Iterator[ScanMatch]:
    """
    Scan with a thread pool, one chunk of the input at a time.

    The input is still consumed lazily, `chunk_size` entries at a time, so
    a caller that stops iterating stops the scan after the current chunk.

    Args:
        max_workers: Upper bound on worker threads (capped at CPU count).
        chunk_size: Entries pulled from the input per batch.
        preserve_order: Yield matches in input order. When False, matches
            within a chunk are yielded in completion order.
        on_error: Called for each skipped entry. It runs on the worker
            threads, so it must be thread-safe.
        on_progress: Called on the consuming thread with the last entry
            such that it and every entry before it have been checked and
            their matches yielded or about to be. Reported before each
            match is yielded and once a chunk is finished. With
            preserve_order=False a resume from the reported entry can
            deliver a match a second time.

    Raises:
        InvalidScalar: Immediately, if a recipient scalar is invalid.
        ValueError: If max_workers or chunk_size is not positive.
    """
    if max_workers < 1 or chunk_size < 1:
        raise ValueError("max_workers and chunk_size must be positive")
    check = _recipient_checker(spending_private, viewing_private, curve, hasher)
    workers = min(max_workers, os.cpu_count() or 2)
    return _parallel_scan(
        announcements, check, on_error, on_progress, workers, chunk_size, preserve_order
    )
