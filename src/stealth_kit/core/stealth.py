"""
Service handles tying the generator and scanner to their collaborators.

The registry and the announcement log are injected explicitly: there is
no module-level registry. Any object satisfying KeyRegistry /
AnnouncementLog works (in-memory, HTTP client, on-chain adapter).

Usage:
    registry, log = InMemoryKeyRegistry(), InMemoryAnnouncementLog()

    receiver = StealthReceiver(RecipientKeys.generate(), log)
    receiver.register(registry, "alice")

    sender = StealthSender(registry, log)
    announcement = sender.send("alice", metadata=b"...")

    for match in receiver.scan():
        print(match.stealth_key_pair.address)
"""

from __future__ import annotations

import logging
from collections.abc import Iterator

from stealth_kit.config import StealthConfig
from stealth_kit.core.announcements import AnnouncementLog
from stealth_kit.core.generator import generate_stealth_address
from stealth_kit.core.models import Announcement, GeneratedStealthAddress, ScanMatch
from stealth_kit.core.registry import KeyRegistry
from stealth_kit.core.scanner import ErrorSink, scan_announcements, scan_announcements_parallel
from stealth_kit.crypto.keys import RecipientKeys
from stealth_kit.errors import ConfigurationError, UnknownRecipient

logger = logging.getLogger("stealth_kit.stealth")


class StealthSender:
    """
    Sender-side handle: look up a recipient, derive a stealth address, announce it.

    A fresh ephemeral key is drawn for every prepare() / send() call.
    """

    def __init__(
        self,
        registry: KeyRegistry,
        log: AnnouncementLog,
        config: StealthConfig | None = None,
    ) -> None:
        self.registry = registry
        self.log = log
        self.config = (config or StealthConfig()).validate()
        self._curve = self.config.curve_adapter()
        self._hasher = self.config.hash_adapter()

    def prepare(self, identifier: str) -> GeneratedStealthAddress:
        """
        Derive a stealth address for a registered recipient without announcing it.

        Raises:
            UnknownRecipient: If `identifier` has no published keys.
            SharedSecretDerivationFailed: On a degenerate ephemeral key; call again.
        """
        keys = self.registry.get_public_keys(identifier)
        if keys is None:
            raise UnknownRecipient(f"No stealth keys registered for '{identifier}'")
        spending_public_key, viewing_public_key = keys
        return generate_stealth_address(
            spending_public_key,
            viewing_public_key,
            curve=self._curve,
            hasher=self._hasher,
        )

    def announce(self, generated: GeneratedStealthAddress, metadata: bytes = b"") -> Announcement:
        """Append a prepared stealth address to the log."""
        offset = self.log.append(
            generated.ephemeral_public_key,
            generated.stealth_address,
            generated.view_tag,
            metadata,
        )
        logger.info(f"Announced stealth address {generated.stealth_address} at offset {offset}")
        return generated.to_announcement(metadata).model_copy(update={"offset": offset})

    def send(self, identifier: str, metadata: bytes = b"") -> Announcement:
        """
        Derive a stealth address for `identifier` and announce it.

        Returns:
            The announcement as appended, with its log offset.
        """
        return self.announce(self.prepare(identifier), metadata)


class StealthReceiver:
    """
    Recipient-side handle: publish keys and scan the log.

    `checkpoint` is the offset of the next entry to pull from the log. It
    advances as entries are pulled, so a later scan() resumes where the
    previous one stopped, including after early termination. A parallel
    scan pulls a whole chunk at a time but moves the checkpoint only past
    entries that are fully checked, so an early stop never skips a match.
    """

    def __init__(
        self,
        keys: RecipientKeys,
        log: AnnouncementLog,
        config: StealthConfig | None = None,
        checkpoint: int = 0,
    ) -> None:
        self.keys = keys
        self.log = log
        self.config = (config or StealthConfig()).validate()
        self.checkpoint = checkpoint
        self._curve = self.config.curve_adapter()
        self._hasher = self.config.hash_adapter()
        if keys.curve.name != self._curve.name:
            raise ConfigurationError(
                f"Recipient keys are on {keys.curve.name}, config uses {self._curve.name}"
            )

    def register(self, registry: KeyRegistry, identifier: str, caller: str | None = None) -> None:
        """Publish this recipient's public keys under `identifier`."""
        registry.set_public_keys(
            identifier,
            self.keys.spending.public_key,
            self.keys.viewing.public_key,
            caller=caller,
        )

    def _advance(self, announcement: Announcement) -> None:
        if announcement.offset is not None:
            self.checkpoint = announcement.offset + 1

    def _entries(self, from_offset: int | None, advance: bool = True) -> Iterator[Announcement]:
        start = self.checkpoint if from_offset is None else from_offset
        for announcement in self.log.iterate(start):
            if advance:
                self._advance(announcement)
            yield announcement

    def scan(
        self, from_offset: int | None = None, on_error: ErrorSink | None = None
    ) -> Iterator[ScanMatch]:
        """
        Lazily scan the log from `from_offset` (default: the checkpoint).

        Returns:
            Iterator of ScanMatch with spendable StealthKeyPairs.
        """
        return scan_announcements(
            self._entries(from_offset),
            self.keys.spending.private_scalar,
            self.keys.viewing.private_scalar,
            on_error=on_error,
            curve=self._curve,
            hasher=self._hasher,
        )

    def scan_parallel(
        self, from_offset: int | None = None, on_error: ErrorSink | None = None
    ) -> Iterator[ScanMatch]:
        """Like scan(), using the configured thread pool and chunk size."""
        return scan_announcements_parallel(
            self._entries(from_offset, advance=False),
            self.keys.spending.private_scalar,
            self.keys.viewing.private_scalar,
            max_workers=self.config.scan_workers,
            chunk_size=self.config.scan_chunk_size,
            preserve_order=self.config.preserve_scan_order,
            on_error=on_error,
            on_progress=self._advance,
            curve=self._curve,
            hasher=self._hasher,
        )
