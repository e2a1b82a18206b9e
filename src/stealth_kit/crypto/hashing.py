"""
Hash Adapter: fixed-output hash functions for shared-secret compression.

The secret hash turns the compressed encoding of a shared secret into
    - the 12-byte view tag (most significant bytes of the digest), and
    - the offset scalar (full digest reduced mod n).

It is never used for address derivation. Addresses use keccak-256
(Ethereum style), so keccak-256 is registered here but rejected as a
secret hash by StealthConfig.validate().
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass
from typing import Callable

from Crypto.Hash import keccak

from stealth_kit.errors import ConfigurationError

VIEW_TAG_LENGTH = 12
"""Number of leading digest bytes published as the view tag."""


def keccak256(data: bytes) -> bytes:
    """Compute the Ethereum keccak-256 digest (pre-standard SHA-3 padding)."""
    return keccak.new(digest_bits=256, data=data).digest()


def _sha256(data: bytes) -> bytes:
    return hashlib.sha256(data).digest()


def _blake2b256(data: bytes) -> bytes:
    return hashlib.blake2b(data, digest_size=32).digest()


@dataclass(frozen=True)
class HashAdapter:
    """
    A named, fixed-width hash function.

    Attributes:
        name: Registry name (e.g. "sha256").
        digest_size: Output width in bytes.
    """
    name: str
    digest_size: int
    _fn: Callable[[bytes], bytes]

    def digest(self, data: bytes) -> bytes:
        """Hash `data` and return exactly `digest_size` bytes."""
        out = self._fn(bytes(data))
        if len(out) != self.digest_size:
            raise ConfigurationError(
                f"Hash {self.name} returned {len(out)} bytes, expected {self.digest_size}"
            )
        return out

    def __call__(self, data: bytes) -> bytes:
        return self.digest(data)

    def __repr__(self) -> str:
        return f"HashAdapter({self.name!r}, digest_size={self.digest_size})"


SHA256 = HashAdapter("sha256", 32, _sha256)
BLAKE2B256 = HashAdapter("blake2b256", 32, _blake2b256)
KECCAK256 = HashAdapter("keccak256", 32, keccak256)

_HASHES: dict[str, HashAdapter] = {h.name: h for h in (SHA256, BLAKE2B256, KECCAK256)}


def get_hash(name: str) -> HashAdapter:
    """
    Look up a registered hash adapter by name.

    Raises:
        ConfigurationError: If no hash is registered under `name`.
    """
    try:
        return _HASHES[name.lower()]
    except KeyError:
        raise ConfigurationError(
            f"Unknown hash '{name}', expected one of {sorted(_HASHES)}"
        ) from None


def available_hashes() -> list[str]:
    """Names of all registered hash adapters."""
    return sorted(_HASHES)
