"""
Configuration for stealth address derivation and scanning.

Sender and recipient must run with the same curve and secret hash,
otherwise derivation diverges silently. validate() catches the
misconfigurations that can be detected locally at startup.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass

from stealth_kit.crypto.address import ADDRESS_HASH_NAME
from stealth_kit.crypto.curve import CurveAdapter, get_curve
from stealth_kit.crypto.hashing import VIEW_TAG_LENGTH, HashAdapter, get_hash
from stealth_kit.errors import ConfigurationError

MIN_DIGEST_SIZE = 32

_TRUE = ("1", "true", "yes", "on")
_FALSE = ("0", "false", "no", "off")


@dataclass
class StealthConfig:
    """
    Protocol and scanning settings.

    Args:
        curve:               Registered curve name ("secp256k1", "nist256p")
        hash_name:           Registered secret-hash name ("sha256", "blake2b256")
        scan_workers:        Thread pool size for parallel scans
        scan_chunk_size:     Entries pulled per batch in parallel scans
        preserve_scan_order: Yield parallel scan matches in log order
    """
    curve: str = "secp256k1"
    hash_name: str = "sha256"
    scan_workers: int = 4
    scan_chunk_size: int = 256
    preserve_scan_order: bool = True

    def validate(self) -> StealthConfig:
        """
        Check the configuration. Returns self for chaining.

        Raises:
            ConfigurationError: Unknown curve/hash, a secret hash that doubles
                as the address hash, a digest shorter than 32 bytes, or
                non-positive scan settings.
        """
        self.curve_adapter()
        hasher = self.hash_adapter()

        if hasher.name == ADDRESS_HASH_NAME:
            raise ConfigurationError(
                f"Secret hash '{hasher.name}' is reserved for address derivation"
            )
        if hasher.digest_size < max(MIN_DIGEST_SIZE, VIEW_TAG_LENGTH):
            raise ConfigurationError(
                f"Secret hash digest must be at least {MIN_DIGEST_SIZE} bytes, "
                f"'{hasher.name}' yields {hasher.digest_size}"
            )
        if self.scan_workers < 1:
            raise ConfigurationError(f"scan_workers must be positive, got {self.scan_workers}")
        if self.scan_chunk_size < 1:
            raise ConfigurationError(
                f"scan_chunk_size must be positive, got {self.scan_chunk_size}"
            )
        return self

    def curve_adapter(self) -> CurveAdapter:
        return get_curve(self.curve)

    def hash_adapter(self) -> HashAdapter:
        return get_hash(self.hash_name)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> StealthConfig:
        """
        Build a validated config from STEALTH_* environment variables.

        Variables:
            STEALTH_CURVE, STEALTH_HASH, STEALTH_SCAN_WORKERS,
            STEALTH_SCAN_CHUNK_SIZE, STEALTH_PRESERVE_SCAN_ORDER

        Raises:
            ConfigurationError: On unparsable values or a failed validate().
        """
        env = os.environ if environ is None else environ
        defaults = cls()
        try:
            config = cls(
                curve=env.get("STEALTH_CURVE", defaults.curve),
                hash_name=env.get("STEALTH_HASH", defaults.hash_name),
                scan_workers=int(env.get("STEALTH_SCAN_WORKERS", defaults.scan_workers)),
                scan_chunk_size=int(env.get("STEALTH_SCAN_CHUNK_SIZE", defaults.scan_chunk_size)),
                preserve_scan_order=_parse_bool(
                    env.get("STEALTH_PRESERVE_SCAN_ORDER"), defaults.preserve_scan_order
                ),
            )
        except ValueError as e:
            if isinstance(e, ConfigurationError):
                raise
            raise ConfigurationError(f"Invalid stealth configuration: {e}") from e
        return config.validate()


def _parse_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    lowered = value.strip().lower()
    if lowered in _TRUE:
        return True
    if lowered in _FALSE:
        return False
    raise ConfigurationError(f"Expected a boolean, got {value!r}")
