"""
Error taxonomy for stealth address derivation and scanning.

All errors derive from StealthError, itself a ValueError, so callers that
already handle ValueError for bad input keep working.

Propagation:
    - Single operations (generate, check one announcement, decode one key)
      raise directly.
    - Sequence scans skip an entry on MalformedKey / InvalidPoint /
      InvalidScalar / SharedSecretDerivationFailed and continue.
    - ConfigurationError always propagates.
"""

from __future__ import annotations


class StealthError(ValueError):
    """Base class for all stealth_kit errors."""
    pass


class InvalidScalar(StealthError):
    """Raised when a scalar is zero, negative, non-integer or outside [1, n-1]."""
    pass


class InvalidPoint(StealthError):
    """Raised when a point is malformed, off-curve, or the identity where it is not allowed."""
    pass


class MalformedKey(StealthError):
    """Raised when an encoded public key has a bad length, prefix or is off-curve."""
    pass


class InvalidAddress(StealthError):
    """Raised for malformed addresses or EIP-55 checksum mismatches."""
    pass


class SharedSecretDerivationFailed(StealthError):
    """
    Raised when the shared secret (or the offset derived from it) is degenerate.

    The caller must generate a new ephemeral key and retry.
    """
    pass


class AuthorizationFailed(StealthError):
    """Raised when a registry write is rejected."""
    pass


class UnknownRecipient(StealthError):
    """Raised when an identifier has no published keys in the registry."""
    pass


class ConfigurationError(StealthError):
    """Raised for curve / hash misconfiguration detected at startup."""
    pass


class StealthApiError(StealthError):
    """Raised when the stealth HTTP API returns an unexpected error."""
    pass
