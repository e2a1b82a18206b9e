"""
Address utilities: derivation, EIP-55 checksums, validation.

Address format (Ethereum style):
    address = keccak256(X || Y)[12:]    (X, Y = affine coordinates, big-endian)
    display = "0x" + EIP-55 mixed-case checksummed hex

The derivation is one-way: an address cannot be mapped back to a point.

Reference: EIP-55 "Mixed-case checksum address encoding".
"""

from __future__ import annotations

from stealth_kit.crypto.hashing import keccak256
from stealth_kit.errors import InvalidAddress

ADDRESS_LENGTH = 20
"""Width of an address in bytes."""

ADDRESS_HASH_NAME = "keccak256"
"""Hash reserved for address derivation (must not double as the secret hash)."""

_HEX_DIGITS = frozenset("0123456789abcdefABCDEF")


def address_from_coordinates(x: bytes, y: bytes) -> str:
    """
    Derive a checksummed address from the big-endian affine coordinates of a point.

    Args:
        x: X coordinate bytes.
        y: Y coordinate bytes (same width as x).

    Returns:
        "0x"-prefixed EIP-55 address.
    """
    if len(x) != len(y):
        raise InvalidAddress(f"Coordinate widths differ: {len(x)} != {len(y)}")
    return to_checksum_address(keccak256(x + y)[-ADDRESS_LENGTH:])


def to_checksum_address(address: bytes | str) -> str:
    """
    Encode a 20-byte address (raw bytes or hex string) in EIP-55 form.

    Raises:
        InvalidAddress: If the input is not 20 bytes / 40 hex digits.
    """
    raw = address_to_bytes(address, strict_checksum=False)
    lower = raw.hex()
    digest = keccak256(lower.encode("ascii")).hex()
    chars = []
    for i, ch in enumerate(lower):
        if ch.isalpha() and int(digest[i], 16) >= 8:
            chars.append(ch.upper())
        else:
            chars.append(ch)
    return "0x" + "".join(chars)


def address_to_bytes(address: bytes | str, strict_checksum: bool = True) -> bytes:
    """
    Convert an address to its 20 raw bytes.

    Args:
        address: Raw bytes or "0x"-prefixed (or bare) hex string.
        strict_checksum: If True, a mixed-case string must carry a valid
            EIP-55 checksum. All-lower and all-upper strings are accepted.

    Raises:
        InvalidAddress: On bad length, non-hex characters or checksum mismatch.
    """
    if isinstance(address, (bytes, bytearray)):
        raw = bytes(address)
        if len(raw) != ADDRESS_LENGTH:
            raise InvalidAddress(f"Expected {ADDRESS_LENGTH} address bytes, got {len(raw)}")
        return raw

    if not isinstance(address, str):
        raise InvalidAddress(f"Unsupported address type: {type(address).__name__}")

    body = address[2:] if address[:2] in ("0x", "0X") else address
    if len(body) != ADDRESS_LENGTH * 2:
        raise InvalidAddress(
            f"Expected {ADDRESS_LENGTH * 2} hex digits, got {len(body)}"
        )
    if not set(body) <= _HEX_DIGITS:
        raise InvalidAddress(f"Address contains non-hex characters: {address!r}")

    raw = bytes.fromhex(body)
    if strict_checksum and body != body.lower() and body != body.upper():
        expected = to_checksum_address(raw)
        if expected[2:] != body:
            raise InvalidAddress(
                f"Checksum mismatch: got {address}, expected {expected}"
            )
    return raw


def validate_address(address: bytes | str) -> bool:
    """
    Validate an address (length, hex, EIP-55 checksum when mixed-case).

    Returns:
        True if valid

    Raises:
        InvalidAddress: if the address is malformed or has a bad checksum
    """
    address_to_bytes(address, strict_checksum=True)
    return True


def is_valid_address(address: bytes | str) -> bool:
    """Check an address without raising."""
    try:
        return validate_address(address)
    except InvalidAddress:
        return False


def addresses_equal(a: bytes | str, b: bytes | str) -> bool:
    """Compare two addresses byte-wise, ignoring hex case."""
    return address_to_bytes(a, strict_checksum=False) == address_to_bytes(b, strict_checksum=False)
