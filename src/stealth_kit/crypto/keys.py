"""
Key Material: recipient and ephemeral key pairs, public key encoding,
and the stealth meta-address.

A recipient holds two independent key pairs:
    - spending: controls custody of every stealth address derived for them
    - viewing:  detects which announcements are theirs; may be handed to a
                delegated scanning service without granting spend authority

The sender draws one fresh ephemeral key pair per send and discards it.

Stealth meta-address format:
    "st:<chain>:0x" + hex(spending_public_compressed) + hex(viewing_public_compressed)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import ecdsa.ellipticcurve as ec

from stealth_kit.crypto.curve import SECP256K1, CurveAdapter, Point, get_curve
from stealth_kit.errors import InvalidPoint, InvalidScalar, MalformedKey

META_ADDRESS_PREFIX = "st"
DEFAULT_CHAIN = "eth"

PublicKeyLike = bytes | str | ec.AbstractPoint


# ==============================================================================
# Key pairs
# ==============================================================================


@dataclass(frozen=True)
class KeyPair:
    """
    A (private scalar, public point) pair with public_point = private_scalar · G.

    The private scalar is excluded from repr.
    """
    private_scalar: int = field(repr=False)
    public_point: Point = field(repr=False)
    curve: CurveAdapter = field(default=SECP256K1, compare=False)

    @property
    def public_key(self) -> bytes:
        """Compressed SEC1 encoding of the public point."""
        return self.curve.encode_point(self.public_point)

    @property
    def public_key_hex(self) -> str:
        return self.public_key.hex()

    def __repr__(self) -> str:
        return f"{type(self).__name__}(public_key={self.public_key_hex}, curve={self.curve.name})"


@dataclass(frozen=True)
class StealthKeyPair(KeyPair):
    """
    Key pair controlling one stealth address.

    private_scalar = (spending_private + offset) mod n
    public_point   = spending_public + offset · G

    `private_scalar` is None when the pair was recovered by a view-only
    (delegated) scan that had no access to the spending private key.
    """

    def __repr__(self) -> str:
        return f"StealthKeyPair(address={self.address}, can_spend={self.can_spend})"

    @property
    def address(self) -> str:
        """EIP-55 address controlled by this key pair."""
        return self.curve.point_to_address(self.public_point)

    @property
    def can_spend(self) -> bool:
        return self.private_scalar is not None


def generate_keypair(curve: CurveAdapter = SECP256K1) -> KeyPair:
    """
    Generate a fresh key pair from the OS CSPRNG.

    Returns:
        KeyPair with private scalar in [1, n-1].
    """
    k = curve.random_scalar()
    return KeyPair(private_scalar=k, public_point=curve.multiply_generator(k), curve=curve)


def keypair_from_private(private_scalar: int, curve: CurveAdapter = SECP256K1) -> KeyPair:
    """
    Rebuild a key pair from its private scalar.

    Raises:
        InvalidScalar: If the scalar is outside [1, n-1].
    """
    return KeyPair(
        private_scalar=private_scalar,
        public_point=curve.multiply_generator(private_scalar),
        curve=curve,
    )


def validate_keypair(pair: KeyPair) -> bool:
    """
    Check that pair.public_point == pair.private_scalar · G.

    Returns:
        True if consistent, False otherwise (including invalid scalars/points).
    """
    if pair.private_scalar is None:
        return False
    try:
        expected = pair.curve.multiply_generator(pair.private_scalar)
        pair.curve.validate_point(pair.public_point)
    except (InvalidScalar, InvalidPoint):
        return False
    return pair.curve.points_equal(expected, pair.public_point)


# ==============================================================================
# Public key encoding
# ==============================================================================


def encode_public_key(point: ec.AbstractPoint, curve: CurveAdapter = SECP256K1) -> bytes:
    """
    Encode a public point as its canonical 33-byte compressed form.

    Raises:
        InvalidPoint: If the point is the identity or off-curve.
    """
    return curve.encode_point(point, compressed=True)


def decode_public_key(data: bytes | str, curve: CurveAdapter = SECP256K1) -> Point:
    """
    Decode an encoded public key (raw bytes or hex, compressed or uncompressed).

    Raises:
        MalformedKey: On bad hex, bad length, bad prefix, or off-curve point.
    """
    if isinstance(data, str):
        body = data[2:] if data[:2] in ("0x", "0X") else data
        try:
            raw = bytes.fromhex(body)
        except ValueError:
            raise MalformedKey(f"Public key is not valid hex: {data[:20]!r}") from None
    elif isinstance(data, (bytes, bytearray, memoryview)):
        raw = bytes(data)
    else:
        raise MalformedKey(f"Unsupported public key type: {type(data).__name__}")

    try:
        return curve.decode_point(raw)
    except InvalidPoint as e:
        raise MalformedKey(f"Malformed public key: {e}") from e


def as_public_point(value: PublicKeyLike, curve: CurveAdapter = SECP256K1) -> Point:
    """
    Accept a point, encoded bytes, or hex string and return a validated point.

    Raises:
        MalformedKey: If an encoded key cannot be decoded.
        InvalidPoint: If a point object is invalid.
    """
    if isinstance(value, (ec.PointJacobi, ec.Point)):
        return curve.validate_point(value)
    return decode_public_key(value, curve)


# ==============================================================================
# Recipient keys & meta-address
# ==============================================================================


@dataclass(frozen=True)
class StealthMetaAddress:
    """
    The recipient's published (spending, viewing) public keys.

    Attributes:
        spending_public_key: 33-byte compressed spending public key.
        viewing_public_key: 33-byte compressed viewing public key.
        chain: Short chain tag carried in the string form.
    """
    spending_public_key: bytes
    viewing_public_key: bytes
    chain: str = DEFAULT_CHAIN

    def encode(self) -> str:
        """Return the "st:<chain>:0x..." string form."""
        return (
            f"{META_ADDRESS_PREFIX}:{self.chain}:0x"
            f"{self.spending_public_key.hex()}{self.viewing_public_key.hex()}"
        )

    def __str__(self) -> str:
        return self.encode()

    def spending_point(self, curve: CurveAdapter = SECP256K1) -> Point:
        return decode_public_key(self.spending_public_key, curve)

    def viewing_point(self, curve: CurveAdapter = SECP256K1) -> Point:
        return decode_public_key(self.viewing_public_key, curve)

    @classmethod
    def parse(cls, text: str, curve: CurveAdapter = SECP256K1) -> StealthMetaAddress:
        """
        Parse and validate a meta-address string.

        Both embedded keys are decoded, so an off-curve key is rejected here.

        Raises:
            MalformedKey: On a bad prefix, bad length, bad hex or off-curve key.
        """
        parts = text.split(":")
        if len(parts) != 3 or parts[0] != META_ADDRESS_PREFIX or not parts[1]:
            raise MalformedKey(f"Meta-address must look like 'st:<chain>:0x...', got {text[:24]!r}")
        chain, body = parts[1], parts[2]
        if body[:2] not in ("0x", "0X"):
            raise MalformedKey("Meta-address key material must be 0x-prefixed")

        key_len = curve.compressed_size
        try:
            raw = bytes.fromhex(body[2:])
        except ValueError:
            raise MalformedKey("Meta-address key material is not valid hex") from None
        if len(raw) != 2 * key_len:
            raise MalformedKey(
                f"Meta-address key material must be {2 * key_len} bytes, got {len(raw)}"
            )

        spend, view = raw[:key_len], raw[key_len:]
        decode_public_key(spend, curve)
        decode_public_key(view, curve)
        return cls(spending_public_key=spend, viewing_public_key=view, chain=chain)


@dataclass(frozen=True)
class RecipientKeys:
    """
    A recipient's long-term spending and viewing key pairs.

    SECURITY: `spending.private_scalar` grants custody of every stealth
    address derived for this recipient. Store `to_dict()` output encrypted.
    """
    spending: KeyPair
    viewing: KeyPair

    @classmethod
    def generate(cls, curve: CurveAdapter = SECP256K1) -> RecipientKeys:
        """Generate two independent key pairs."""
        return cls(spending=generate_keypair(curve), viewing=generate_keypair(curve))

    @property
    def curve(self) -> CurveAdapter:
        return self.spending.curve

    def meta_address(self, chain: str = DEFAULT_CHAIN) -> StealthMetaAddress:
        """The publishable meta-address for these keys."""
        return StealthMetaAddress(
            spending_public_key=self.spending.public_key,
            viewing_public_key=self.viewing.public_key,
            chain=chain,
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a JSON-safe dict (for encrypted storage)."""
        return {
            "curve": self.curve.name,
            "spending_private": hex(self.spending.private_scalar),
            "viewing_private": hex(self.viewing.private_scalar),
        }

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> RecipientKeys:
        """Deserialize from a dict produced by to_dict()."""
        curve = get_curve(d.get("curve", SECP256K1.name))
        return cls(
            spending=keypair_from_private(int(d["spending_private"], 16), curve),
            viewing=keypair_from_private(int(d["viewing_private"], 16), curve),
        )
