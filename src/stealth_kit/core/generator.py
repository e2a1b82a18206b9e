"""
Stealth Address Generator: sender side.

Given a recipient's published (spending, viewing) public keys and a fresh
ephemeral key pair (e, E = e·G):

    1. S            = e · P_view                  (shared secret)
    2. h            = Hash(compressed(S))
    3. view_tag     = h[:12]
    4. offset       = int(h) mod n
    5. P_stealth    = P_spend + offset · G
    6. address      = keccak256(P_stealth.x || P_stealth.y)[12:]

The recipient recomputes S = v · E with the viewing private key v, which
equals e · P_view because v · (e · G) == e · (v · G).

The shared secret is always hashed in its 33-byte SEC1 compressed form.
Sender and recipient must agree on this encoding; a mismatch silently
breaks recovery.

Every step is deterministic in its inputs; randomness enters only through
the ephemeral key, which must be fresh per send. Nothing is retained
between calls.
"""

from __future__ import annotations

import ecdsa.ellipticcurve as ec

from stealth_kit.core.models import GeneratedStealthAddress
from stealth_kit.crypto.curve import SECP256K1, CurveAdapter, Point
from stealth_kit.crypto.hashing import SHA256, VIEW_TAG_LENGTH, HashAdapter
from stealth_kit.crypto.keys import (
    KeyPair,
    PublicKeyLike,
    StealthMetaAddress,
    as_public_point,
    generate_keypair,
)
from stealth_kit.errors import InvalidPoint, InvalidScalar, SharedSecretDerivationFailed

# ==============================================================================
# Derivation steps shared with the scanner
# ==============================================================================


def compute_shared_secret(
    private_scalar: int,
    public_point: ec.AbstractPoint,
    curve: CurveAdapter = SECP256K1,
) -> Point:
    """
    Compute the Diffie-Hellman shared secret private_scalar · public_point.

    Sender: (ephemeral private, viewing public).
    Recipient: (viewing private, ephemeral public).

    Raises:
        InvalidScalar / InvalidPoint: On invalid inputs.
        SharedSecretDerivationFailed: If the product is the identity element.
    """
    secret = curve.scalar_multiply(private_scalar, public_point, allow_identity=True)
    if curve.is_identity(secret):
        raise SharedSecretDerivationFailed(
            "Shared secret is the identity element; regenerate the ephemeral key"
        )
    return secret


def hash_shared_secret(
    shared_secret: ec.AbstractPoint,
    curve: CurveAdapter = SECP256K1,
    hasher: HashAdapter = SHA256,
) -> bytes:
    """Hash the compressed encoding of the shared secret."""
    return hasher.digest(curve.encode_point(shared_secret, compressed=True))


def extract_view_tag(secret_hash: bytes) -> bytes:
    """Return the most significant VIEW_TAG_LENGTH bytes of the secret hash."""
    return bytes(secret_hash[:VIEW_TAG_LENGTH])


def derive_offset_scalar(secret_hash: bytes, curve: CurveAdapter = SECP256K1) -> int:
    """
    Reduce the full secret hash into the scalar field.

    Raises:
        SharedSecretDerivationFailed: If the digest reduces to zero.
    """
    try:
        return curve.scalar_from_digest(secret_hash)
    except InvalidScalar as e:
        raise SharedSecretDerivationFailed(
            "Secret hash reduces to the zero scalar; regenerate the ephemeral key"
        ) from e


def derive_stealth_public_point(
    spending_public_point: ec.AbstractPoint,
    offset_scalar: int,
    curve: CurveAdapter = SECP256K1,
) -> Point:
    """Compute P_spend + offset · G."""
    return curve.point_add(spending_public_point, curve.multiply_generator(offset_scalar))


# ==============================================================================
# Generation
# ==============================================================================


def generate_stealth_address(
    spending_public_key: PublicKeyLike,
    viewing_public_key: PublicKeyLike,
    ephemeral: KeyPair | None = None,
    *,
    curve: CurveAdapter = SECP256K1,
    hasher: HashAdapter = SHA256,
) -> GeneratedStealthAddress:
    """
    Derive a one-time stealth address for a recipient.

    All inputs are validated before any derivation step runs.

    Args:
        spending_public_key: Recipient's spending public key (point, bytes or hex).
        viewing_public_key: Recipient's viewing public key (point, bytes or hex).
        ephemeral: A freshly generated ephemeral key pair. Drawn from the
            OS CSPRNG when omitted. Never reuse one across sends.
        curve: Curve adapter shared with the recipient.
        hasher: Secret hash shared with the recipient.

    Returns:
        GeneratedStealthAddress with the address, ephemeral public key and view tag.

    Raises:
        MalformedKey: If an encoded recipient key cannot be decoded.
        InvalidScalar / InvalidPoint: On invalid key material.
        SharedSecretDerivationFailed: On a degenerate shared secret; the caller
            must retry with a new ephemeral key.
    """
    spend_pub = as_public_point(spending_public_key, curve)
    view_pub = as_public_point(viewing_public_key, curve)
    if ephemeral is None:
        ephemeral = generate_keypair(curve)
    ephemeral_public = curve.validate_point(ephemeral.public_point)
    if not curve.points_equal(curve.multiply_generator(ephemeral.private_scalar), ephemeral_public):
        raise InvalidPoint("Ephemeral public key does not match its private scalar")

    shared_secret = compute_shared_secret(ephemeral.private_scalar, view_pub, curve)
    secret_hash = hash_shared_secret(shared_secret, curve, hasher)
    view_tag = extract_view_tag(secret_hash)
    offset = derive_offset_scalar(secret_hash, curve)
    stealth_point = derive_stealth_public_point(spend_pub, offset, curve)

    return GeneratedStealthAddress(
        stealth_address=curve.point_to_address(stealth_point),
        ephemeral_public_key=curve.encode_point(ephemeral_public),
        view_tag=view_tag,
        stealth_public_key=curve.encode_point(stealth_point),
    )


def generate_from_meta_address(
    meta_address: StealthMetaAddress | str,
    ephemeral: KeyPair | None = None,
    *,
    curve: CurveAdapter = SECP256K1,
    hasher: HashAdapter = SHA256,
) -> GeneratedStealthAddress:
    """
    Derive a stealth address from a "st:<chain>:0x..." meta-address.

    Raises:
        MalformedKey: If the meta-address cannot be parsed.
    """
    if isinstance(meta_address, str):
        meta_address = StealthMetaAddress.parse(meta_address, curve)
    return generate_stealth_address(
        meta_address.spending_public_key,
        meta_address.viewing_public_key,
        ephemeral,
        curve=curve,
        hasher=hasher,
    )
