"""
stealth_kit.crypto: Curve, hash and key primitives.

Provides:
- CurveAdapter: scalar / point arithmetic and SEC1 encoding (ecdsa)
- HashAdapter: secret hash for view tags and offsets
- Address derivation and EIP-55 checksums (keccak-256)
- KeyPair / RecipientKeys / StealthMetaAddress
"""

from stealth_kit.crypto.address import (
    ADDRESS_LENGTH,
    is_valid_address,
    to_checksum_address,
    validate_address,
)
from stealth_kit.crypto.curve import (
    NIST256P,
    SECP256K1,
    CurveAdapter,
    available_curves,
    get_curve,
)
from stealth_kit.crypto.hashing import (
    BLAKE2B256,
    KECCAK256,
    SHA256,
    VIEW_TAG_LENGTH,
    HashAdapter,
    available_hashes,
    get_hash,
    keccak256,
)
from stealth_kit.crypto.keys import (
    KeyPair,
    RecipientKeys,
    StealthKeyPair,
    StealthMetaAddress,
    decode_public_key,
    encode_public_key,
    generate_keypair,
    keypair_from_private,
    validate_keypair,
)

__all__ = [
    # Curve
    "CurveAdapter",
    "SECP256K1",
    "NIST256P",
    "get_curve",
    "available_curves",
    # Hash
    "HashAdapter",
    "SHA256",
    "BLAKE2B256",
    "KECCAK256",
    "VIEW_TAG_LENGTH",
    "get_hash",
    "available_hashes",
    "keccak256",
    # Address
    "ADDRESS_LENGTH",
    "is_valid_address",
    "to_checksum_address",
    "validate_address",
    # Keys
    "KeyPair",
    "RecipientKeys",
    "StealthKeyPair",
    "StealthMetaAddress",
    "decode_public_key",
    "encode_public_key",
    "generate_keypair",
    "keypair_from_private",
    "validate_keypair",
]
