"""Unit tests for key pairs, public key encoding and meta-addresses."""

import pytest

from stealth_kit.crypto.curve import NIST256P, SECP256K1
from stealth_kit.crypto.keys import (
    KeyPair,
    RecipientKeys,
    StealthKeyPair,
    StealthMetaAddress,
    as_public_point,
    decode_public_key,
    encode_public_key,
    generate_keypair,
    keypair_from_private,
    validate_keypair,
)
from stealth_kit.errors import InvalidScalar, MalformedKey

G_COMPRESSED = "0279be667ef9dcbbac55a06295ce870b07029bfcdb2dce28d959f2815b16f81798"


class TestKeyPair:

    def test_generated_pair_is_consistent(self):
        pair = generate_keypair()
        assert validate_keypair(pair)
        assert len(pair.public_key) == 33

    def test_from_private(self):
        pair = keypair_from_private(1)
        assert pair.public_key_hex == G_COMPRESSED

    def test_from_zero_rejected(self):
        with pytest.raises(InvalidScalar):
            keypair_from_private(0)

    def test_mismatched_pair_invalid(self):
        pair = KeyPair(private_scalar=2, public_point=SECP256K1.generator)
        assert not validate_keypair(pair)

    def test_zero_scalar_pair_invalid(self):
        assert not validate_keypair(KeyPair(private_scalar=0, public_point=SECP256K1.generator))

    def test_repr_hides_private_scalar(self):
        pair = keypair_from_private(0xDEADBEEF)
        assert "deadbeef" not in repr(pair).lower()
        assert pair.public_key_hex in repr(pair)

    def test_stealth_keypair_address(self):
        pair = StealthKeyPair(private_scalar=1, public_point=SECP256K1.generator)
        assert pair.address == "0x7E5F4552091A69125d5DfCb7b8C2659029395Bdf"
        assert pair.can_spend

    def test_view_only_stealth_keypair(self):
        pair = StealthKeyPair(private_scalar=None, public_point=SECP256K1.generator)
        assert not pair.can_spend
        assert not validate_keypair(pair)


class TestPublicKeyEncoding:

    def test_encode_decode(self):
        pair = generate_keypair()
        encoded = encode_public_key(pair.public_point)
        assert SECP256K1.points_equal(decode_public_key(encoded), pair.public_point)

    def test_decode_hex_with_prefix(self):
        point = decode_public_key("0x" + G_COMPRESSED)
        assert SECP256K1.points_equal(point, SECP256K1.generator)

    @pytest.mark.parametrize(
        "bad",
        [
            "zz" * 33,
            b"\x02" * 10,
            b"\x07" + bytes.fromhex(G_COMPRESSED)[1:],
            b"\x02" + b"\xff" * 32,
            12345,
        ],
    )
    def test_malformed_keys(self, bad):
        with pytest.raises(MalformedKey):
            decode_public_key(bad)

    def test_as_public_point_accepts_all_forms(self):
        G = SECP256K1.generator
        for value in (G, bytes.fromhex(G_COMPRESSED), G_COMPRESSED):
            assert SECP256K1.points_equal(as_public_point(value), G)


class TestMetaAddress:

    def test_encode_parse_roundtrip(self):
        keys = RecipientKeys.generate()
        meta = keys.meta_address()
        text = meta.encode()
        assert text.startswith("st:eth:0x")
        assert len(text) == len("st:eth:0x") + 132
        assert StealthMetaAddress.parse(text) == meta
        assert str(meta) == text

    def test_custom_chain(self):
        meta = RecipientKeys.generate().meta_address(chain="base")
        assert StealthMetaAddress.parse(meta.encode()).chain == "base"

    def test_points(self):
        keys = RecipientKeys.generate()
        meta = keys.meta_address()
        assert SECP256K1.points_equal(meta.spending_point(), keys.spending.public_point)
        assert SECP256K1.points_equal(meta.viewing_point(), keys.viewing.public_point)

    @pytest.mark.parametrize(
        "text",
        [
            "st:eth:" + G_COMPRESSED * 2,
            "xx:eth:0x" + G_COMPRESSED * 2,
            "st::0x" + G_COMPRESSED * 2,
            "st:eth:0x" + G_COMPRESSED,
            "st:eth:0x" + G_COMPRESSED + "zz" * 33,
            "st:eth:0x" + G_COMPRESSED + "02" + "ff" * 32,
            "st:eth",
        ],
    )
    def test_malformed_meta_addresses(self, text):
        with pytest.raises(MalformedKey):
            StealthMetaAddress.parse(text)


class TestRecipientKeys:

    def test_keys_are_independent(self):
        keys = RecipientKeys.generate()
        assert keys.spending.private_scalar != keys.viewing.private_scalar

    def test_dict_roundtrip(self):
        keys = RecipientKeys.generate(NIST256P)
        restored = RecipientKeys.from_dict(keys.to_dict())
        assert restored.curve is NIST256P
        assert restored.spending.private_scalar == keys.spending.private_scalar
        assert restored.viewing.public_key == keys.viewing.public_key
