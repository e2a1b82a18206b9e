"""
Unit tests for stealth_kit.crypto.curve.

Pure math: no network, no mocks. Known values are the published
secp256k1 domain parameters.
"""

import pytest

from stealth_kit.crypto.curve import NIST256P, SECP256K1, available_curves, get_curve
from stealth_kit.errors import ConfigurationError, InvalidPoint, InvalidScalar

G_COMPRESSED = "0279be667ef9dcbbac55a06295ce870b07029bfcdb2dce28d959f2815b16f81798"
G_X = 0x79BE667EF9DCBBAC55A06295CE870B07029BFCDB2DCE28D959F2815B16F81798
G_Y = 0x483ADA7726A3C4655DA4FBFC0E1108A8FD17B448A68554199C47D08FFB10D4B8
SECP256K1_N = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141
SECP256K1_P = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEFFFFFC2F


class TestCurveRegistry:
    """Curve lookup by name."""

    def test_default_curves_registered(self):
        assert available_curves() == ["nist256p", "secp256k1"]

    def test_lookup_is_case_insensitive(self):
        assert get_curve("SECP256K1") is SECP256K1
        assert get_curve("nist256p") is NIST256P

    def test_unknown_curve(self):
        with pytest.raises(ConfigurationError, match="Unknown curve"):
            get_curve("curve25519")

    def test_domain_parameters(self):
        assert SECP256K1.order == SECP256K1_N
        assert SECP256K1.field_prime == SECP256K1_P
        assert SECP256K1.compressed_size == 33
        assert SECP256K1.uncompressed_size == 65


class TestScalars:
    """Scalar validation and reduction."""

    @pytest.mark.parametrize("bad", [0, -1, SECP256K1_N, SECP256K1_N + 5])
    def test_out_of_range_scalars_rejected(self, bad):
        with pytest.raises(InvalidScalar):
            SECP256K1.validate_scalar(bad)

    @pytest.mark.parametrize("bad", [True, 1.0, "1", None])
    def test_non_integer_scalars_rejected(self, bad):
        with pytest.raises(InvalidScalar):
            SECP256K1.validate_scalar(bad)

    def test_boundary_scalars_accepted(self):
        assert SECP256K1.validate_scalar(1) == 1
        assert SECP256K1.validate_scalar(SECP256K1_N - 1) == SECP256K1_N - 1

    def test_random_scalar_in_range(self):
        for _ in range(20):
            k = SECP256K1.random_scalar()
            assert 1 <= k < SECP256K1_N

    def test_random_scalars_distinct(self):
        assert len({SECP256K1.random_scalar() for _ in range(10)}) == 10

    def test_scalar_from_digest_reduces_mod_n(self):
        digest = (SECP256K1_N + 7).to_bytes(32, "big")
        assert SECP256K1.scalar_from_digest(digest) == 7

    def test_scalar_from_digest_rejects_zero(self):
        with pytest.raises(InvalidScalar):
            SECP256K1.scalar_from_digest(SECP256K1_N.to_bytes(32, "big"))

    def test_add_scalars(self):
        assert SECP256K1.add_scalars(SECP256K1_N - 1, 2) == 1
        with pytest.raises(InvalidScalar):
            SECP256K1.add_scalars(SECP256K1_N - 1, 1)


class TestPointArithmetic:
    """Multiplication and addition with identity checks."""

    def test_generator_multiple(self):
        G = SECP256K1.multiply_generator(1)
        assert (G.x(), G.y()) == (G_X, G_Y)

    def test_addition_matches_multiplication(self):
        G = SECP256K1.generator
        two_g = SECP256K1.point_add(G, G)
        assert SECP256K1.points_equal(two_g, SECP256K1.multiply_generator(2))

    def test_scalar_multiply_commutes(self):
        a, b = SECP256K1.random_scalar(), SECP256K1.random_scalar()
        A, B = SECP256K1.multiply_generator(a), SECP256K1.multiply_generator(b)
        assert SECP256K1.points_equal(
            SECP256K1.scalar_multiply(a, B), SECP256K1.scalar_multiply(b, A)
        )

    def test_adding_negation_is_identity(self):
        P = SECP256K1.multiply_generator(5)
        neg = SECP256K1.multiply_generator(SECP256K1_N - 5)
        with pytest.raises(InvalidPoint, match="identity"):
            SECP256K1.point_add(P, neg)

    def test_zero_scalar_multiply_rejected(self):
        with pytest.raises(InvalidScalar):
            SECP256K1.scalar_multiply(0, SECP256K1.generator)

    def test_point_from_other_curve_rejected(self):
        with pytest.raises(InvalidPoint, match="does not belong"):
            SECP256K1.validate_point(NIST256P.generator)

    def test_non_point_rejected(self):
        with pytest.raises(InvalidPoint):
            SECP256K1.validate_point(b"\x02" * 33)


class TestPointEncoding:
    """SEC1 encoding and structured decoding."""

    def test_encode_generator_compressed(self):
        assert SECP256K1.encode_point(SECP256K1.generator).hex() == G_COMPRESSED

    def test_encode_generator_uncompressed(self):
        raw = SECP256K1.encode_point(SECP256K1.generator, compressed=False)
        assert raw[0] == 0x04
        assert int.from_bytes(raw[1:33], "big") == G_X
        assert int.from_bytes(raw[33:], "big") == G_Y

    @pytest.mark.parametrize("k", [1, 2, 3, 12345, SECP256K1_N - 1])
    def test_decode_compressed_roundtrip(self, k):
        P = SECP256K1.multiply_generator(k)
        decoded = SECP256K1.decode_point(SECP256K1.encode_point(P))
        assert SECP256K1.points_equal(decoded, P)

    def test_decode_uncompressed(self):
        P = SECP256K1.multiply_generator(77)
        decoded = SECP256K1.decode_point(SECP256K1.encode_point(P, compressed=False))
        assert SECP256K1.points_equal(decoded, P)

    @pytest.mark.parametrize("length", [0, 32, 34, 64, 66])
    def test_bad_length(self, length):
        with pytest.raises(InvalidPoint, match="Expected 33 or 65 bytes"):
            SECP256K1.decode_point(b"\x02" * length)

    def test_bad_compressed_prefix(self):
        data = b"\x05" + bytes.fromhex(G_COMPRESSED)[1:]
        with pytest.raises(InvalidPoint, match="prefix"):
            SECP256K1.decode_point(data)

    def test_bad_uncompressed_prefix(self):
        data = b"\x02" + SECP256K1.encode_point(SECP256K1.generator, compressed=False)[1:]
        with pytest.raises(InvalidPoint, match="prefix"):
            SECP256K1.decode_point(data)

    def test_x_beyond_field_prime(self):
        with pytest.raises(InvalidPoint, match="field prime"):
            SECP256K1.decode_point(b"\x02" + b"\xff" * 32)

    def test_uncompressed_off_curve(self):
        data = b"\x04" + G_X.to_bytes(32, "big") + (G_Y + 1).to_bytes(32, "big")
        with pytest.raises(InvalidPoint, match="not on curve"):
            SECP256K1.decode_point(data)

    def test_encode_identity_rejected(self):
        from stealth_kit.crypto.curve import INFINITY

        with pytest.raises(InvalidPoint):
            SECP256K1.encode_point(INFINITY)

    def test_nist256p_roundtrip(self):
        P = NIST256P.multiply_generator(NIST256P.random_scalar())
        assert NIST256P.points_equal(NIST256P.decode_point(NIST256P.encode_point(P)), P)
