"""
Curve Adapter: cyclic-group operations over a short-Weierstrass curve.

Wraps the `ecdsa` library's curve arithmetic and adds the checks the
stealth protocol relies on:
    - scalars live in [1, n-1]
    - points are on the curve and never the identity unless explicitly allowed
    - point encodings are decoded with explicit length / prefix / on-curve checks

Point encodings (SEC1):
    compressed:   0x02|0x03 || X            (1 + L bytes)
    uncompressed: 0x04      || X || Y       (1 + 2L bytes)
where L is the coordinate width (32 for secp256k1 and NIST P-256).

Registered curves: "secp256k1" (default), "nist256p".
"""

from __future__ import annotations

import secrets

import ecdsa
import ecdsa.ellipticcurve as ec

from stealth_kit.crypto.address import address_from_coordinates
from stealth_kit.errors import ConfigurationError, InvalidPoint, InvalidScalar

Point = ec.PointJacobi
"""Group element type handed around by the adapter."""

INFINITY = ec.INFINITY


class CurveAdapter:
    """
    Group operations for one elliptic curve.

    Usage:
        curve = get_curve("secp256k1")
        k = curve.random_scalar()
        P = curve.multiply_generator(k)
        data = curve.encode_point(P)
        assert curve.decode_point(data) == P
    """

    def __init__(self, name: str, ecdsa_curve: ecdsa.curves.Curve) -> None:
        self.name = name
        self._curve = ecdsa_curve.curve
        self.generator: Point = ecdsa_curve.generator
        self.order: int = ecdsa_curve.order
        self.field_prime: int = self._curve.p()
        self.coordinate_size: int = ecdsa_curve.baselen

        # Square roots below use the (p+1)/4 exponent
        if self.field_prime % 4 != 3:
            raise ConfigurationError(
                f"Curve {name} has p mod 4 != 3; compressed point decoding unsupported"
            )

    def __repr__(self) -> str:
        return f"CurveAdapter({self.name!r})"

    @property
    def compressed_size(self) -> int:
        return 1 + self.coordinate_size

    @property
    def uncompressed_size(self) -> int:
        return 1 + 2 * self.coordinate_size

    # ------------------------------------------------------------------
    # Scalars
    # ------------------------------------------------------------------

    def random_scalar(self) -> int:
        """Return a uniformly random scalar in [1, n-1] from the OS CSPRNG."""
        return secrets.randbelow(self.order - 1) + 1

    def validate_scalar(self, scalar: int) -> int:
        """
        Check that `scalar` is an integer in [1, n-1].

        Raises:
            InvalidScalar: If the scalar is zero, out of range or not an int.
        """
        if isinstance(scalar, bool) or not isinstance(scalar, int):
            raise InvalidScalar(f"Scalar must be an int, got {type(scalar).__name__}")
        if scalar <= 0 or scalar >= self.order:
            raise InvalidScalar(f"Scalar must be in [1, n-1] for {self.name}")
        return scalar

    def scalar_from_digest(self, digest: bytes) -> int:
        """
        Reduce a hash digest (big-endian) into the scalar field.

        Raises:
            InvalidScalar: If the reduction is zero.
        """
        scalar = int.from_bytes(digest, "big") % self.order
        if scalar == 0:
            raise InvalidScalar("Digest reduces to the zero scalar")
        return scalar

    def add_scalars(self, a: int, b: int) -> int:
        """Return (a + b) mod n, rejecting a zero sum."""
        total = (a + b) % self.order
        if total == 0:
            raise InvalidScalar("Scalar sum is zero mod n")
        return total

    # ------------------------------------------------------------------
    # Points
    # ------------------------------------------------------------------

    @staticmethod
    def is_identity(point: ec.AbstractPoint) -> bool:
        """True if `point` is the point at infinity."""
        return point is INFINITY or point == INFINITY

    def validate_point(self, point: ec.AbstractPoint) -> Point:
        """
        Check that `point` is a non-identity point on this curve.

        Returns:
            The point as a PointJacobi on this curve.

        Raises:
            InvalidPoint: If the point is the identity, on another curve, or off-curve.
        """
        if not isinstance(point, (ec.PointJacobi, ec.Point)):
            raise InvalidPoint(f"Expected an elliptic curve point, got {type(point).__name__}")
        if self.is_identity(point):
            raise InvalidPoint("Point is the identity element")
        if point.curve() != self._curve:
            raise InvalidPoint(f"Point does not belong to curve {self.name}")
        x, y = point.x(), point.y()
        if not self._curve.contains_point(x, y):
            raise InvalidPoint(f"Point ({x:#x}, {y:#x}) is not on curve {self.name}")
        if isinstance(point, ec.PointJacobi):
            return point
        return ec.PointJacobi(self._curve, x, y, 1, self.order)

    def scalar_multiply(
        self, scalar: int, point: ec.AbstractPoint, allow_identity: bool = False
    ) -> Point:
        """
        Compute scalar · point.

        Args:
            scalar: Integer in [1, n-1].
            point: Non-identity point on this curve.
            allow_identity: Return the identity instead of raising when the
                product is the point at infinity.

        Raises:
            InvalidScalar: Bad scalar.
            InvalidPoint: Bad point, or identity product when not allowed.
        """
        self.validate_scalar(scalar)
        pt = self.validate_point(point)
        result = scalar * pt
        if self.is_identity(result) and not allow_identity:
            raise InvalidPoint("Scalar multiplication produced the identity element")
        return result

    def multiply_generator(self, scalar: int) -> Point:
        """Compute scalar · G."""
        self.validate_scalar(scalar)
        return scalar * self.generator

    def point_add(self, p1: ec.AbstractPoint, p2: ec.AbstractPoint) -> Point:
        """
        Compute p1 + p2.

        Raises:
            InvalidPoint: If either input is invalid or the sum is the identity.
        """
        a = self.validate_point(p1)
        b = self.validate_point(p2)
        result = a + b
        if self.is_identity(result):
            raise InvalidPoint("Point addition produced the identity element")
        return result

    def points_equal(self, p1: ec.AbstractPoint, p2: ec.AbstractPoint) -> bool:
        """Compare two points by affine coordinates."""
        if self.is_identity(p1) or self.is_identity(p2):
            return self.is_identity(p1) and self.is_identity(p2)
        return p1.x() == p2.x() and p1.y() == p2.y()

    # ------------------------------------------------------------------
    # Encoding
    # ------------------------------------------------------------------

    def encode_point(self, point: ec.AbstractPoint, compressed: bool = True) -> bytes:
        """
        SEC1-encode a point.

        Raises:
            InvalidPoint: If the point is the identity or not on this curve.
        """
        pt = self.validate_point(point)
        size = self.coordinate_size
        x, y = pt.x(), pt.y()
        if compressed:
            prefix = b"\x02" if y % 2 == 0 else b"\x03"
            return prefix + x.to_bytes(size, "big")
        return b"\x04" + x.to_bytes(size, "big") + y.to_bytes(size, "big")

    def decode_point(self, data: bytes) -> Point:
        """
        Decode a SEC1 compressed or uncompressed point.

        Checks, in order: length, prefix byte, coordinate range, on-curve.

        Raises:
            InvalidPoint: If any check fails.
        """
        raw = bytes(data)
        p = self.field_prime
        size = self.coordinate_size

        if len(raw) == self.compressed_size:
            prefix = raw[0]
            if prefix not in (0x02, 0x03):
                raise InvalidPoint(f"Invalid compressed prefix byte: 0x{prefix:02x}")
            x = int.from_bytes(raw[1:], "big")
            if x >= p:
                raise InvalidPoint("X coordinate exceeds the field prime")
            y_sq = (pow(x, 3, p) + self._curve.a() * x + self._curve.b()) % p
            y = pow(y_sq, (p + 1) // 4, p)
            if (y * y) % p != y_sq:
                raise InvalidPoint(f"X coordinate 0x{x:0{size * 2}x} is not on curve {self.name}")
            if (y % 2 == 0) != (prefix == 0x02):
                y = p - y
        elif len(raw) == self.uncompressed_size:
            if raw[0] != 0x04:
                raise InvalidPoint(f"Invalid uncompressed prefix byte: 0x{raw[0]:02x}")
            x = int.from_bytes(raw[1:1 + size], "big")
            y = int.from_bytes(raw[1 + size:], "big")
            if x >= p or y >= p:
                raise InvalidPoint("Coordinate exceeds the field prime")
            if not self._curve.contains_point(x, y):
                raise InvalidPoint(f"Point is not on curve {self.name}")
        else:
            raise InvalidPoint(
                f"Expected {self.compressed_size} or {self.uncompressed_size} bytes, got {len(raw)}"
            )

        return ec.PointJacobi(self._curve, x, y, 1, self.order)

    # ------------------------------------------------------------------
    # Addresses
    # ------------------------------------------------------------------

    def point_to_address(self, point: ec.AbstractPoint) -> str:
        """
        Derive the EIP-55 address of a public point: keccak256(X || Y)[12:].

        Raises:
            InvalidPoint: If the point is invalid.
        """
        encoded = self.encode_point(point, compressed=False)
        size = self.coordinate_size
        return address_from_coordinates(encoded[1:1 + size], encoded[1 + size:])


# ==============================================================================
# Registry
# ==============================================================================

SECP256K1 = CurveAdapter("secp256k1", ecdsa.SECP256k1)
NIST256P = CurveAdapter("nist256p", ecdsa.NIST256p)

_CURVES: dict[str, CurveAdapter] = {c.name: c for c in (SECP256K1, NIST256P)}


def get_curve(name: str) -> CurveAdapter:
    """
    Look up a registered curve adapter by name.

    Raises:
        ConfigurationError: If no curve is registered under `name`.
    """
    try:
        return _CURVES[name.lower()]
    except KeyError:
        raise ConfigurationError(
            f"Unknown curve '{name}', expected one of {sorted(_CURVES)}"
        ) from None


def available_curves() -> list[str]:
    """Names of all registered curves."""
    return sorted(_CURVES)
