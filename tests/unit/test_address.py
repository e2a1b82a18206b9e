"""
Unit tests for address derivation and EIP-55 checksums.

Checksum vectors come from the EIP-55 reference list.
"""

import pytest

from stealth_kit.crypto.address import (
    address_to_bytes,
    addresses_equal,
    is_valid_address,
    to_checksum_address,
    validate_address,
)
from stealth_kit.crypto.curve import SECP256K1
from stealth_kit.errors import InvalidAddress

EIP55_VECTORS = [
    "0x5aAeb6053F3E94C9b9A09f33669435E7Ef1BeAed",
    "0xfB6916095ca1df60bB79Ce92cE3Ea74c37c5d359",
    "0xdbF03B407c01E7cD3CBea99509d93f8DDDC8C6FB",
    "0xD1220A0cf47c7B9Be7A2E6BA89F429762e7b9aDb",
]


class TestChecksum:

    @pytest.mark.parametrize("address", EIP55_VECTORS)
    def test_checksum_vectors(self, address):
        assert to_checksum_address(address.lower()) == address
        assert to_checksum_address(bytes.fromhex(address[2:])) == address

    @pytest.mark.parametrize("address", EIP55_VECTORS)
    def test_valid_checksums_accepted(self, address):
        assert validate_address(address) is True

    def test_single_case_accepted_without_checksum(self):
        addr = EIP55_VECTORS[0]
        assert is_valid_address(addr.lower())
        assert is_valid_address("0x" + addr[2:].upper())

    def test_bad_checksum_rejected(self):
        addr = EIP55_VECTORS[0]
        i = next(i for i, ch in enumerate(addr) if i >= 2 and ch.isalpha())
        flipped = addr[:i] + addr[i].swapcase() + addr[i + 1:]
        with pytest.raises(InvalidAddress, match="Checksum mismatch"):
            validate_address(flipped)
        assert not is_valid_address(flipped)


class TestAddressParsing:

    @pytest.mark.parametrize("bad", ["0x1234", "0x" + "g" * 40, "0x" + "00" * 21, b"\x00" * 19, 12345])
    def test_malformed(self, bad):
        with pytest.raises(InvalidAddress):
            address_to_bytes(bad)

    def test_bare_hex_accepted(self):
        assert address_to_bytes("00" * 20) == b"\x00" * 20

    def test_addresses_equal_ignores_case(self):
        addr = EIP55_VECTORS[1]
        assert addresses_equal(addr, addr.lower())
        assert addresses_equal(addr, bytes.fromhex(addr[2:]))
        assert not addresses_equal(addr, EIP55_VECTORS[2])


class TestPointToAddress:
    """Known Ethereum addresses for private keys 1 and 2."""

    def test_private_key_one(self):
        point = SECP256K1.multiply_generator(1)
        assert SECP256K1.point_to_address(point) == "0x7E5F4552091A69125d5DfCb7b8C2659029395Bdf"

    def test_private_key_two(self):
        point = SECP256K1.multiply_generator(2)
        assert SECP256K1.point_to_address(point) == "0x2B5AD5c4795c026514f8317c7a215E218DcCD6cF"
