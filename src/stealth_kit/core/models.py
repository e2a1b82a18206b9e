"""
Core data models: announcements, generator output, scan matches, and the
announcement wire format.

Wire format of the announcement log's 32-byte slot:
    stealthRecipientAndViewTag = stealthAddress (bytes 0..20) || viewTag (bytes 20..32)

Metadata convention (informative, not enforced):
    bytes 0..20   asset contract identifier
    bytes 20..52  amount or token identifier (big-endian uint256)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import NamedTuple

from pydantic import BaseModel, ConfigDict, field_validator

from stealth_kit.crypto.address import ADDRESS_LENGTH, address_to_bytes, to_checksum_address
from stealth_kit.crypto.hashing import VIEW_TAG_LENGTH
from stealth_kit.crypto.keys import StealthKeyPair
from stealth_kit.errors import MalformedKey, StealthError

PACKED_SLOT_LENGTH = ADDRESS_LENGTH + VIEW_TAG_LENGTH
"""Width of the packed recipient + view tag slot (32 bytes)."""

AMOUNT_LENGTH = 32
METADATA_CONVENTION_LENGTH = ADDRESS_LENGTH + AMOUNT_LENGTH


def _hex_body(value: str) -> str:
    return value[2:] if value[:2] in ("0x", "0X") else value


def _to_hex(value: bytes | str) -> str:
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value).hex()
    body = _hex_body(value).lower()
    bytes.fromhex(body)  # raises ValueError on bad hex
    return body


# ==============================================================================
# Announcement
# ==============================================================================


class Announcement(BaseModel):
    """
    An immutable record published by a sender so recipients can discover
    a stealth transfer.

    `ephemeral_public_key` is stored as given (hex, not checked); it is only
    decoded at scan time, so a log may hold undecodable keys, even ones
    that are not valid hex, and scanners skip them.
    """
    model_config = ConfigDict(frozen=True)

    ephemeral_public_key: str
    stealth_address: str
    view_tag: str
    metadata: str = ""
    offset: int | None = None

    @field_validator("ephemeral_public_key", mode="before")
    @classmethod
    def _normalize_key(cls, v: bytes | str) -> str:
        if isinstance(v, str):
            return _hex_body(v).lower()
        return _to_hex(v)

    @field_validator("metadata", mode="before")
    @classmethod
    def _normalize_hex(cls, v: bytes | str) -> str:
        return _to_hex(v)

    @field_validator("stealth_address", mode="before")
    @classmethod
    def _normalize_address(cls, v: bytes | str) -> str:
        return to_checksum_address(address_to_bytes(v))

    @field_validator("view_tag", mode="before")
    @classmethod
    def _check_view_tag(cls, v: bytes | str) -> str:
        tag = _to_hex(v)
        if len(tag) != VIEW_TAG_LENGTH * 2:
            raise ValueError(f"view_tag must be {VIEW_TAG_LENGTH} bytes, got {len(tag) // 2}")
        return tag

    @property
    def ephemeral_public_key_bytes(self) -> bytes:
        try:
            return bytes.fromhex(self.ephemeral_public_key)
        except ValueError:
            raise MalformedKey(
                f"Ephemeral public key is not valid hex: {self.ephemeral_public_key[:20]!r}"
            ) from None

    @property
    def stealth_address_bytes(self) -> bytes:
        return bytes.fromhex(self.stealth_address[2:])

    @property
    def view_tag_bytes(self) -> bytes:
        return bytes.fromhex(self.view_tag)

    @property
    def metadata_bytes(self) -> bytes:
        return bytes.fromhex(self.metadata)

    @property
    def recipient_and_view_tag(self) -> bytes:
        """The packed 32-byte log slot for this announcement."""
        return pack_recipient_and_view_tag(self.stealth_address_bytes, self.view_tag_bytes)

    @classmethod
    def from_packed(
        cls,
        ephemeral_public_key: bytes | str,
        recipient_and_view_tag: bytes,
        metadata: bytes | str = b"",
        offset: int | None = None,
    ) -> Announcement:
        """Rebuild an announcement from the log's packed representation."""
        address, tag = unpack_recipient_and_view_tag(recipient_and_view_tag)
        return cls(
            ephemeral_public_key=ephemeral_public_key,
            stealth_address=address,
            view_tag=tag,
            metadata=metadata,
            offset=offset,
        )


# ==============================================================================
# Generator / scanner results
# ==============================================================================


@dataclass(frozen=True)
class GeneratedStealthAddress:
    """
    Sender-side output of stealth address generation.

    Attributes:
        stealth_address: EIP-55 address the sender pays to.
        ephemeral_public_key: 33-byte compressed ephemeral public key to announce.
        view_tag: 12-byte view tag to announce.
        stealth_public_key: 33-byte compressed stealth public key.
    """
    stealth_address: str
    ephemeral_public_key: bytes
    view_tag: bytes
    stealth_public_key: bytes

    def to_announcement(self, metadata: bytes | str = b"") -> Announcement:
        """Build the announcement to append to the log."""
        return Announcement(
            ephemeral_public_key=self.ephemeral_public_key,
            stealth_address=self.stealth_address,
            view_tag=self.view_tag,
            metadata=metadata,
        )


class ScanMatch(NamedTuple):
    """An announcement that resolved to the scanning recipient."""
    announcement: Announcement
    stealth_key_pair: StealthKeyPair


# ==============================================================================
# Wire format helpers
# ==============================================================================


def pack_recipient_and_view_tag(stealth_address: bytes | str, view_tag: bytes) -> bytes:
    """
    Pack a 20-byte address and a 12-byte view tag into one 32-byte slot.

    Raises:
        InvalidAddress: If the address is malformed.
        StealthError: If the view tag is not 12 bytes.
    """
    raw_address = address_to_bytes(stealth_address)
    tag = bytes(view_tag)
    if len(tag) != VIEW_TAG_LENGTH:
        raise StealthError(f"view_tag must be {VIEW_TAG_LENGTH} bytes, got {len(tag)}")
    return raw_address + tag


def unpack_recipient_and_view_tag(slot: bytes) -> tuple[str, bytes]:
    """
    Split a 32-byte slot into (checksummed address, view tag).

    Raises:
        StealthError: If the slot is not 32 bytes.
    """
    raw = bytes(slot)
    if len(raw) != PACKED_SLOT_LENGTH:
        raise StealthError(f"Packed slot must be {PACKED_SLOT_LENGTH} bytes, got {len(raw)}")
    return to_checksum_address(raw[:ADDRESS_LENGTH]), raw[ADDRESS_LENGTH:]


def encode_metadata(asset: bytes | str, amount: int) -> bytes:
    """
    Encode metadata per the informative convention: asset (20 bytes) || amount (32 bytes).

    Args:
        asset: Asset contract address.
        amount: Amount or token identifier (uint256).
    """
    if amount < 0 or amount >= 1 << (8 * AMOUNT_LENGTH):
        raise StealthError(f"amount must fit in an unsigned {8 * AMOUNT_LENGTH}-bit integer")
    return address_to_bytes(asset) + amount.to_bytes(AMOUNT_LENGTH, "big")


def decode_metadata(metadata: bytes) -> tuple[str, int] | None:
    """
    Decode conventional metadata into (asset address, amount).

    Returns:
        None if the metadata is shorter than the convention's 52 bytes.
    """
    raw = bytes(metadata)
    if len(raw) < METADATA_CONVENTION_LENGTH:
        return None
    asset = to_checksum_address(raw[:ADDRESS_LENGTH])
    amount = int.from_bytes(raw[ADDRESS_LENGTH:METADATA_CONVENTION_LENGTH], "big")
    return asset, amount
