"""
Announcement log: append-only stream of stealth announcements.

The log is an external collaborator (typically contract events). The core
only needs the AnnouncementLog protocol:
    append(ephemeral_public_key, stealth_address, view_tag, metadata) -> offset
    iterate(from_offset) -> lazy iterator of Announcement

InMemoryAnnouncementLog stores each entry in its wire form,
(ephemeral key, 32-byte stealthRecipientAndViewTag slot, metadata), and
rebuilds Announcement objects on iteration.
"""

from __future__ import annotations

import threading
from collections.abc import Iterator
from typing import Protocol, runtime_checkable

from stealth_kit.core.models import Announcement, pack_recipient_and_view_tag


@runtime_checkable
class AnnouncementLog(Protocol):
    """Append and iterate access to the announcement log."""

    def append(
        self,
        ephemeral_public_key: bytes,
        stealth_address: bytes | str,
        view_tag: bytes,
        metadata: bytes = b"",
    ) -> int:
        """Append one entry and return its offset."""
        ...

    def iterate(self, from_offset: int = 0) -> Iterator[Announcement]:
        """Lazily yield entries starting at `from_offset`."""
        ...


def append_announcement(log: AnnouncementLog, announcement: Announcement) -> int:
    """Append an Announcement object to any AnnouncementLog."""
    return log.append(
        announcement.ephemeral_public_key_bytes,
        announcement.stealth_address,
        announcement.view_tag_bytes,
        announcement.metadata_bytes,
    )


class InMemoryAnnouncementLog:
    """
    List-backed AnnouncementLog.

    Entries are never modified or removed. The ephemeral key is stored
    as given; scanners decide whether it is decodable.
    """

    def __init__(self) -> None:
        self._entries: list[tuple[bytes, bytes, bytes]] = []
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def append(
        self,
        ephemeral_public_key: bytes,
        stealth_address: bytes | str,
        view_tag: bytes,
        metadata: bytes = b"",
    ) -> int:
        """
        Append an entry in wire form.

        Raises:
            InvalidAddress / StealthError: If the address or view tag has the wrong width.
        """
        slot = pack_recipient_and_view_tag(stealth_address, view_tag)
        entry = (bytes(ephemeral_public_key), slot, bytes(metadata))
        with self._lock:
            self._entries.append(entry)
            return len(self._entries) - 1

    def iterate(self, from_offset: int = 0) -> Iterator[Announcement]:
        """
        Yield entries from `from_offset` up to the log length at call time.

        Entries appended during iteration are picked up by the next call.
        """
        if from_offset < 0:
            raise ValueError(f"from_offset must be non-negative, got {from_offset}")
        with self._lock:
            end = len(self._entries)
        return self._iterate(from_offset, end)

    def _iterate(self, start: int, end: int) -> Iterator[Announcement]:
        for offset in range(start, end):
            with self._lock:
                ephemeral, slot, metadata = self._entries[offset]
            yield Announcement.from_packed(ephemeral, slot, metadata, offset=offset)
