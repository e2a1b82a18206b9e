"""core module init"""
from stealth_kit.core.announcements import (
    AnnouncementLog,
    InMemoryAnnouncementLog,
    append_announcement,
)
from stealth_kit.core.client import StealthApiClient
from stealth_kit.core.generator import generate_from_meta_address, generate_stealth_address
from stealth_kit.core.models import (
    Announcement,
    GeneratedStealthAddress,
    ScanMatch,
    decode_metadata,
    encode_metadata,
    pack_recipient_and_view_tag,
    unpack_recipient_and_view_tag,
)
from stealth_kit.core.registry import InMemoryKeyRegistry, KeyRegistry
from stealth_kit.core.scanner import (
    check_announcement,
    check_stealth_address,
    compute_stealth_key,
    scan_announcements,
    scan_announcements_parallel,
    scan_announcements_view_only,
)
from stealth_kit.core.stealth import StealthReceiver, StealthSender

__all__ = [
    "Announcement",
    "AnnouncementLog",
    "GeneratedStealthAddress",
    "InMemoryAnnouncementLog",
    "InMemoryKeyRegistry",
    "KeyRegistry",
    "ScanMatch",
    "StealthApiClient",
    "StealthReceiver",
    "StealthSender",
    "append_announcement",
    "check_announcement",
    "check_stealth_address",
    "compute_stealth_key",
    "decode_metadata",
    "encode_metadata",
    "generate_from_meta_address",
    "generate_stealth_address",
    "pack_recipient_and_view_tag",
    "scan_announcements",
    "scan_announcements_parallel",
    "scan_announcements_view_only",
    "unpack_recipient_and_view_tag",
]
