"""
stealth-kit: Non-interactive stealth addresses over elliptic curves.

Usage:
    from stealth_kit import RecipientKeys, generate_stealth_address, scan_announcements
    from stealth_kit import StealthSender, StealthReceiver
"""

__version__ = "0.1.0"

from stealth_kit.config import StealthConfig
from stealth_kit.core.announcements import AnnouncementLog, InMemoryAnnouncementLog
from stealth_kit.core.generator import generate_from_meta_address, generate_stealth_address
from stealth_kit.core.models import Announcement, GeneratedStealthAddress, ScanMatch
from stealth_kit.core.registry import InMemoryKeyRegistry, KeyRegistry
from stealth_kit.core.scanner import (
    check_announcement,
    compute_stealth_key,
    scan_announcements,
    scan_announcements_parallel,
    scan_announcements_view_only,
)
from stealth_kit.core.stealth import StealthReceiver, StealthSender
from stealth_kit.crypto.keys import (
    KeyPair,
    RecipientKeys,
    StealthKeyPair,
    StealthMetaAddress,
    generate_keypair,
)

__all__ = [
    "Announcement",
    "AnnouncementLog",
    "GeneratedStealthAddress",
    "InMemoryAnnouncementLog",
    "InMemoryKeyRegistry",
    "KeyPair",
    "KeyRegistry",
    "RecipientKeys",
    "ScanMatch",
    "StealthConfig",
    "StealthKeyPair",
    "StealthMetaAddress",
    "StealthReceiver",
    "StealthSender",
    "check_announcement",
    "compute_stealth_key",
    "generate_from_meta_address",
    "generate_keypair",
    "generate_stealth_address",
    "scan_announcements",
    "scan_announcements_parallel",
    "scan_announcements_view_only",
]
