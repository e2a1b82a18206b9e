#!/usr/bin/env python3
"""
Example 03: Delegated scanning with a viewing key.

A scanning service gets the viewing private key and the spending public
key. It can tell which announcements are the recipient's, but cannot
spend. The recipient derives the spending key locally afterwards.

Usage:
    python examples/03_delegated_scan.py
"""

from stealth_kit import InMemoryAnnouncementLog, RecipientKeys, generate_stealth_address
from stealth_kit.core.announcements import append_announcement
from stealth_kit.core.scanner import compute_stealth_key, scan_announcements_view_only

keys = RecipientKeys.generate()
log = InMemoryAnnouncementLog()

# Mixed traffic: every fourth payment is ours
for i in range(12):
    target = keys if i % 4 == 0 else RecipientKeys.generate()
    generated = generate_stealth_address(target.spending.public_key, target.viewing.public_key)
    append_announcement(log, generated.to_announcement())

# Scanning service: viewing key only
found = list(
    scan_announcements_view_only(
        log.iterate(),
        keys.viewing.private_scalar,
        keys.spending.public_key,
    )
)
print(f"Service found {len(found)} of {len(log)} announcements")
for match in found:
    print(f"  offset {match.announcement.offset}: {match.stealth_key_pair}")

# Recipient: recover spending keys for the reported announcements
print("\nRecovered spending keys:")
for match in found:
    pair = compute_stealth_key(
        match.announcement.ephemeral_public_key,
        keys.spending.private_scalar,
        keys.viewing.private_scalar,
    )
    print(f"  {pair}")
