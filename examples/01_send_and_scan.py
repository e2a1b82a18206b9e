#!/usr/bin/env python3
"""
Example 01: Send to a stealth address and find it again.

A recipient publishes spending and viewing keys, a sender derives a
one-time address for them, and the recipient scans the announcement log.
Everything runs in memory.

Usage:
    python examples/01_send_and_scan.py
"""

from stealth_kit import (
    InMemoryAnnouncementLog,
    InMemoryKeyRegistry,
    RecipientKeys,
    StealthReceiver,
    StealthSender,
)
from stealth_kit.core.models import decode_metadata, encode_metadata

USDC = "0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48"

registry = InMemoryKeyRegistry()
log = InMemoryAnnouncementLog()

# Recipient side: generate keys once and publish them
alice = StealthReceiver(RecipientKeys.generate(), log)
alice.register(registry, "alice")
print(f"Alice's meta-address: {alice.keys.meta_address()}")

# Sender side: a fresh ephemeral key per payment
sender = StealthSender(registry, log)
for amount in (25, 100):
    ann = sender.send("alice", metadata=encode_metadata(USDC, amount * 10**6))
    print(f"Paid {amount} USDC to {ann.stealth_address} (view tag {ann.view_tag})")

# Someone else's payment in the same log
bob = StealthReceiver(RecipientKeys.generate(), log)
bob.register(registry, "bob")
sender.send("bob")

print("\n=== Alice scans the log ===")
for match in alice.scan():
    asset, amount = decode_metadata(match.announcement.metadata_bytes)
    pair = match.stealth_key_pair
    print(f"offset {match.announcement.offset}: {pair.address}  {amount / 10**6:.2f} of {asset}")
    print(f"  spendable: {pair.can_spend}")

print(f"\nNext scan resumes from offset {alice.checkpoint}")
