#!/usr/bin/env python3
"""
Example 02: Pay a meta-address directly.

No registry lookup: the sender only has the recipient's
"st:eth:0x..." string, e.g. from a QR code.

Usage:
    python examples/02_meta_address.py
    python examples/02_meta_address.py st:eth:0x02...03...
"""

import sys

from stealth_kit import RecipientKeys, StealthMetaAddress, generate_from_meta_address
from stealth_kit.core.scanner import check_announcement
from stealth_kit.errors import MalformedKey

keys = RecipientKeys.generate()
text = sys.argv[1] if len(sys.argv) > 1 else keys.meta_address().encode()

try:
    meta = StealthMetaAddress.parse(text)
except MalformedKey as e:
    print(f"Not a valid meta-address: {e}")
    sys.exit(1)

generated = generate_from_meta_address(meta)
print(f"Stealth address:      {generated.stealth_address}")
print(f"Ephemeral public key: {generated.ephemeral_public_key.hex()}")
print(f"View tag:             {generated.view_tag.hex()}")

# Only meaningful when we generated the keys ourselves
if len(sys.argv) == 1:
    pair = check_announcement(
        generated.to_announcement(),
        keys.spending.private_scalar,
        keys.viewing.private_scalar,
    )
    print(f"\nRecipient recovers {pair.address}: {pair.address == generated.stealth_address}")
