#!/usr/bin/env python3
"""
Example 05: Use a running stealth API as registry and log.

Start the server first with any ASGI server, e.g.:
    uvicorn stealth_kit.api.server:app --port 8000

Usage:
    python examples/05_remote_api.py
    python examples/05_remote_api.py http://localhost:8000
"""

import sys

from stealth_kit import RecipientKeys, StealthReceiver, StealthSender
from stealth_kit.core.client import DEFAULT_API_URL, StealthApiClient
from stealth_kit.errors import StealthError


def main():
    url = sys.argv[1] if len(sys.argv) > 1 else DEFAULT_API_URL

    with StealthApiClient(url) as api:
        if not api.health():
            print(f"No stealth API reachable at {url}")
            sys.exit(1)

        receiver = StealthReceiver(RecipientKeys.generate(), log=api)
        try:
            receiver.register(api, "demo-recipient", caller="demo-recipient")
        except StealthError as e:
            print(f"Registration failed: {e}")
            sys.exit(1)

        sender = StealthSender(registry=api, log=api)
        ann = sender.send("demo-recipient")
        print(f"Announced {ann.stealth_address} at offset {ann.offset}")

        # Scan only what was appended after our registration
        for match in receiver.scan(from_offset=ann.offset):
            print(f"Found {match.stealth_key_pair.address}")


if __name__ == "__main__":
    main()
