#!/usr/bin/env python3
"""
Example 04: Scan a large log with a thread pool.

Usage:
    python examples/04_parallel_scan.py [n_announcements]
"""

import logging
import sys
import time

from stealth_kit import (
    InMemoryAnnouncementLog,
    RecipientKeys,
    generate_stealth_address,
    scan_announcements,
    scan_announcements_parallel,
)

logging.basicConfig(level=logging.WARNING, format="%(levelname)s %(name)s: %(message)s")


def main():
    count = int(sys.argv[1]) if len(sys.argv) > 1 else 500
    keys = RecipientKeys.generate()
    others = RecipientKeys.generate()
    log = InMemoryAnnouncementLog()

    print(f"Building a log of {count} announcements...")
    for i in range(count):
        target = keys if i % 50 == 0 else others
        g = generate_stealth_address(target.spending.public_key, target.viewing.public_key)
        log.append(g.ephemeral_public_key, g.stealth_address, g.view_tag)

    # A malformed entry: logged at WARNING and skipped
    log.append(b"\x05" * 33, "0x" + "00" * 20, b"\x00" * 12)

    spend, view = keys.spending.private_scalar, keys.viewing.private_scalar

    start = time.perf_counter()
    sequential = list(scan_announcements(log.iterate(), spend, view))
    print(f"Sequential: {len(sequential)} matches in {time.perf_counter() - start:.2f}s")

    start = time.perf_counter()
    parallel = list(
        scan_announcements_parallel(log.iterate(), spend, view, max_workers=4, chunk_size=128)
    )
    print(f"Parallel:   {len(parallel)} matches in {time.perf_counter() - start:.2f}s")

    assert [m.announcement.offset for m in parallel] == [m.announcement.offset for m in sequential]


if __name__ == "__main__":
    main()
