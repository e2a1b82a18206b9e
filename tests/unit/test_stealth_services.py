"""
Unit tests for StealthSender / StealthReceiver.

Registry and log are injected in-memory collaborators; no network.
"""

import pytest

from stealth_kit.config import StealthConfig
from stealth_kit.core.announcements import InMemoryAnnouncementLog
from stealth_kit.core.registry import InMemoryKeyRegistry
from stealth_kit.core.stealth import StealthReceiver, StealthSender
from stealth_kit.crypto.curve import NIST256P
from stealth_kit.crypto.keys import RecipientKeys
from stealth_kit.errors import ConfigurationError, UnknownRecipient


@pytest.fixture
def registry():
    return InMemoryKeyRegistry()


@pytest.fixture
def log():
    return InMemoryAnnouncementLog()


@pytest.fixture
def alice(registry, log):
    receiver = StealthReceiver(RecipientKeys.generate(), log)
    receiver.register(registry, "alice")
    return receiver


@pytest.fixture
def sender(registry, log):
    return StealthSender(registry, log)


class TestSender:

    def test_unknown_recipient(self, sender):
        with pytest.raises(UnknownRecipient):
            sender.prepare("nobody")

    def test_send_appends_with_offset(self, sender, alice, log):
        first = sender.send("alice")
        second = sender.send("alice", metadata=b"\x01\x02")
        assert (first.offset, second.offset) == (0, 1)
        assert len(log) == 2
        assert second.metadata_bytes == b"\x01\x02"
        assert first.stealth_address != second.stealth_address

    def test_prepare_does_not_append(self, sender, alice, log):
        generated = sender.prepare("alice")
        assert len(log) == 0
        ann = sender.announce(generated)
        assert ann.stealth_address == generated.stealth_address
        assert len(log) == 1

    def test_send_is_logged(self, sender, alice, caplog):
        with caplog.at_level("INFO", logger="stealth_kit.stealth"):
            ann = sender.send("alice")
        assert ann.stealth_address in caplog.text


class TestReceiver:

    def test_scan_finds_own_payments(self, sender, alice, registry, log):
        bob = StealthReceiver(RecipientKeys.generate(), log)
        bob.register(registry, "bob")

        sent = [sender.send("alice"), sender.send("bob"), sender.send("alice")]
        matches = list(alice.scan())
        assert [m.announcement.offset for m in matches] == [0, 2]
        assert [m.stealth_key_pair.address for m in matches] == [
            sent[0].stealth_address,
            sent[2].stealth_address,
        ]
        assert [m.announcement.offset for m in bob.scan()] == [1]

    def test_checkpoint_resumes(self, sender, alice):
        sender.send("alice")
        assert len(list(alice.scan())) == 1
        assert alice.checkpoint == 1

        assert list(alice.scan()) == []
        sender.send("alice")
        assert [m.announcement.offset for m in alice.scan()] == [1]
        assert alice.checkpoint == 2

    def test_checkpoint_after_early_stop(self, sender, alice):
        for _ in range(3):
            sender.send("alice")
        first = next(alice.scan())
        assert first.announcement.offset == 0
        assert alice.checkpoint == 1
        assert [m.announcement.offset for m in alice.scan()] == [1, 2]

    def test_explicit_from_offset(self, sender, alice):
        for _ in range(3):
            sender.send("alice")
        list(alice.scan())
        assert len(list(alice.scan(from_offset=0))) == 3

    def test_scan_parallel(self, sender, alice, log):
        for _ in range(5):
            sender.send("alice")
        receiver = StealthReceiver(
            alice.keys, log, StealthConfig(scan_workers=2, scan_chunk_size=2)
        )
        assert [m.announcement.offset for m in receiver.scan_parallel()] == [0, 1, 2, 3, 4]
        assert receiver.checkpoint == 5

    def test_parallel_early_stop_keeps_rest_of_chunk(self, sender, alice, log):
        for _ in range(4):
            sender.send("alice")
        receiver = StealthReceiver(alice.keys, log, StealthConfig(scan_chunk_size=8))

        first = next(receiver.scan_parallel())
        assert first.announcement.offset == 0
        assert receiver.checkpoint == 1
        assert [m.announcement.offset for m in receiver.scan()] == [1, 2, 3]

    def test_parallel_resumes_after_early_stop(self, sender, alice, registry, log):
        bob = StealthReceiver(RecipientKeys.generate(), log)
        bob.register(registry, "bob")
        for name in ["bob", "alice", "bob", "alice", "bob"]:
            sender.send(name)
        receiver = StealthReceiver(
            alice.keys, log, StealthConfig(scan_workers=2, scan_chunk_size=4)
        )

        scan = receiver.scan_parallel()
        assert next(scan).announcement.offset == 1
        scan.close()
        assert receiver.checkpoint == 2

        assert [m.announcement.offset for m in receiver.scan_parallel()] == [3]
        assert receiver.checkpoint == 5

    def test_curve_mismatch(self, log):
        with pytest.raises(ConfigurationError):
            StealthReceiver(RecipientKeys.generate(NIST256P), log)

    def test_other_curve_and_hash(self, log):
        config = StealthConfig(curve="nist256p", hash_name="blake2b256")
        receiver = StealthReceiver(RecipientKeys.generate(NIST256P), log, config)

        nist_registry = InMemoryKeyRegistry(NIST256P)
        receiver.register(nist_registry, "carol")
        sent = StealthSender(nist_registry, log, config).send("carol")

        (match,) = receiver.scan()
        assert match.stealth_key_pair.address == sent.stealth_address
