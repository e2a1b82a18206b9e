"""Unit tests for StealthConfig validation and environment loading."""

import pytest

from stealth_kit.config import StealthConfig
from stealth_kit.crypto.curve import NIST256P, SECP256K1
from stealth_kit.crypto.hashing import BLAKE2B256, SHA256
from stealth_kit.errors import ConfigurationError


class TestStealthConfig:

    def test_defaults(self):
        config = StealthConfig().validate()
        assert config.curve_adapter() is SECP256K1
        assert config.hash_adapter() is SHA256
        assert config.scan_workers == 4
        assert config.scan_chunk_size == 256
        assert config.preserve_scan_order is True

    def test_alternative_curve_and_hash(self):
        config = StealthConfig(curve="nist256p", hash_name="blake2b256").validate()
        assert config.curve_adapter() is NIST256P
        assert config.hash_adapter() is BLAKE2B256

    def test_address_hash_rejected_as_secret_hash(self):
        with pytest.raises(ConfigurationError, match="reserved"):
            StealthConfig(hash_name="keccak256").validate()

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"curve": "ed25519"},
            {"hash_name": "md5"},
            {"scan_workers": 0},
            {"scan_chunk_size": -1},
        ],
    )
    def test_invalid(self, kwargs):
        with pytest.raises(ConfigurationError):
            StealthConfig(**kwargs).validate()


class TestFromEnv:

    def test_empty_environment_gives_defaults(self):
        assert StealthConfig.from_env({}) == StealthConfig()

    def test_reads_all_variables(self):
        env = {
            "STEALTH_CURVE": "nist256p",
            "STEALTH_HASH": "blake2b256",
            "STEALTH_SCAN_WORKERS": "8",
            "STEALTH_SCAN_CHUNK_SIZE": "64",
            "STEALTH_PRESERVE_SCAN_ORDER": "no",
        }
        config = StealthConfig.from_env(env)
        assert config == StealthConfig(
            curve="nist256p",
            hash_name="blake2b256",
            scan_workers=8,
            scan_chunk_size=64,
            preserve_scan_order=False,
        )

    def test_reads_process_environment(self, monkeypatch):
        monkeypatch.setenv("STEALTH_SCAN_WORKERS", "2")
        assert StealthConfig.from_env().scan_workers == 2

    @pytest.mark.parametrize(
        "env",
        [
            {"STEALTH_SCAN_WORKERS": "many"},
            {"STEALTH_PRESERVE_SCAN_ORDER": "maybe"},
            {"STEALTH_HASH": "keccak256"},
            {"STEALTH_CURVE": "unknown"},
        ],
    )
    def test_invalid_environment(self, env):
        with pytest.raises(ConfigurationError):
            StealthConfig.from_env(env)
