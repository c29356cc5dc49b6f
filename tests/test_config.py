"""Tests for engine configuration and wallet context."""

import pytest

from coco_wallet.config import DEFAULT_API_URL, ApiConfig, EngineConfig
from coco_wallet.context import WalletContext, generate_device_id


@pytest.mark.unit
class TestEngineConfig:
    def test_defaults(self):
        config = EngineConfig()
        assert config.poll_interval_seconds == 2.0
        assert config.max_poll_attempts == 30
        assert config.polling_ceiling_seconds == 60.0

    def test_from_environment(self, monkeypatch):
        monkeypatch.setenv("COCO_WALLET_POLL_INTERVAL", "0.5")
        monkeypatch.setenv("COCO_WALLET_MAX_POLL_ATTEMPTS", "10")
        config = EngineConfig.from_environment()
        assert config.poll_interval_seconds == 0.5
        assert config.max_poll_attempts == 10

    def test_invalid_environment_uses_default(self, monkeypatch):
        monkeypatch.setenv("COCO_WALLET_MAX_POLL_ATTEMPTS", "many")
        assert EngineConfig.from_environment().max_poll_attempts == 30

    def test_rejects_zero_attempts(self):
        with pytest.raises(ValueError):
            EngineConfig(max_poll_attempts=0)


@pytest.mark.unit
class TestApiConfig:
    def test_defaults(self):
        config = ApiConfig()
        assert config.base_url == DEFAULT_API_URL
        assert config.timeout_config is not None
        assert config.retry_config is not None

    def test_from_environment(self, monkeypatch):
        monkeypatch.setenv("COCO_WALLET_API_URL", "https://api.example.com/v1")
        monkeypatch.setenv("COCO_WALLET_READ_TIMEOUT", "20")
        config = ApiConfig.from_environment()
        assert config.base_url == "https://api.example.com/v1"
        assert config.timeout_config.read_timeout == 20.0


@pytest.mark.unit
class TestWalletContext:
    def test_chain_paths(self):
        assert WalletContext("d", "w", "SOL", "a").chain_path == "solana"
        assert WalletContext("d", "w", "base", "a").chain_path == "evm"
        assert WalletContext("d", "w", "tron", "a").chain_path is None

    def test_password_not_in_repr(self):
        context = WalletContext("d", "w", "evm", "a", payment_password="9876")
        assert "9876" not in repr(context)

    def test_device_id_format(self):
        assert generate_device_id("ios").startswith("ios_")
        assert generate_device_id().startswith("android_")
        assert generate_device_id() != generate_device_id()
