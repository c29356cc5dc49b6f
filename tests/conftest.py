import tempfile
from pathlib import Path

import pytest

from coco_wallet.config import EngineConfig
from coco_wallet.context import WalletContext
from coco_wallet.features.transfer.models import TransferIntent
from coco_wallet.shared.idempotency import IdempotencyRegistry
from tests.helpers import RECIPIENT, TOKEN


@pytest.fixture
def wallet_context():
    """Fixture providing an EVM wallet context"""
    return WalletContext(
        device_id="android_4f1c2a3e-0000-4000-8000-000000000001",
        wallet_id="42",
        chain="eth",
        address="0x9999999999999999999999999999999999999999",
        payment_password="123456",
    )


@pytest.fixture
def fast_config():
    """Fixture providing an engine config that never sleeps"""
    return EngineConfig(
        poll_interval_seconds=0.0,
        max_poll_attempts=30,
        reference_discovery_attempts=1,
    )


@pytest.fixture
def registry():
    return IdempotencyRegistry()


@pytest.fixture
def transfer_intent():
    """Fixture providing a 1.5 token transfer with 6 decimals"""
    return TransferIntent(
        source_token=TOKEN,
        human_amount="1.5",
        token_decimals=6,
        recipient=RECIPIENT,
    )


@pytest.fixture(autouse=True)
def isolate_log_dir(monkeypatch):
    """Keep log files out of the user's home directory."""
    with tempfile.TemporaryDirectory(prefix="coco-wallet-test-") as tmp_dir:
        monkeypatch.setenv("COCO_WALLET_LOG_DIR", str(Path(tmp_dir)))
        yield
