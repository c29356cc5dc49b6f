"""Coco Wallet - transaction submission and confirmation tracking engine.

This package is organized into feature-based modules:
- features.transfer: Intents, validation, submission and the status screen
- features.tracking: Status polling, reference discovery and outcome delivery
- shared: Shared utilities (network, validation, idempotency, logging)
"""

from coco_wallet.config import ApiConfig, EngineConfig
from coco_wallet.context import WalletContext, generate_device_id
from coco_wallet.features.transfer.models import (
    Outcome,
    OutcomeKind,
    TransactionRecord,
    TransactionState,
    TransferIntent,
)
from coco_wallet.shared import (
    AmountNormalizer,
    IdempotencyRegistry,
    NetworkClient,
    NetworkError,
    NetworkErrorType,
    RetryConfig,
    TimeoutConfig,
)
from coco_wallet.transaction import TransactionEngine, TransactionManager

__version__ = "0.1.0"
__all__ = [
    "ApiConfig",
    "EngineConfig",
    "WalletContext",
    "generate_device_id",
    "TransferIntent",
    "TransactionRecord",
    "TransactionState",
    "Outcome",
    "OutcomeKind",
    "TransactionEngine",
    "TransactionManager",
    "AmountNormalizer",
    "IdempotencyRegistry",
    "NetworkClient",
    "NetworkError",
    "NetworkErrorType",
    "RetryConfig",
    "TimeoutConfig",
]
