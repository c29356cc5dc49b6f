"""Shared utilities for Coco Wallet."""

from coco_wallet.shared.errors import (
    DuplicateSubmissionError,
    InvalidTransitionError,
    NetworkUncertainty,
    PollingTimeout,
    RemoteRejection,
    ValidationError,
    WalletEngineError,
)
from coco_wallet.shared.idempotency import IdempotencyRegistry, fingerprint_intent
from coco_wallet.shared.logging import (
    ContextAdapter,
    LoggingConfig,
    LogLevel,
    format_error_for_user,
    get_logger,
    get_user_friendly_error,
    sanitize_dict,
    sanitize_message,
    setup_logging,
)
from coco_wallet.shared.network import (
    NetworkClient,
    NetworkError,
    NetworkErrorType,
    RetryConfig,
    TimeoutConfig,
)
from coco_wallet.shared.validation import (
    AmountNormalizer,
    AmountValidator,
    ValidationResult,
    from_base_units,
    to_base_units,
)

__all__ = [
    "NetworkClient",
    "NetworkError",
    "NetworkErrorType",
    "RetryConfig",
    "TimeoutConfig",
    "AmountNormalizer",
    "AmountValidator",
    "ValidationResult",
    "from_base_units",
    "to_base_units",
    "IdempotencyRegistry",
    "fingerprint_intent",
    "WalletEngineError",
    "ValidationError",
    "RemoteRejection",
    "NetworkUncertainty",
    "PollingTimeout",
    "DuplicateSubmissionError",
    "InvalidTransitionError",
    "ContextAdapter",
    "LoggingConfig",
    "LogLevel",
    "format_error_for_user",
    "get_logger",
    "get_user_friendly_error",
    "sanitize_dict",
    "sanitize_message",
    "setup_logging",
]
