"""Runtime configuration for the transaction engine."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass

from coco_wallet.shared.network import RetryConfig, TimeoutConfig

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "http://127.0.0.1:8000/api/v1"


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning("Ignoring invalid %s=%r, using %s", name, raw, default)
        return default


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning("Ignoring invalid %s=%r, using %s", name, raw, default)
        return default


@dataclass
class EngineConfig:
    poll_interval_seconds: float = 2.0
    max_poll_attempts: int = 30
    reference_discovery_attempts: int = 3
    discovery_page_size: int = 20
    discovery_clock_skew_seconds: float = 15.0

    def __post_init__(self):
        if self.poll_interval_seconds < 0:
            raise ValueError("poll_interval_seconds must not be negative")
        if self.max_poll_attempts < 1:
            raise ValueError("max_poll_attempts must be at least 1")
        if self.reference_discovery_attempts < 0:
            raise ValueError("reference_discovery_attempts must not be negative")

    @property
    def polling_ceiling_seconds(self) -> float:
        return self.poll_interval_seconds * self.max_poll_attempts

    @classmethod
    def from_environment(cls) -> "EngineConfig":
        return cls(
            poll_interval_seconds=_env_float("COCO_WALLET_POLL_INTERVAL", 2.0),
            max_poll_attempts=_env_int("COCO_WALLET_MAX_POLL_ATTEMPTS", 30),
            reference_discovery_attempts=_env_int(
                "COCO_WALLET_DISCOVERY_ATTEMPTS", 3
            ),
        )


@dataclass
class ApiConfig:
    base_url: str = DEFAULT_API_URL
    timeout_config: TimeoutConfig | None = None
    retry_config: RetryConfig | None = None

    def __post_init__(self):
        if self.timeout_config is None:
            self.timeout_config = TimeoutConfig()
        if self.retry_config is None:
            self.retry_config = RetryConfig()

    @classmethod
    def from_environment(cls) -> "ApiConfig":
        return cls(
            base_url=os.getenv("COCO_WALLET_API_URL", DEFAULT_API_URL),
            timeout_config=TimeoutConfig(
                read_timeout=_env_float("COCO_WALLET_READ_TIMEOUT", 10.0),
            ),
        )
