"""Immutable wallet/session context handed to the engine at construction."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field

CHAIN_PATHS = {
    "sol": "solana",
    "solana": "solana",
    "eth": "evm",
    "evm": "evm",
    "base": "evm",
}

DEFAULT_CHAIN_PATH = "evm"


def generate_device_id(platform: str = "android") -> str:
    prefix = "ios" if platform.lower() == "ios" else "android"
    return f"{prefix}_{uuid.uuid4()}"


@dataclass(frozen=True)
class WalletContext:
    device_id: str
    wallet_id: str
    chain: str
    address: str
    payment_password: str = field(default="", repr=False)

    @property
    def chain_path(self) -> str | None:
        """Backend path segment for this chain, None when unsupported."""
        return CHAIN_PATHS.get((self.chain or "").lower())
