"""Idempotency keys for user-approved transfer and swap intents.

A key names one logical user action. Every network attempt made for that
action reuses the key, and the registry refuses to let a second submission
go out for a key that is still in flight.
"""

from __future__ import annotations

import hashlib
import json
import logging
import threading
import time
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

logger = logging.getLogger(__name__)


class KeyState(Enum):
    ISSUED = "issued"
    SUBMITTING = "submitting"
    TRACKING = "tracking"


@dataclass
class _KeyEntry:
    key: str
    fingerprint: str
    state: KeyState = KeyState.ISSUED
    created_at: float = field(default_factory=time.time)
    handle: Any = None


def fingerprint_intent(
    sender: str,
    recipient: str | None,
    source_token: str,
    destination_token: str | None,
    base_amount: str,
    action_id: str | None = None,
) -> str:
    """SHA-256 over a canonical JSON rendering of the intent's identity."""
    payload = {
        "sender": sender,
        "recipient": recipient or "",
        "source_token": source_token,
        "destination_token": destination_token or "",
        "base_amount": base_amount,
        "action_id": action_id or "",
    }
    content = json.dumps(payload, sort_keys=True, separators=(",", ":"))
    return hashlib.sha256(content.encode("utf-8")).hexdigest()


class IdempotencyRegistry:
    """Thread-safe registry of in-flight idempotency keys."""

    def __init__(self):
        self._lock = threading.Lock()
        self._by_fingerprint: dict[str, _KeyEntry] = {}
        self._by_key: dict[str, _KeyEntry] = {}
        self._claimed_references: dict[str, str] = {}

    @staticmethod
    def _new_key() -> str:
        return uuid.uuid4().hex

    def _entry_for(self, fingerprint: str, preferred_key: str | None) -> _KeyEntry:
        entry = self._by_fingerprint.get(fingerprint)
        if entry is None and preferred_key and preferred_key in self._by_key:
            entry = self._by_key[preferred_key]
        if entry is None:
            entry = _KeyEntry(
                key=preferred_key or self._new_key(), fingerprint=fingerprint
            )
            self._by_fingerprint[fingerprint] = entry
            self._by_key[entry.key] = entry
            logger.debug("Issued idempotency key %s", entry.key)
        return entry

    def key_for(self, fingerprint: str, preferred_key: str | None = None) -> str:
        """Return the in-flight key for ``fingerprint`` or issue a new one.

        ``preferred_key`` is adopted for a new entry, so a caller retrying the
        same user action after a restart keeps its original key.
        """
        with self._lock:
            return self._entry_for(fingerprint, preferred_key).key

    def acquire(
        self, fingerprint: str, handle: Any, preferred_key: str | None = None
    ) -> tuple[str, Any]:
        """Atomically resolve the key and attach ``handle`` if it is the first.

        Returns ``(key, owner)``; ``owner is handle`` only for the first caller.
        """
        with self._lock:
            entry = self._entry_for(fingerprint, preferred_key)
            if entry.handle is None:
                entry.handle = handle
            return entry.key, entry.handle

    def begin_submission(self, key: str) -> bool:
        """Claim the single submission slot for ``key``.

        Returns False when the key is unknown or a submission was already
        issued for it.
        """
        with self._lock:
            entry = self._by_key.get(key)
            if entry is None or entry.state != KeyState.ISSUED:
                return False
            entry.state = KeyState.SUBMITTING
            return True

    def mark_tracking(self, key: str) -> bool:
        """Hand a submitted key over to confirmation tracking.

        Returns False when the key is unknown or no submission is pending.
        """
        with self._lock:
            entry = self._by_key.get(key)
            if entry is None or entry.state != KeyState.SUBMITTING:
                return False
            entry.state = KeyState.TRACKING
            return True

    def is_in_flight(self, key: str) -> bool:
        with self._lock:
            return key in self._by_key

    def claim_reference(self, reference: str, key: str) -> bool:
        """Record that ``reference`` belongs to ``key``.

        Returns False when another key already claimed it. Claims outlive
        ``release`` so a settled operation is never adopted a second time.
        """
        with self._lock:
            owner = self._claimed_references.setdefault(reference, key)
        if owner != key:
            logger.debug("Reference %s already claimed by key %s", reference, owner)
            return False
        return True

    def release(self, key: str) -> None:
        with self._lock:
            entry = self._by_key.pop(key, None)
            if entry is None:
                return
            if self._by_fingerprint.get(entry.fingerprint) is entry:
                del self._by_fingerprint[entry.fingerprint]
        logger.debug("Released idempotency key %s", key)

    def __len__(self) -> int:
        with self._lock:
            return len(self._by_key)
