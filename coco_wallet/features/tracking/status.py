"""Canonical mapping of backend status vocabularies."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any

logger = logging.getLogger(__name__)


class StatusSignal(Enum):
    TERMINAL_SUCCESS = "terminal_success"
    TERMINAL_FAILURE = "terminal_failure"
    NON_TERMINAL = "non_terminal"


SUCCESS_STATUSES = frozenset({"success", "confirmed"})
FAILURE_STATUSES = frozenset({"failed", "error"})
PENDING_STATUSES = frozenset({"pending", "processing"})


def map_remote_status(value: Any) -> StatusSignal:
    """Classify a raw status string. Anything unknown keeps polling."""
    if value is None:
        return StatusSignal.NON_TERMINAL

    normalized = str(value).strip().lower()
    if normalized in SUCCESS_STATUSES:
        return StatusSignal.TERMINAL_SUCCESS
    if normalized in FAILURE_STATUSES:
        return StatusSignal.TERMINAL_FAILURE
    if normalized not in PENDING_STATUSES:
        logger.info("Unrecognized remote status %r treated as pending", value)
    return StatusSignal.NON_TERMINAL


@dataclass(frozen=True)
class RemoteStatus:
    raw: str | None
    signal: StatusSignal
    message: str | None = None

    @classmethod
    def pending(cls, message: str | None = None) -> "RemoteStatus":
        return cls(raw=None, signal=StatusSignal.NON_TERMINAL, message=message)

    @property
    def is_terminal(self) -> bool:
        return self.signal != StatusSignal.NON_TERMINAL


def parse_status_payload(payload: Any) -> RemoteStatus:
    """Read ``{status, message}`` or the ``{status, data: {status, message}}`` envelope."""
    if not isinstance(payload, dict):
        return RemoteStatus.pending()

    data = payload.get("data")
    if isinstance(data, dict) and "status" in data:
        raw = data.get("status")
        message = data.get("message") or payload.get("message")
    else:
        raw = payload.get("status")
        message = payload.get("message")

    raw_text = str(raw) if raw is not None else None
    return RemoteStatus(
        raw=raw_text,
        signal=map_remote_status(raw_text),
        message=str(message) if message else None,
    )
