"""Transfer intent, submission and lifecycle types."""

from __future__ import annotations

import time
from dataclasses import dataclass, field, replace
from enum import Enum

from coco_wallet.shared.errors import InvalidTransitionError


@dataclass
class TransferIntent:
    source_token: str
    human_amount: str
    token_decimals: int
    recipient: str | None = None
    destination_token: str | None = None
    quote_reference: str | None = None
    slippage_bps: int | None = None
    action_id: str | None = None
    idempotency_key: str | None = None
    base_amount: str | None = None

    @property
    def is_swap(self) -> bool:
        return self.destination_token is not None


class SubmissionOutcome(Enum):
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    NETWORK_UNKNOWN = "network_unknown"


@dataclass(frozen=True)
class SubmissionResult:
    outcome: SubmissionOutcome
    reference: str | None = None
    message: str | None = None

    @classmethod
    def accepted(cls, reference: str | None, message: str | None = None):
        return cls(SubmissionOutcome.ACCEPTED, reference or None, message)

    @classmethod
    def rejected(cls, message: str):
        return cls(SubmissionOutcome.REJECTED, None, message)

    @classmethod
    def network_unknown(cls, message: str | None = None):
        return cls(SubmissionOutcome.NETWORK_UNKNOWN, None, message)


class TransactionState(Enum):
    CREATED = "created"
    SUBMITTING = "submitting"
    AWAITING_REFERENCE = "awaiting_reference"
    POLLING = "polling"
    CONFIRMED = "confirmed"
    FAILED = "failed"
    TIMEOUT = "timeout"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATES


TERMINAL_STATES = frozenset(
    {TransactionState.CONFIRMED, TransactionState.FAILED, TransactionState.TIMEOUT}
)

ALLOWED_TRANSITIONS: dict[TransactionState, frozenset[TransactionState]] = {
    TransactionState.CREATED: frozenset(
        {TransactionState.SUBMITTING, TransactionState.FAILED}
    ),
    TransactionState.SUBMITTING: frozenset(
        {
            TransactionState.POLLING,
            TransactionState.AWAITING_REFERENCE,
            TransactionState.FAILED,
            TransactionState.TIMEOUT,
        }
    ),
    TransactionState.AWAITING_REFERENCE: frozenset({TransactionState.POLLING}),
    TransactionState.POLLING: frozenset(
        {
            TransactionState.POLLING,
            TransactionState.CONFIRMED,
            TransactionState.FAILED,
            TransactionState.TIMEOUT,
        }
    ),
    TransactionState.CONFIRMED: frozenset(),
    TransactionState.FAILED: frozenset(),
    TransactionState.TIMEOUT: frozenset(),
}


@dataclass
class TransactionRecord:
    idempotency_key: str | None = None
    state: TransactionState = TransactionState.CREATED
    reference: str | None = None
    attempt_count: int = 0
    last_error: str | None = None
    created_at: float = field(default_factory=time.time)
    history: list[TransactionState] = field(default_factory=list)
    # References already in account history before submission; None when
    # the snapshot could not be taken.
    prior_references: frozenset[str] | None = None

    def __post_init__(self):
        if not self.history:
            self.history.append(self.state)

    def transition(self, new_state: TransactionState) -> None:
        if new_state not in ALLOWED_TRANSITIONS[self.state]:
            raise InvalidTransitionError(
                f"Cannot move transaction from {self.state.value} to {new_state.value}"
            )
        if new_state != self.state:
            self.history.append(new_state)
        self.state = new_state

    def snapshot(self) -> "TransactionRecord":
        return replace(self, history=list(self.history))


class OutcomeKind(Enum):
    CONFIRMED = "confirmed"
    FAILED = "failed"
    TIMEOUT = "timeout"


@dataclass(frozen=True)
class Outcome:
    kind: OutcomeKind
    record: TransactionRecord | None = None
    reason: str | None = None

    @classmethod
    def confirmed(cls, record: TransactionRecord) -> "Outcome":
        return cls(OutcomeKind.CONFIRMED, record.snapshot())

    @classmethod
    def failed(
        cls, reason: str, record: TransactionRecord | None = None
    ) -> "Outcome":
        return cls(OutcomeKind.FAILED, record.snapshot() if record else None, reason)

    @classmethod
    def timeout(cls, record: TransactionRecord, reason: str | None = None) -> "Outcome":
        return cls(OutcomeKind.TIMEOUT, record.snapshot(), reason)

    @property
    def reference(self) -> str | None:
        return self.record.reference if self.record else None
