"""Tests for the transaction record lifecycle."""

import pytest

from coco_wallet.features.transfer.models import (
    Outcome,
    OutcomeKind,
    SubmissionOutcome,
    SubmissionResult,
    TransactionRecord,
    TransactionState,
    TransferIntent,
)
from coco_wallet.shared.errors import InvalidTransitionError


@pytest.mark.unit
class TestTransactionRecord:
    def test_starts_created(self):
        record = TransactionRecord()
        assert record.state == TransactionState.CREATED
        assert record.history == [TransactionState.CREATED]
        assert record.attempt_count == 0

    def test_happy_path(self):
        record = TransactionRecord()
        record.transition(TransactionState.SUBMITTING)
        record.transition(TransactionState.POLLING)
        record.transition(TransactionState.POLLING)
        record.transition(TransactionState.CONFIRMED)

        assert record.history == [
            TransactionState.CREATED,
            TransactionState.SUBMITTING,
            TransactionState.POLLING,
            TransactionState.CONFIRMED,
        ]

    def test_no_backward_edge(self):
        record = TransactionRecord()
        record.transition(TransactionState.SUBMITTING)
        record.transition(TransactionState.AWAITING_REFERENCE)

        with pytest.raises(InvalidTransitionError):
            record.transition(TransactionState.SUBMITTING)

    @pytest.mark.parametrize(
        "terminal",
        [TransactionState.CONFIRMED, TransactionState.FAILED, TransactionState.TIMEOUT],
    )
    def test_terminal_states_are_final(self, terminal):
        record = TransactionRecord(state=TransactionState.POLLING)
        record.transition(terminal)

        assert record.state.is_terminal
        for state in TransactionState:
            with pytest.raises(InvalidTransitionError):
                record.transition(state)

    def test_awaiting_reference_cannot_confirm_directly(self):
        record = TransactionRecord(state=TransactionState.AWAITING_REFERENCE)
        with pytest.raises(InvalidTransitionError):
            record.transition(TransactionState.CONFIRMED)

    def test_snapshot_is_independent(self):
        record = TransactionRecord()
        snapshot = record.snapshot()
        record.transition(TransactionState.SUBMITTING)

        assert snapshot.state == TransactionState.CREATED
        assert snapshot.history == [TransactionState.CREATED]


@pytest.mark.unit
class TestValueTypes:
    def test_swap_detection(self):
        assert TransferIntent("a", "1", 6, destination_token="b").is_swap
        assert not TransferIntent("a", "1", 6, recipient="r").is_swap

    def test_accepted_blank_reference_becomes_none(self):
        result = SubmissionResult.accepted("")
        assert result.outcome == SubmissionOutcome.ACCEPTED
        assert result.reference is None

    def test_outcome_reference(self):
        record = TransactionRecord(reference="0xabc")
        assert Outcome.confirmed(record).reference == "0xabc"
        assert Outcome.failed("nope").reference is None
        assert Outcome.timeout(record).kind == OutcomeKind.TIMEOUT
