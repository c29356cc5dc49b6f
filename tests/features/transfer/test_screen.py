"""Tests for the transaction status screen text."""

import pytest

from coco_wallet.features.transfer.models import (
    Outcome,
    TransactionRecord,
    TransactionState,
)
from coco_wallet.features.transfer.screen import describe_outcome, describe_state


@pytest.mark.unit
class TestDescribeState:
    def test_polling_shows_attempt(self):
        record = TransactionRecord(state=TransactionState.POLLING, attempt_count=4)
        assert describe_state(record) == "Waiting for confirmation... (check 4)"

    def test_awaiting_reference(self):
        record = TransactionRecord(state=TransactionState.AWAITING_REFERENCE)
        assert describe_state(record) == "Locating transaction..."


@pytest.mark.unit
class TestDescribeOutcome:
    def test_confirmed_shows_reference(self):
        status, detail = describe_outcome(
            Outcome.confirmed(TransactionRecord(reference="0xabc"))
        )
        assert "Confirmed" in status
        assert "0xabc" in detail

    def test_failed_uses_friendly_message(self):
        status, detail = describe_outcome(Outcome.failed("insufficient balance"))
        assert "Failed" in status
        assert detail.startswith("Insufficient balance for this transaction.")

    def test_timeout_is_not_failure(self):
        status, detail = describe_outcome(
            Outcome.timeout(TransactionRecord(reference="0xabc"), "not confirmed")
        )
        assert "Failed" not in status
        assert "unconfirmed" in status
        assert "Check again" in detail
        assert "0xabc" in detail
