"""Confirmation tracking: polls the backend until a submitted intent settles."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Collection, Protocol

from coco_wallet.config import EngineConfig
from coco_wallet.context import WalletContext
from coco_wallet.features.tracking.reporter import CancellationToken
from coco_wallet.features.tracking.status import (
    RemoteStatus,
    StatusSignal,
    parse_status_payload,
)
from coco_wallet.features.transfer.models import (
    Outcome,
    SubmissionOutcome,
    SubmissionResult,
    TransactionRecord,
    TransactionState,
    TransferIntent,
)
from coco_wallet.features.transfer.service import extract_reference, resolve_chain_path
from coco_wallet.shared.errors import PollingTimeout
from coco_wallet.shared.network import NetworkError
from coco_wallet.shared.validation import from_base_units

logger = logging.getLogger(__name__)

TIMESTAMP_FIELDS = ("created_at", "block_timestamp", "timestamp")
AMOUNT_FIELDS = ("amount_raw", "raw_amount", "amount")
TOKEN_FIELDS = ("token_address", "from_token", "token")


class GetClientProtocol(Protocol):
    def get_optional(
        self,
        endpoint: str,
        context: str = "",
        retryable: bool = True,
        **kwargs: Any,
    ) -> dict[str, Any] | None: ...

    def get(
        self,
        endpoint: str,
        context: str = "",
        retryable: bool = True,
        stop_retrying: Callable[[], bool] | None = None,
        **kwargs: Any,
    ) -> dict[str, Any]: ...


class StatusApi:
    """Status and recent-operation lookups against the wallet backend.

    Status checks are single requests. History reads may be retried unless
    the caller passes ``retryable=False``.
    """

    def __init__(self, network_client: GetClientProtocol, context: WalletContext):
        self.network_client = network_client
        self.context = context

    def _wallet_path(self) -> str:
        return f"/{resolve_chain_path(self.context)}/wallets/{self.context.wallet_id}"

    def fetch_status(self, reference: str) -> RemoteStatus:
        payload = self.network_client.get_optional(
            f"{self._wallet_path()}/transactions/{reference}/status/",
            context="Check transaction status",
            retryable=False,
            params={"device_id": self.context.device_id},
        )
        if payload is None:
            return RemoteStatus.pending("Transaction not indexed yet")
        return parse_status_payload(payload)

    def recent_operations(
        self,
        page_size: int = 20,
        retryable: bool = True,
        stop_retrying: Callable[[], bool] | None = None,
    ) -> list[dict[str, Any]]:
        payload = self.network_client.get(
            f"{self._wallet_path()}/token-transfers/",
            context="Fetch recent operations",
            retryable=retryable,
            stop_retrying=stop_retrying,
            params={
                "device_id": self.context.device_id,
                "page": 1,
                "page_size": page_size,
            },
        )
        data = payload.get("data", payload) if isinstance(payload, dict) else {}
        results = data.get("results", []) if isinstance(data, dict) else data
        return [item for item in results or [] if isinstance(item, dict)]


def parse_timestamp(value: Any) -> float | None:
    """Epoch seconds for an ISO string or epoch number; naive ISO is UTC."""
    if value is None or value == "":
        return None
    if isinstance(value, (int, float)):
        return value / 1000 if value > 1e12 else float(value)
    try:
        parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.timestamp()


def _operation_timestamp(operation: dict[str, Any]) -> float | None:
    for name in TIMESTAMP_FIELDS:
        if operation.get(name):
            return parse_timestamp(operation.get(name))
    return None


def _operation_amount_matches(operation: dict[str, Any], intent: TransferIntent) -> bool:
    if intent.base_amount is None:
        return False
    human = from_base_units(intent.base_amount, intent.token_decimals)
    for name in AMOUNT_FIELDS:
        value = operation.get(name)
        if value is None:
            continue
        text = str(value).strip()
        if text == intent.base_amount or text == human:
            return True
    return False


def match_operation(
    operations: list[dict[str, Any]],
    record: TransactionRecord,
    intent: TransferIntent,
    clock_skew_seconds: float = 15.0,
    excluded: Collection[str] = frozenset(),
) -> dict[str, Any] | None:
    """Pick the recent operation that corresponds to this intent, newest first.

    Operations whose reference was already in the account history before
    submission, or is listed in ``excluded``, never match. Without an echoed
    idempotency key an operation must carry a timestamp no earlier than
    ``record.created_at`` minus the clock skew. An operation with no readable
    timestamp is only accepted when the pre-submission snapshot exists.
    """
    prior = record.prior_references or frozenset()

    def available(operation: dict[str, Any]) -> bool:
        reference = extract_reference(operation)
        return reference is None or (
            reference not in prior and reference not in excluded
        )

    for operation in operations:
        if (
            record.idempotency_key
            and operation.get("idempotency_key") == record.idempotency_key
            and available(operation)
        ):
            return operation

    for operation in operations:
        if str(operation.get("direction", "")).upper() == "RECEIVED":
            continue
        if not available(operation):
            continue
        if not _operation_amount_matches(operation, intent):
            continue

        if intent.is_swap:
            token = next(
                (operation.get(name) for name in TOKEN_FIELDS if operation.get(name)),
                None,
            )
            if isinstance(token, dict):
                token = token.get("address") or token.get("token_address")
            if token and str(token) != intent.source_token:
                continue
        else:
            to_address = str(operation.get("to_address", ""))
            if to_address.lower() != (intent.recipient or "").lower():
                continue

        timestamp = _operation_timestamp(operation)
        if timestamp is None:
            if record.prior_references is None:
                continue
        elif timestamp < record.created_at - clock_skew_seconds:
            continue
        return operation

    return None


class ConfirmationTracker:
    """State machine that owns one ``TransactionRecord`` until it is terminal."""

    def __init__(
        self,
        status_api: StatusApi,
        config: EngineConfig,
        token: CancellationToken,
        record: TransactionRecord | None = None,
        on_state_change: Callable[[TransactionRecord], None] | None = None,
        claim_reference: Callable[[str], bool] | None = None,
    ):
        self.status_api = status_api
        self.config = config
        self.token = token
        self.record = record or TransactionRecord()
        self.on_state_change = on_state_change
        self.claim_reference = claim_reference

    def _transition(self, state: TransactionState) -> None:
        self.record.transition(state)
        logger.debug(
            "Transaction %s -> %s (attempt %d)",
            self.record.idempotency_key,
            state.value,
            self.record.attempt_count,
        )
        if self.on_state_change:
            try:
                self.on_state_change(self.record.snapshot())
            except Exception as e:
                logger.error("Error in state change callback: %s", e)

    def record_prior_operations(self) -> None:
        """Remember which references the account history holds before submitting."""
        try:
            operations = self.status_api.recent_operations(
                self.config.discovery_page_size, retryable=False
            )
        except NetworkError as e:
            logger.warning(
                "Could not read account history before submitting: %s", e.message
            )
            return

        references = (extract_reference(operation) for operation in operations)
        self.record.prior_references = frozenset(ref for ref in references if ref)
        logger.debug(
            "%d operations already in history", len(self.record.prior_references)
        )

    def _claim(self, reference: str) -> bool:
        if self.claim_reference is None:
            return True
        return self.claim_reference(reference)

    def _select_operation(
        self, operations: list[dict[str, Any]], intent: TransferIntent
    ) -> dict[str, Any] | None:
        excluded: set[str] = set()
        while True:
            operation = match_operation(
                operations,
                self.record,
                intent,
                self.config.discovery_clock_skew_seconds,
                excluded,
            )
            if operation is None:
                return None
            reference = extract_reference(operation)
            if reference is None or self._claim(reference):
                return operation
            excluded.add(reference)

    def begin_submission(self) -> None:
        self._transition(TransactionState.SUBMITTING)

    def reject_intent(self, reason: str) -> Outcome:
        self.record.last_error = reason
        self._transition(TransactionState.FAILED)
        return Outcome.failed(reason, self.record)

    def abort(self, reason: str, submitted: bool) -> Outcome:
        """Settle after an unexpected internal error.

        Once a request may have left the device the outcome is unknown, so it
        is reported as TIMEOUT rather than FAILED.
        """
        self.record.last_error = reason
        if self.record.state.is_terminal:
            return Outcome.failed(reason, self.record)
        if submitted and self.record.state != TransactionState.CREATED:
            if self.record.state == TransactionState.AWAITING_REFERENCE:
                self._transition(TransactionState.POLLING)
            self._transition(TransactionState.TIMEOUT)
            return Outcome.timeout(self.record, reason)
        if self.record.state in (TransactionState.CREATED, TransactionState.SUBMITTING):
            self._transition(TransactionState.FAILED)
        return Outcome.failed(reason, self.record)

    def track(
        self, submission: SubmissionResult, intent: TransferIntent
    ) -> Outcome | None:
        """Drive the record to a terminal state. None means cancelled."""
        if submission.outcome == SubmissionOutcome.REJECTED:
            return self.reject_intent(submission.message or "Transaction was rejected")

        if submission.outcome == SubmissionOutcome.ACCEPTED and submission.reference:
            self.record.reference = submission.reference
            if not self._claim(submission.reference):
                logger.warning(
                    "Backend returned reference %s already tracked by another intent",
                    submission.reference,
                )
            self._transition(TransactionState.POLLING)
        else:
            if submission.outcome == SubmissionOutcome.NETWORK_UNKNOWN:
                self.record.last_error = submission.message
            self._transition(TransactionState.AWAITING_REFERENCE)
            self.discover_reference(intent)
            if self.token.cancelled:
                return None
            self._transition(TransactionState.POLLING)

        return self._poll(intent)

    def resume(self, intent: TransferIntent) -> Outcome | None:
        """Start a fresh polling budget for a record already in POLLING."""
        self.record.attempt_count = 0
        return self._poll(intent)

    def discover_reference(self, intent: TransferIntent) -> str | None:
        for attempt in range(self.config.reference_discovery_attempts):
            if attempt > 0 and self.token.wait(self.config.poll_interval_seconds):
                return None
            if self.token.cancelled:
                return None

            try:
                operations = self.status_api.recent_operations(
                    self.config.discovery_page_size,
                    stop_retrying=lambda: self.token.cancelled,
                )
            except NetworkError as e:
                self.record.last_error = e.message
                logger.warning(
                    "Reference discovery attempt %d failed: %s", attempt + 1, e.message
                )
                continue

            operation = self._select_operation(operations, intent)
            reference = extract_reference(operation) if operation else None
            if reference:
                logger.info("Discovered reference %s", reference)
                self.record.reference = reference
                return reference

        logger.info("No reference discovered, falling back to account-level status")
        return None

    def check_once(self, intent: TransferIntent) -> RemoteStatus:
        """One status lookup, by reference when known, else by account history."""
        if self.record.reference:
            return self.status_api.fetch_status(self.record.reference)

        operations = self.status_api.recent_operations(
            self.config.discovery_page_size, retryable=False
        )
        operation = self._select_operation(operations, intent)
        if operation is None:
            return RemoteStatus.pending("Operation not visible in account history")

        reference = extract_reference(operation)
        if reference:
            self.record.reference = reference
        return parse_status_payload(operation)

    def _poll(self, intent: TransferIntent) -> Outcome | None:
        while not self.token.cancelled:
            self.record.attempt_count += 1
            try:
                status = self.check_once(intent)
            except NetworkError as e:
                self.record.last_error = e.message
                logger.warning(
                    "Status check %d failed: %s", self.record.attempt_count, e.message
                )
                status = RemoteStatus.pending(e.message)

            if self.token.cancelled:
                logger.info("Discarding status received after cancellation")
                return None

            if status.signal == StatusSignal.TERMINAL_SUCCESS:
                self._transition(TransactionState.CONFIRMED)
                return Outcome.confirmed(self.record)

            if status.signal == StatusSignal.TERMINAL_FAILURE:
                reason = status.message or "Transaction failed"
                self.record.last_error = reason
                self._transition(TransactionState.FAILED)
                return Outcome.failed(reason, self.record)

            if self.record.attempt_count >= self.config.max_poll_attempts:
                timeout = PollingTimeout(self.record.attempt_count, self.record.reference)
                self.record.last_error = str(timeout)
                self._transition(TransactionState.TIMEOUT)
                return Outcome.timeout(self.record, str(timeout))

            self._transition(TransactionState.POLLING)
            if self.token.wait(self.config.poll_interval_seconds):
                break

        return None
