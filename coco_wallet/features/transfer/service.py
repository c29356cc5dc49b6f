"""Submission of normalized transfer and swap intents to the execution backend."""

from __future__ import annotations

import logging
from typing import Any, Protocol

from coco_wallet.context import DEFAULT_CHAIN_PATH, WalletContext
from coco_wallet.features.transfer.models import (
    SubmissionOutcome,
    SubmissionResult,
    TransferIntent,
)
from coco_wallet.shared.errors import (
    DuplicateSubmissionError,
    NetworkUncertainty,
    RemoteRejection,
    ValidationError,
)
from coco_wallet.shared.idempotency import IdempotencyRegistry
from coco_wallet.shared.network import NetworkError

logger = logging.getLogger(__name__)

REFERENCE_FIELDS = (
    "reference",
    "transaction_hash",
    "transaction_id",
    "tx_hash",
    "signature",
)

REJECTED_STATUSES = {"error", "failed", "fail"}


class PostClientProtocol(Protocol):
    """The slice of ``NetworkClient`` used for submissions."""

    def post(
        self,
        endpoint: str,
        context: str = "",
        retryable: bool = True,
        **kwargs: Any,
    ) -> dict[str, Any]: ...


def resolve_chain_path(context: WalletContext) -> str:
    chain_path = context.chain_path
    if chain_path is None:
        logger.error(
            "Unsupported chain %r, falling back to %s", context.chain, DEFAULT_CHAIN_PATH
        )
        return DEFAULT_CHAIN_PATH
    return chain_path


def extract_reference(payload: Any) -> str | None:
    """Find the remote operation id in a response body or its ``data`` envelope."""
    if not isinstance(payload, dict):
        return None

    candidates = [payload]
    data = payload.get("data")
    if isinstance(data, dict):
        candidates.insert(0, data)

    for candidate in candidates:
        for name in REFERENCE_FIELDS:
            value = candidate.get(name)
            if value:
                return str(value)
    return None


def extract_message(payload: Any) -> str | None:
    if not isinstance(payload, dict):
        return None
    message = payload.get("message")
    data = payload.get("data")
    if not message and isinstance(data, dict):
        message = data.get("message")
    return str(message) if message else None


class SubmissionClient:
    """Issues at most one execution request per idempotency key."""

    def __init__(
        self,
        network_client: PostClientProtocol,
        context: WalletContext,
        registry: IdempotencyRegistry,
    ):
        self.network_client = network_client
        self.context = context
        self.registry = registry

    def build_request(
        self, intent: TransferIntent, key: str
    ) -> tuple[str, dict[str, Any]]:
        chain_path = resolve_chain_path(self.context)
        body: dict[str, Any] = {
            "device_id": self.context.device_id,
            "from_token": intent.source_token,
            "amount": intent.base_amount,
            "idempotency_key": key,
            "payment_password": self.context.payment_password,
        }

        if intent.is_swap:
            endpoint = f"/{chain_path}/wallets/{self.context.wallet_id}/swap/execute/"
            body["to_token"] = intent.destination_token
            body["quote_id"] = intent.quote_reference
            if intent.slippage_bps is not None:
                body["slippage_bps"] = intent.slippage_bps
        else:
            endpoint = f"/{chain_path}/wallets/{self.context.wallet_id}/transfer/"
            body["to_address"] = intent.recipient

        return endpoint, body

    def submit(self, intent: TransferIntent, key: str) -> SubmissionResult:
        if intent.base_amount is None:
            raise ValidationError("Intent must be normalized before submission")

        if not self.registry.begin_submission(key):
            logger.warning("Refusing second submission for key %s", key)
            raise DuplicateSubmissionError(key)

        endpoint, body = self.build_request(intent, key)
        logger.info(
            "Submitting %s of %s base units (key=%s)",
            "swap" if intent.is_swap else "transfer",
            intent.base_amount,
            key,
        )

        try:
            result = self._send(endpoint, body, key)
        except RemoteRejection as e:
            logger.warning("Submission rejected (HTTP %s): %s", e.status_code, e.message)
            result = SubmissionResult.rejected(e.message)
        except NetworkUncertainty as e:
            logger.warning("Submission outcome unknown: %s", e)
            result = SubmissionResult.network_unknown(str(e))

        self._apply_key_side_effect(result, key)
        return result

    def _send(self, endpoint: str, body: dict[str, Any], key: str) -> SubmissionResult:
        try:
            response = self.network_client.post(
                endpoint,
                context="Submit transaction",
                retryable=False,
                json=body,
                headers={"Idempotency-Key": key},
            )
        except NetworkError as e:
            raise self._classify_error(e) from e
        return self._classify_response(response)

    @staticmethod
    def _classify_error(error: NetworkError) -> RemoteRejection | NetworkUncertainty:
        """4xx with a response is a rejection; anything else may have executed."""
        if error.response_received and (error.status_code or 0) < 500:
            message = extract_message(error.response_data) or error.remote_message
            return RemoteRejection(message or error.message, error.status_code)
        return NetworkUncertainty(error.message)

    def _classify_response(self, response: dict[str, Any]) -> SubmissionResult:
        status = str(response.get("status") or "").strip().lower()
        message = extract_message(response)

        if status in REJECTED_STATUSES:
            raise RemoteRejection(message or "Transaction was rejected")

        reference = extract_reference(response)
        if reference is None:
            logger.warning("Submission accepted without a reference")
        else:
            logger.info("Submission accepted, reference=%s", reference)
        return SubmissionResult.accepted(reference, message)

    def _apply_key_side_effect(self, result: SubmissionResult, key: str) -> None:
        if result.outcome == SubmissionOutcome.ACCEPTED:
            if not self.registry.mark_tracking(key):
                logger.warning("Key %s had no pending submission to hand over", key)
        elif result.outcome == SubmissionOutcome.REJECTED:
            self.registry.release(key)
