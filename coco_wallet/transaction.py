from __future__ import annotations

import logging
import threading
from concurrent.futures import CancelledError, Future
from concurrent.futures import TimeoutError as FutureTimeoutError
from typing import Callable

from coco_wallet.config import ApiConfig, EngineConfig
from coco_wallet.context import WalletContext
from coco_wallet.features.tracking.reporter import OutcomeReporter
from coco_wallet.features.tracking.service import ConfirmationTracker, StatusApi
from coco_wallet.features.transfer.models import (
    Outcome,
    TransactionRecord,
    TransactionState,
    TransferIntent,
)
from coco_wallet.features.transfer.service import SubmissionClient
from coco_wallet.features.transfer.validators import TransferIntentValidator
from coco_wallet.shared.errors import DuplicateSubmissionError, ValidationError
from coco_wallet.shared.idempotency import IdempotencyRegistry, fingerprint_intent
from coco_wallet.shared.logging import get_logger
from coco_wallet.shared.network import NetworkClient

logger = logging.getLogger(__name__)

OutcomeCallback = Callable[[Outcome], None]
StateCallback = Callable[[TransactionRecord], None]


class TransactionEngine:
    """Runs one user-approved intent from validation to a single outcome.

    ``start()`` returns immediately; the work happens on a daemon thread.
    When another engine already owns the same idempotency key this engine
    sends nothing and mirrors the owner's outcome instead.
    """

    def __init__(
        self,
        intent: TransferIntent,
        context: WalletContext,
        submission_client: SubmissionClient,
        status_api: StatusApi,
        registry: IdempotencyRegistry,
        config: EngineConfig,
        on_outcome: OutcomeCallback | None = None,
        on_state_change: StateCallback | None = None,
        owned_amount: int | None = None,
        resume_record: TransactionRecord | None = None,
    ):
        self.context = context
        self.submission_client = submission_client
        self.registry = registry
        self.config = config
        self.reporter = OutcomeReporter(on_outcome)
        self.token = self.reporter.token
        self.key: str | None = None
        self._validation_error: str | None = None
        self._resuming = resume_record is not None
        self._owner: TransactionEngine = self
        self._thread: threading.Thread | None = None
        self._started = False
        self._start_lock = threading.Lock()

        if resume_record is not None:
            self.intent = intent
            self.key = resume_record.idempotency_key
            record = resume_record
        else:
            try:
                self.intent = TransferIntentValidator.normalize(
                    intent, context, owned_amount
                )
            except ValidationError as e:
                self.intent = intent
                self._validation_error = e.message
            else:
                self._claim_key()
            record = TransactionRecord(idempotency_key=self.key)

        self.tracker = ConfirmationTracker(
            status_api,
            config,
            self.token,
            record,
            on_state_change,
            claim_reference=self._claim_reference,
        )
        self.log = get_logger(__name__, {"idempotency_key": self.key})

    def _claim_key(self) -> None:
        intent = self.intent
        fingerprint = fingerprint_intent(
            self.context.address,
            intent.recipient,
            intent.source_token,
            intent.destination_token,
            intent.base_amount or "",
            intent.action_id,
        )
        self.key, self._owner = self.registry.acquire(
            fingerprint, self, intent.idempotency_key
        )
        if self._owner is self:
            key = self.key
            self.reporter.add_cleanup(lambda: self.registry.release(key))

    def _claim_reference(self, reference: str) -> bool:
        return self.registry.claim_reference(reference, self.key or "")

    @property
    def is_owner(self) -> bool:
        return self._owner is self

    @property
    def record(self) -> TransactionRecord:
        return self.tracker.record.snapshot()

    @property
    def future(self) -> Future:
        return self.reporter.future

    @property
    def done(self) -> bool:
        return self.reporter.future.done()

    def start(self) -> "TransactionEngine":
        with self._start_lock:
            if self._started:
                return self
            self._started = True
            if self.token.cancelled:
                self.reporter.close()
                return self
            self._thread = threading.Thread(
                target=self.run,
                name=f"tx-engine-{(self.key or 'invalid')[:8]}",
                daemon=True,
            )
            self._thread.start()
        return self

    def cancel(self) -> None:
        """Stop tracking. No outcome callback runs after this returns."""
        self.reporter.cancel()
        with self._start_lock:
            never_started = not self._started
            self._started = True
        if never_started:
            self.reporter.close()

    def result(self, timeout: float | None = None) -> Outcome | None:
        """Block for the outcome; None when cancelled or still pending."""
        try:
            return self.reporter.future.result(timeout)
        except CancelledError:
            return None
        except FutureTimeoutError:
            return None

    def join(self, timeout: float | None = None) -> None:
        if self._thread is not None:
            self._thread.join(timeout)

    def run(self) -> None:
        submitted = False
        try:
            if self._validation_error is not None:
                self.log.warning("Intent rejected locally: %s", self._validation_error)
                self.reporter.report(self.tracker.reject_intent(self._validation_error))
                return

            if not self.is_owner:
                self._follow(self._owner)
                return

            if self.token.cancelled:
                return

            if self._resuming:
                self.log.info("Re-checking transaction %s", self.tracker.record.reference)
                outcome = self.tracker.resume(self.intent)
            else:
                self.tracker.record_prior_operations()
                if self.token.cancelled:
                    return
                self.tracker.begin_submission()
                submitted = True
                submission = self.submission_client.submit(self.intent, self.key or "")
                self.log.info("Submission finished: %s", submission.outcome.value)
                outcome = self.tracker.track(submission, self.intent)

            if outcome is None:
                self.log.info("Tracking stopped by cancellation")
            else:
                self.reporter.report(outcome)
        except DuplicateSubmissionError as e:
            self.log.warning("%s", e)
            self.reporter.report(self.tracker.abort(str(e), submitted=False))
        except Exception as e:
            self.log.exception("Unexpected error while processing transaction")
            self.reporter.report(
                self.tracker.abort(f"Unexpected error: {e}", submitted=submitted)
            )
        finally:
            self.reporter.close()

    def _follow(self, owner: "TransactionEngine") -> None:
        self.log.info("Intent already in flight, following the existing engine")

        def mirror(future: Future) -> None:
            if future.cancelled():
                self.reporter.cancel()
                return
            self.reporter.report(future.result())

        owner.future.add_done_callback(mirror)


class TransactionManager:
    """Builds engines that share one registry and one HTTP client."""

    def __init__(
        self,
        context: WalletContext,
        api_config: ApiConfig | None = None,
        engine_config: EngineConfig | None = None,
        registry: IdempotencyRegistry | None = None,
        network_client: NetworkClient | None = None,
    ):
        self.context = context
        self.api_config = api_config or ApiConfig()
        self.engine_config = engine_config or EngineConfig()
        self.registry = registry or IdempotencyRegistry()
        self._network_client = network_client or NetworkClient(
            base_url=self.api_config.base_url,
            timeout_config=self.api_config.timeout_config,
            retry_config=self.api_config.retry_config,
        )
        self.submission_client = SubmissionClient(
            self._network_client, context, self.registry
        )
        self.status_api = StatusApi(self._network_client, context)

    def create_engine(
        self,
        intent: TransferIntent,
        on_outcome: OutcomeCallback | None = None,
        on_state_change: StateCallback | None = None,
        owned_amount: int | None = None,
    ) -> TransactionEngine:
        return TransactionEngine(
            intent,
            self.context,
            self.submission_client,
            self.status_api,
            self.registry,
            self.engine_config,
            on_outcome=on_outcome,
            on_state_change=on_state_change,
            owned_amount=owned_amount,
        )

    def execute(
        self,
        intent: TransferIntent,
        on_outcome: OutcomeCallback | None = None,
        on_state_change: StateCallback | None = None,
        owned_amount: int | None = None,
    ) -> TransactionEngine:
        engine = self.create_engine(intent, on_outcome, on_state_change, owned_amount)
        logger.info(
            "Executing %s intent (key=%s)",
            "swap" if intent.destination_token else "transfer",
            engine.key,
        )
        return engine.start()

    def recheck(
        self,
        engine: TransactionEngine,
        on_outcome: OutcomeCallback | None = None,
        on_state_change: StateCallback | None = None,
    ) -> TransactionEngine:
        """Poll again for an intent that ended in TIMEOUT. Nothing is resubmitted."""
        previous = engine.record
        record = TransactionRecord(
            idempotency_key=previous.idempotency_key,
            state=TransactionState.POLLING,
            reference=previous.reference,
            created_at=previous.created_at,
            prior_references=previous.prior_references,
        )
        follow_up = TransactionEngine(
            engine.intent,
            self.context,
            self.submission_client,
            self.status_api,
            self.registry,
            self.engine_config,
            on_outcome=on_outcome,
            on_state_change=on_state_change,
            resume_record=record,
        )
        return follow_up.start()
