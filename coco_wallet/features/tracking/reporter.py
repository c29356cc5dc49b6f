"""Single-fire delivery of a transaction outcome to the owning UI context."""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Future
from typing import Callable

from coco_wallet.features.transfer.models import Outcome

logger = logging.getLogger(__name__)


class CancellationToken:
    """Cooperative cancellation flag that doubles as an interruptible timer."""

    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def wait(self, timeout: float) -> bool:
        """Sleep up to ``timeout`` seconds; True means cancelled meanwhile."""
        return self._event.wait(timeout)


class OutcomeReporter:
    """Delivers exactly one outcome, unless cancelled first.

    Delivery and cancellation share one lock, so once ``cancel()`` returns
    no callback can run anymore.
    """

    def __init__(
        self,
        callback: Callable[[Outcome], None] | None = None,
        token: CancellationToken | None = None,
    ):
        self._callback = callback
        self.token = token or CancellationToken()
        self.future: Future[Outcome] = Future()
        self._lock = threading.RLock()
        self._fired = False
        self._cleaned_up = False
        self._cleanups: list[Callable[[], None]] = []

    @property
    def fired(self) -> bool:
        with self._lock:
            return self._fired

    @property
    def cancelled(self) -> bool:
        return self.token.cancelled

    def add_cleanup(self, cleanup: Callable[[], None]) -> None:
        with self._lock:
            self._cleanups.append(cleanup)

    def report(self, outcome: Outcome) -> bool:
        with self._lock:
            if self._fired:
                logger.debug("Ignoring duplicate outcome %s", outcome.kind.value)
                return False
            if self.token.cancelled:
                logger.info("Discarding %s outcome after cancellation", outcome.kind.value)
                return False
            self._fired = True

            self.close()
            self.future.set_result(outcome)
            if self._callback:
                try:
                    self._callback(outcome)
                except Exception as e:
                    logger.error("Error in outcome callback: %s", e)
            return True

    def cancel(self) -> None:
        with self._lock:
            if self._fired:
                return
            self.token.cancel()
            self.future.cancel()
        logger.info("Outcome delivery cancelled")

    def close(self) -> None:
        """Run registered cleanups once."""
        with self._lock:
            if self._cleaned_up:
                return
            self._cleaned_up = True
            cleanups = list(self._cleanups)

        for cleanup in cleanups:
            try:
                cleanup()
            except Exception as e:
                logger.error("Error during outcome cleanup: %s", e)
