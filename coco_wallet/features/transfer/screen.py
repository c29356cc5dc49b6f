"""Transaction progress modal for Coco Wallet."""

from __future__ import annotations

from typing import Protocol, cast

from textual.app import ComposeResult
from textual.containers import Horizontal
from textual.message import Message
from textual.screen import ModalScreen
from textual.widgets import Button, Label, Static

from coco_wallet.features.transfer.models import (
    Outcome,
    OutcomeKind,
    TransactionRecord,
    TransactionState,
    TransferIntent,
)
from coco_wallet.shared.logging import format_error_for_user, get_logger

logger = get_logger(__name__)

STATE_LABELS = {
    TransactionState.CREATED: "Preparing...",
    TransactionState.SUBMITTING: "Submitting...",
    TransactionState.AWAITING_REFERENCE: "Locating transaction...",
    TransactionState.POLLING: "Waiting for confirmation...",
    TransactionState.CONFIRMED: "Confirmed",
    TransactionState.FAILED: "Failed",
    TransactionState.TIMEOUT: "Still unconfirmed",
}

SPINNER_FRAMES = ["⠋", "⠙", "⠹", "⠸", "⠼", "⠴", "⠦", "⠧", "⠇", "⠏"]


class EngineLike(Protocol):
    def cancel(self) -> None: ...


class TransactionRunner(Protocol):
    def execute(self, intent: TransferIntent, on_outcome=None, on_state_change=None): ...

    def recheck(self, engine, on_outcome=None, on_state_change=None): ...


def describe_state(record: TransactionRecord) -> str:
    label = STATE_LABELS.get(record.state, record.state.value)
    if record.state == TransactionState.POLLING and record.attempt_count:
        return f"{label} (check {record.attempt_count})"
    return label


def describe_outcome(outcome: Outcome) -> tuple[str, str]:
    """Return ``(markup status, detail)`` for a final outcome."""
    reference = outcome.reference
    if outcome.kind == OutcomeKind.CONFIRMED:
        detail = f"Reference: {reference}" if reference else "Transaction confirmed"
        return "[green]✓ Confirmed[/green]", detail
    if outcome.kind == OutcomeKind.FAILED:
        return "[red]✗ Failed[/red]", format_error_for_user(
            outcome.reason or "Transaction failed"
        )
    detail = (
        "The transaction may still complete. Check again before sending it again."
    )
    if reference:
        detail += f"\nReference: {reference}"
    return "[yellow]⏳ Still unconfirmed[/yellow]", detail


class BaseModalScreen(ModalScreen):
    """Base modal screen with common key bindings."""

    BINDINGS = [
        ("escape", "app.pop_screen", "Close"),
        ("tab", "action_focus_next", "Next"),
        ("shift+tab", "action_focus_previous", "Previous"),
    ]


class TransactionStatusScreen(BaseModalScreen):
    """Starts an engine on mount and renders its progress until an outcome."""

    def __init__(self, runner: TransactionRunner, intent: TransferIntent):
        super().__init__()
        self.runner = runner
        self.intent = intent
        self.engine: EngineLike | None = None
        self.outcome: Outcome | None = None
        self._elapsed_seconds = 0
        self._loading_step = 0
        self._loading_timer = None
        self._elapsed_timer = None
        self._status_text = STATE_LABELS[TransactionState.CREATED]

    def compose(self) -> ComposeResult:
        kind = "Swap" if self.intent.is_swap else "Transfer"
        yield Label(f"⏳ {kind} Status", id="tx-status-title")
        yield Static(
            f"{self.intent.human_amount} {self.intent.source_token}",
            id="tx-status-amount",
        )
        yield Static(f"[yellow]{self._status_text}[/yellow]", id="tx-status-value")
        yield Static("", id="tx-status-detail")
        yield Static("Elapsed: 0s", id="tx-status-elapsed")
        yield Horizontal(
            Button("↻ Check again", id="recheck-button", disabled=True),
            Button("Close", id="close-button"),
        )

    def on_mount(self) -> None:
        self._start_timers()
        self.engine = self.runner.execute(
            self.intent,
            on_outcome=self._outcome_from_thread,
            on_state_change=self._state_from_thread,
        )

    def on_unmount(self) -> None:
        self._stop_timers()
        if self.engine is not None:
            self.engine.cancel()

    def _start_timers(self) -> None:
        def spin() -> None:
            self._loading_step = (self._loading_step + 1) % len(SPINNER_FRAMES)
            try:
                status_widget = cast(Static, self.query_one("#tx-status-value"))
                status_widget.update(
                    f"[yellow]{SPINNER_FRAMES[self._loading_step]} {self._status_text}[/yellow]"
                )
            except Exception:
                pass

        def tick() -> None:
            self._elapsed_seconds += 1
            try:
                elapsed_widget = cast(Static, self.query_one("#tx-status-elapsed"))
                elapsed_widget.update(f"Elapsed: {self._elapsed_seconds}s")
            except Exception:
                pass

        self._loading_timer = self.set_interval(0.08, spin)
        self._elapsed_timer = self.set_interval(1.0, tick)

    def _stop_timers(self) -> None:
        for timer in (self._loading_timer, self._elapsed_timer):
            if timer:
                try:
                    timer.stop()
                except Exception:
                    pass
        self._loading_timer = None
        self._elapsed_timer = None

    def _state_from_thread(self, record: TransactionRecord) -> None:
        self.post_message(self.StateChanged(record))

    def _outcome_from_thread(self, outcome: Outcome) -> None:
        self.post_message(self.OutcomeReady(outcome))

    def on_transaction_status_screen_state_changed(
        self, event: "TransactionStatusScreen.StateChanged"
    ) -> None:
        self.update_state(event.record)

    def on_transaction_status_screen_outcome_ready(
        self, event: "TransactionStatusScreen.OutcomeReady"
    ) -> None:
        self.show_outcome(event.outcome)

    def update_state(self, record: TransactionRecord) -> None:
        if record.state.is_terminal:
            return
        self._status_text = describe_state(record)

    def show_outcome(self, outcome: Outcome) -> None:
        self.outcome = outcome
        self._stop_timers()
        status, detail = describe_outcome(outcome)
        logger.info("Transaction finished: %s", outcome.kind.value)
        try:
            cast(Static, self.query_one("#tx-status-value")).update(status)
            cast(Static, self.query_one("#tx-status-detail")).update(detail)
            recheck = cast(Button, self.query_one("#recheck-button"))
            recheck.disabled = outcome.kind != OutcomeKind.TIMEOUT
        except Exception:
            pass
        self.post_message(self.TransactionFinished(outcome))

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "recheck-button":
            self._recheck()
        elif event.button.id == "close-button":
            self.dismiss(self.outcome)

    def _recheck(self) -> None:
        if self.engine is None or self.outcome is None:
            return
        if self.outcome.kind != OutcomeKind.TIMEOUT:
            return
        self.outcome = None
        self._status_text = STATE_LABELS[TransactionState.POLLING]
        try:
            cast(Button, self.query_one("#recheck-button")).disabled = True
            cast(Static, self.query_one("#tx-status-detail")).update("")
        except Exception:
            pass
        self._start_timers()
        self.engine = self.runner.recheck(
            self.engine,
            on_outcome=self._outcome_from_thread,
            on_state_change=self._state_from_thread,
        )

    class TransactionFinished(Message):
        def __init__(self, outcome: Outcome):
            super().__init__()
            self.outcome = outcome

    class StateChanged(Message):
        def __init__(self, record: TransactionRecord):
            super().__init__()
            self.record = record

    class OutcomeReady(Message):
        def __init__(self, outcome: Outcome):
            super().__init__()
            self.outcome = outcome
