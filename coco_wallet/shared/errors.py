"""Error taxonomy for the transaction engine.

None of these cross the engine's public boundary: they are raised and
handled inside the engine and end up as ``Outcome`` values.
"""

from __future__ import annotations


class WalletEngineError(Exception):
    """Base class for engine errors."""


class ValidationError(WalletEngineError):
    """Malformed intent. Raised before any network call and never retried."""

    def __init__(self, message: str, field: str | None = None):
        super().__init__(message)
        self.message = message
        self.field = field


class RemoteRejection(WalletEngineError):
    """The backend explicitly refused the operation."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class NetworkUncertainty(WalletEngineError):
    """Transport failure with no usable response; the remote outcome is unknown."""


class PollingTimeout(WalletEngineError):
    """Attempt budget exhausted without a terminal remote status."""

    def __init__(self, attempts: int, reference: str | None = None):
        target = reference or "account operations"
        super().__init__(
            f"Transaction not confirmed within {attempts} status checks ({target})"
        )
        self.attempts = attempts
        self.reference = reference


class DuplicateSubmissionError(WalletEngineError):
    """A submission was already issued for this idempotency key."""

    def __init__(self, key: str):
        super().__init__(f"Submission already issued for key {key}")
        self.key = key


class InvalidTransitionError(WalletEngineError):
    """A transaction record was asked to move backwards or skip a state."""
