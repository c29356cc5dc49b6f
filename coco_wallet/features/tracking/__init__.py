"""Confirmation tracking feature module for Coco Wallet."""

from coco_wallet.features.tracking.reporter import CancellationToken, OutcomeReporter
from coco_wallet.features.tracking.service import (
    ConfirmationTracker,
    StatusApi,
    match_operation,
)
from coco_wallet.features.tracking.status import (
    RemoteStatus,
    StatusSignal,
    map_remote_status,
)

__all__ = [
    "CancellationToken",
    "ConfirmationTracker",
    "OutcomeReporter",
    "RemoteStatus",
    "StatusApi",
    "StatusSignal",
    "map_remote_status",
    "match_operation",
]
