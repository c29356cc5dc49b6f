"""Transfer feature module for Coco Wallet."""

from coco_wallet.features.transfer.models import (
    SubmissionOutcome,
    SubmissionResult,
    TransferIntent,
)
from coco_wallet.features.transfer.service import SubmissionClient
from coco_wallet.features.transfer.validators import TransferIntentValidator
from coco_wallet.features.transfer.screen import TransactionStatusScreen

__all__ = [
    "SubmissionClient",
    "SubmissionOutcome",
    "SubmissionResult",
    "TransferIntent",
    "TransferIntentValidator",
    "TransactionStatusScreen",
]
