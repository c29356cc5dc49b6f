"""Feature modules for Coco Wallet.

- transfer: Transfer and swap intents, submission and the status screen
- tracking: Confirmation polling and single-fire outcome delivery
"""

from coco_wallet.features import transfer
from coco_wallet.features import tracking

__all__ = ["transfer", "tracking"]
