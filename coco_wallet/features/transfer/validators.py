"""Transfer-specific validators for Coco Wallet."""

from dataclasses import replace

from coco_wallet.context import WalletContext
from coco_wallet.features.transfer.models import TransferIntent
from coco_wallet.shared.errors import ValidationError
from coco_wallet.shared.validation import AmountValidator

MAX_SLIPPAGE_BPS = 10_000


class TransferIntentValidator:
    """Checks an intent before any network call and fixes its base amount."""

    @staticmethod
    def validate_context(context: WalletContext) -> None:
        if not context.device_id:
            raise ValidationError("Device id is required", field="device_id")
        if not context.wallet_id:
            raise ValidationError("Wallet id is required", field="wallet_id")

    @staticmethod
    def validate_fields(intent: TransferIntent) -> None:
        if not intent.source_token:
            raise ValidationError("Source token is required", field="source_token")

        if intent.is_swap:
            if not intent.quote_reference:
                raise ValidationError(
                    "A quote is required for swaps", field="quote_reference"
                )
            if intent.destination_token == intent.source_token:
                raise ValidationError(
                    "Cannot swap a token into itself", field="destination_token"
                )
        elif not intent.recipient or not intent.recipient.strip():
            raise ValidationError("Recipient is required", field="recipient")

        if intent.slippage_bps is not None and not (
            0 <= intent.slippage_bps <= MAX_SLIPPAGE_BPS
        ):
            raise ValidationError(
                f"Slippage must be between 0 and {MAX_SLIPPAGE_BPS} bps",
                field="slippage_bps",
            )

    @classmethod
    def normalize(
        cls,
        intent: TransferIntent,
        context: WalletContext,
        owned_amount: int | None = None,
    ) -> TransferIntent:
        cls.validate_context(context)
        cls.validate_fields(intent)

        if intent.base_amount is not None:
            result = AmountValidator.validate_base_amount(
                intent.base_amount, owned_amount
            )
            field = "base_amount"
        else:
            result = AmountValidator.validate_full(
                intent.human_amount, intent.token_decimals, owned_amount
            )
            field = "human_amount"

        if not result.is_valid:
            raise ValidationError(result.error_message or "Invalid amount", field=field)

        recipient = intent.recipient.strip() if intent.recipient else None
        return replace(intent, base_amount=result.normalized_value, recipient=recipient)
