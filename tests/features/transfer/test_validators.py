"""Tests for intent validation."""

from __future__ import annotations

from dataclasses import replace

import pytest

from coco_wallet.context import WalletContext
from coco_wallet.features.transfer.models import TransferIntent
from coco_wallet.features.transfer.validators import TransferIntentValidator
from coco_wallet.shared.errors import ValidationError
from tests.helpers import RECIPIENT, TOKEN


def _swap(**overrides):
    values = dict(
        source_token=TOKEN,
        human_amount="2",
        token_decimals=6,
        destination_token="0xdest",
        quote_reference="quote-1",
    )
    values.update(overrides)
    return TransferIntent(**values)


@pytest.mark.unit
class TestTransferIntentValidator:
    def test_normalize_sets_base_amount(self, transfer_intent, wallet_context):
        normalized = TransferIntentValidator.normalize(transfer_intent, wallet_context)
        assert normalized.base_amount == "1500000"
        assert transfer_intent.base_amount is None

    def test_normalize_strips_recipient(self, wallet_context):
        intent = TransferIntent(TOKEN, "1", 6, recipient=f"  {RECIPIENT} ")
        normalized = TransferIntentValidator.normalize(intent, wallet_context)
        assert normalized.recipient == RECIPIENT

    def test_normalize_is_applied_once(self, transfer_intent, wallet_context):
        once = TransferIntentValidator.normalize(transfer_intent, wallet_context)
        twice = TransferIntentValidator.normalize(once, wallet_context)
        assert twice == once
        assert twice.base_amount == "1500000"

    @pytest.mark.parametrize("base_amount", ["1.5", "-3", "0", "abc"])
    def test_preset_base_amount_is_checked(
        self, transfer_intent, wallet_context, base_amount
    ):
        intent = replace(transfer_intent, base_amount=base_amount)
        with pytest.raises(ValidationError) as exc_info:
            TransferIntentValidator.normalize(intent, wallet_context)
        assert exc_info.value.field == "base_amount"

    def test_preset_base_amount_balance_check(self, transfer_intent, wallet_context):
        intent = replace(transfer_intent, base_amount="1500000")
        with pytest.raises(ValidationError, match="Insufficient balance"):
            TransferIntentValidator.normalize(
                intent, wallet_context, owned_amount=1_000_000
            )

    def test_missing_recipient(self, wallet_context):
        with pytest.raises(ValidationError) as exc_info:
            TransferIntentValidator.normalize(TransferIntent(TOKEN, "1", 6), wallet_context)
        assert exc_info.value.field == "recipient"

    def test_invalid_amount(self, wallet_context):
        intent = TransferIntent(TOKEN, "abc", 6, recipient=RECIPIENT)
        with pytest.raises(ValidationError) as exc_info:
            TransferIntentValidator.normalize(intent, wallet_context)
        assert exc_info.value.field == "human_amount"

    def test_insufficient_balance(self, transfer_intent, wallet_context):
        with pytest.raises(ValidationError, match="Insufficient balance"):
            TransferIntentValidator.normalize(
                transfer_intent, wallet_context, owned_amount=1_000_000
            )

    def test_swap_requires_quote(self, wallet_context):
        with pytest.raises(ValidationError) as exc_info:
            TransferIntentValidator.normalize(
                _swap(quote_reference=None), wallet_context
            )
        assert exc_info.value.field == "quote_reference"

    def test_swap_into_same_token(self, wallet_context):
        with pytest.raises(ValidationError):
            TransferIntentValidator.normalize(
                _swap(destination_token=TOKEN), wallet_context
            )

    def test_swap_without_recipient_is_valid(self, wallet_context):
        normalized = TransferIntentValidator.normalize(_swap(), wallet_context)
        assert normalized.base_amount == "2000000"

    @pytest.mark.parametrize("slippage", [-1, 10_001])
    def test_slippage_range(self, wallet_context, slippage):
        with pytest.raises(ValidationError):
            TransferIntentValidator.normalize(
                _swap(slippage_bps=slippage), wallet_context
            )

    def test_context_requires_wallet(self, transfer_intent):
        context = WalletContext("android_1", "", "evm", "0xabc")
        with pytest.raises(ValidationError) as exc_info:
            TransferIntentValidator.normalize(transfer_intent, context)
        assert exc_info.value.field == "wallet_id"
