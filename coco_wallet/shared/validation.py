"""Amount normalization and validation for user-entered token amounts."""

import re
from dataclasses import dataclass
from typing import Any

NO_AMOUNT = ""

_NON_AMOUNT_CHARS = re.compile(r"[^0-9.]")
_BASE_UNITS = re.compile(r"^[0-9]+$")


@dataclass
class ValidationResult:
    is_valid: bool
    error_message: str | None = None
    normalized_value: Any = None


def _valid_decimals(decimals: Any) -> bool:
    return isinstance(decimals, int) and not isinstance(decimals, bool) and decimals >= 0


class AmountNormalizer:
    """Exact conversion between human decimal strings and base-unit integers.

    Only string and integer arithmetic is used, so results never depend on
    float rounding or on the process locale. Excess fractional digits are
    truncated toward zero; a spend is never overstated.
    """

    @staticmethod
    def clean(human_amount: Any) -> str:
        """Reduce raw input to ``digits[.digits]`` or ``NO_AMOUNT``.

        Grouping separators, currency symbols, units and any other character
        that is not a digit or a dot are dropped: ``"$1,000.5 USDC"`` becomes
        ``"1000.5"``. Input left without a digit is ``NO_AMOUNT``.
        """
        if human_amount is None:
            return NO_AMOUNT

        value = _NON_AMOUNT_CHARS.sub("", str(human_amount))
        if not value:
            return NO_AMOUNT

        parts = value.split(".")
        if len(parts) > 2:
            value = parts[0] + "." + parts[1]

        if not any(ch.isdigit() for ch in value):
            return NO_AMOUNT

        if value.startswith("."):
            value = "0" + value
        return value

    @classmethod
    def to_base_units(cls, human_amount: Any, decimals: int) -> str:
        if not _valid_decimals(decimals):
            return NO_AMOUNT

        value = cls.clean(human_amount)
        if value == NO_AMOUNT:
            return NO_AMOUNT

        integer_part, _, fraction_part = value.partition(".")
        fraction_part = fraction_part[:decimals].ljust(decimals, "0")
        digits = (integer_part or "0") + fraction_part
        return str(int(digits))

    @staticmethod
    def from_base_units(base_amount: Any, decimals: int) -> str:
        if not _valid_decimals(decimals) or base_amount is None:
            return NO_AMOUNT

        value = str(base_amount).strip()
        if not _BASE_UNITS.match(value):
            return NO_AMOUNT

        whole, fraction = divmod(int(value), 10**decimals)
        if decimals == 0:
            return str(whole)

        fraction_text = str(fraction).rjust(decimals, "0").rstrip("0")
        if fraction_text:
            return f"{whole}.{fraction_text}"
        return str(whole)


def to_base_units(human_amount: Any, decimals: int) -> str:
    return AmountNormalizer.to_base_units(human_amount, decimals)


def from_base_units(base_amount: Any, decimals: int) -> str:
    return AmountNormalizer.from_base_units(base_amount, decimals)


class AmountValidator:
    @staticmethod
    def parse_human_amount(value: Any, decimals: int) -> ValidationResult:
        if value is None or not str(value).strip():
            return ValidationResult(
                is_valid=False,
                error_message="Amount is required",
            )

        if str(value).strip().startswith(("-", "+")):
            return ValidationResult(
                is_valid=False,
                error_message="Amount must be a positive number",
            )

        if not _valid_decimals(decimals):
            return ValidationResult(
                is_valid=False,
                error_message="Token decimals must be a non-negative integer",
            )

        base_amount = AmountNormalizer.to_base_units(value, decimals)
        if base_amount == NO_AMOUNT:
            return ValidationResult(
                is_valid=False,
                error_message="Amount must be a valid number",
            )

        if int(base_amount) == 0:
            return ValidationResult(
                is_valid=False,
                error_message="Amount must be greater than zero",
            )

        return ValidationResult(
            is_valid=True,
            normalized_value=base_amount,
        )

    @classmethod
    def validate_base_amount(
        cls, base_amount: Any, owned_amount: int | None = None
    ) -> ValidationResult:
        """Check an amount that was already converted to base units."""
        value = str(base_amount).strip()
        if not _BASE_UNITS.match(value):
            return ValidationResult(
                is_valid=False,
                error_message="Base amount must be a non-negative integer string",
            )

        if int(value) == 0:
            return ValidationResult(
                is_valid=False,
                error_message="Amount must be greater than zero",
            )

        if owned_amount is not None:
            balance_result = cls.validate_against_balance(value, owned_amount)
            if not balance_result.is_valid:
                return balance_result

        return ValidationResult(is_valid=True, normalized_value=value)

    @staticmethod
    def validate_against_balance(
        base_amount: str, owned_amount: int
    ) -> ValidationResult:
        if int(base_amount) > owned_amount:
            return ValidationResult(
                is_valid=False,
                error_message=f"Insufficient balance. You have {owned_amount:,} base units available",
            )

        return ValidationResult(is_valid=True)

    @classmethod
    def validate_full(
        cls,
        value: Any,
        decimals: int,
        owned_amount: int | None = None,
    ) -> ValidationResult:
        parse_result = cls.parse_human_amount(value, decimals)
        if not parse_result.is_valid:
            return parse_result

        base_amount = parse_result.normalized_value

        if owned_amount is not None:
            balance_result = cls.validate_against_balance(base_amount, owned_amount)
            if not balance_result.is_valid:
                return balance_result

        return ValidationResult(
            is_valid=True,
            normalized_value=base_amount,
        )
