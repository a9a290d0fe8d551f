"""Amount value type and parsing of user-entered amounts."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any


@dataclass(frozen=True)
class Amount:
    """Integer amount in the smallest unit of an asset (sun for TRX)."""

    value: int
    decimals: int

    def __int__(self) -> int:
        return self.value

    def __str__(self) -> str:
        return self.to_human()

    def to_human(self) -> str:
        text = format(Decimal(self.value).scaleb(-self.decimals), "f")
        if "." in text:
            text = text.rstrip("0").rstrip(".")
        return text

    @classmethod
    def from_human(cls, value: str, decimals: int) -> "Amount":
        result = AmountValidator.validate_full(value, decimals)
        if not result.is_valid:
            raise ValueError(result.error_message or "Invalid amount")
        return cls(result.normalized_value, decimals)


@dataclass
class ValidationResult:
    is_valid: bool
    error_message: str | None = None
    normalized_value: Any = None


class AmountValidator:
    MAX_AMOUNT = 9_223_372_036_854_775_807

    @staticmethod
    def parse_human_amount(value: str) -> ValidationResult:
        if not value or not value.strip():
            return ValidationResult(
                is_valid=False,
                error_message="Amount is required",
            )

        raw_amount = value.strip().replace(",", "").replace(" ", "")

        if raw_amount.startswith("-") or raw_amount.startswith("+"):
            return ValidationResult(
                is_valid=False,
                error_message="Amount must be a positive number",
            )

        try:
            amount_decimal = Decimal(raw_amount)
        except (InvalidOperation, ValueError):
            return ValidationResult(
                is_valid=False,
                error_message="Amount must be a valid number",
            )

        if not amount_decimal.is_finite():
            return ValidationResult(
                is_valid=False,
                error_message="Invalid numeric format (special value detected)",
            )

        if amount_decimal == 0:
            return ValidationResult(
                is_valid=False,
                error_message="Amount must be greater than zero",
            )

        return ValidationResult(
            is_valid=True,
            normalized_value=amount_decimal,
        )

    @staticmethod
    def validate_decimal_places(amount: Decimal, decimals: int) -> ValidationResult:
        exponent = amount.as_tuple().exponent
        if not isinstance(exponent, int):
            return ValidationResult(
                is_valid=False,
                error_message="Invalid numeric format",
            )

        decimal_places = max(0, -exponent)
        if decimal_places > decimals:
            if decimals == 0:
                return ValidationResult(
                    is_valid=False,
                    error_message="This asset does not support decimal amounts",
                )
            return ValidationResult(
                is_valid=False,
                error_message=f"Too many decimal places. Maximum {decimals} allowed for this asset",
            )

        return ValidationResult(is_valid=True)

    @staticmethod
    def convert_to_base_units(amount: Decimal, decimals: int) -> ValidationResult:
        try:
            base_units = int(amount.scaleb(decimals))
        except (TypeError, ValueError, OverflowError):
            return ValidationResult(
                is_valid=False,
                error_message="Failed to convert amount to base units",
            )

        if base_units <= 0:
            return ValidationResult(
                is_valid=False,
                error_message="Amount must be greater than zero",
            )

        if base_units > AmountValidator.MAX_AMOUNT:
            return ValidationResult(
                is_valid=False,
                error_message="Amount exceeds maximum allowed value",
            )

        return ValidationResult(
            is_valid=True,
            normalized_value=base_units,
        )

    @classmethod
    def validate_full(cls, value: str, decimals: int) -> ValidationResult:
        parse_result = cls.parse_human_amount(value)
        if not parse_result.is_valid:
            return parse_result

        amount = parse_result.normalized_value

        decimal_result = cls.validate_decimal_places(amount, decimals)
        if not decimal_result.is_valid:
            return decimal_result

        return cls.convert_to_base_units(amount, decimals)
