"""
Tests for the monetary value objects.

Covers:
- Money construction, arithmetic and same-currency enforcement
- Float rejection
- ExchangeRate conversion
- MonetaryValue conversion with its frozen rate
- validate_frozen_rate rules
"""

from decimal import Decimal

import pytest

from ledger_kernel.domain.values import (
    Currency,
    ExchangeRate,
    MonetaryValue,
    Money,
    validate_frozen_rate,
)
from ledger_kernel.exceptions import (
    BaseCurrencyRateError,
    CurrencyMismatchError,
    ExchangeRateNotFoundError,
    InvalidCurrencyError,
    InvalidExchangeRateError,
)


class TestMoney:
    """Money construction and arithmetic."""

    def test_of_accepts_strings(self):
        """String amounts become exact Decimals."""
        money = Money.of("10.10", "TRY")

        assert money.amount == Decimal("10.10")
        assert money.currency == Currency("TRY")

    def test_float_rejected(self):
        """Floats are refused at construction."""
        with pytest.raises(TypeError):
            Money.of(0.1, "TRY")

    def test_unknown_currency_rejected(self):
        with pytest.raises(InvalidCurrencyError):
            Money.of("1", "XYZ")

    def test_currency_code_normalized(self):
        assert Money.of("1", " usd ").currency.code == "USD"

    def test_addition_is_exact(self):
        """0.1 + 0.2 is exactly 0.3."""
        total = Money.of("0.1", "TRY") + Money.of("0.2", "TRY")

        assert total == Money.of("0.3", "TRY")

    def test_mixed_currency_addition_rejected(self):
        with pytest.raises(CurrencyMismatchError):
            Money.of("1", "TRY") + Money.of("1", "USD")

    def test_mixed_currency_comparison_rejected(self):
        with pytest.raises(CurrencyMismatchError):
            Money.of("1", "TRY") < Money.of("1", "EUR")

    def test_negation_and_sign(self):
        money = -Money.of("5", "EUR")

        assert money.is_negative
        assert abs(money).is_positive
        assert Money.zero("EUR").is_zero

    def test_multiply_by_decimal(self):
        assert Money.of("2.5", "USD") * Decimal("4") == Money.of("10", "USD")

    def test_multiply_by_float_rejected(self):
        with pytest.raises(TypeError):
            Money.of("2.5", "USD") * 1.5

    def test_round_uses_currency_precision(self):
        """Rounding is explicit and follows the currency's minor units."""
        assert Money.of("1.005", "TRY").round() == Money.of("1.01", "TRY")
        assert Money.of("12.5", "JPY").round() == Money.of("13", "JPY")


class TestExchangeRate:
    """Conversion between two currencies."""

    def test_convert(self):
        rate = ExchangeRate("USD", "TRY", Decimal("32.5"))

        assert rate.convert(Money.of("10", "USD")) == Money.of("325", "TRY")

    def test_convert_wrong_currency(self):
        rate = ExchangeRate("USD", "TRY", Decimal("32.5"))

        with pytest.raises(CurrencyMismatchError):
            rate.convert(Money.of("10", "EUR"))

    def test_inverse(self):
        rate = ExchangeRate("USD", "TRY", Decimal("2")).inverse()

        assert rate.from_currency.code == "TRY"
        assert rate.rate == Decimal("0.5")

    def test_non_positive_rate_rejected(self):
        with pytest.raises(InvalidExchangeRateError):
            ExchangeRate("USD", "TRY", Decimal("0"))


class TestMonetaryValue:
    """Amounts carrying their frozen rate."""

    def test_to_base_uses_frozen_rate(self):
        value = MonetaryValue.of("100", "USD", "32.10")

        assert value.to_base("TRY") == Money.of("3210.00", "TRY")

    def test_to_base_is_not_rounded(self):
        value = MonetaryValue.of("0.333", "EUR", "35.123456")

        assert value.to_base("TRY").amount == Decimal("0.333") * Decimal("35.123456")

    def test_non_positive_rate_rejected(self):
        with pytest.raises(InvalidExchangeRateError):
            MonetaryValue.of("1", "USD", "-1")


class TestValidateFrozenRate:
    """Rules for the exchange rate stored on a record."""

    def test_base_currency_without_rate_is_one(self):
        assert validate_frozen_rate("TRY", None, "TRY") == Decimal("1")

    def test_foreign_currency_without_rate_fails(self):
        """A missing rate is never silently treated as 1."""
        with pytest.raises(ExchangeRateNotFoundError) as exc_info:
            validate_frozen_rate("USD", None, "TRY", "INV-1")

        assert exc_info.value.record_id == "INV-1"

    def test_zero_rate_fails(self):
        with pytest.raises(InvalidExchangeRateError):
            validate_frozen_rate("USD", Decimal("0"), "TRY")

    def test_base_currency_rate_must_be_one(self):
        with pytest.raises(BaseCurrencyRateError):
            validate_frozen_rate("TRY", Decimal("1.5"), "TRY")

    def test_valid_foreign_rate(self):
        assert validate_frozen_rate("usd", "32.5", "TRY") == Decimal("32.5")
