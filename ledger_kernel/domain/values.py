"""
Values -- Immutable, self-validating monetary value objects.

Responsibility:
    Provides the value types every ledger computation is expressed in:
    Currency, Money, ExchangeRate and MonetaryValue (an amount together
    with the exchange rate to base that was frozen on its originating
    record).

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.
    Imported by every other domain module and by all engines.

Invariants enforced:
    - Amounts and rates are Decimal, never float.
    - Currency codes are validated against CurrencyRegistry on construction.
    - Money arithmetic never mixes currencies.
    - Conversion to base uses only the rate stored on the value itself.

Failure modes:
    - InvalidCurrencyError for unknown currency codes.
    - TypeError when a float is offered as an amount or rate.
    - CurrencyMismatchError when arithmetic mixes currencies.
    - ExchangeRateNotFoundError / InvalidExchangeRateError /
      BaseCurrencyRateError from validate_frozen_rate().
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

from ledger_kernel.domain.currency import CurrencyRegistry
from ledger_kernel.exceptions import (
    BaseCurrencyRateError,
    CurrencyMismatchError,
    ExchangeRateNotFoundError,
    InvalidExchangeRateError,
)

ONE = Decimal("1")
ZERO = Decimal("0")


def to_decimal(value: Any, field: str = "amount") -> Decimal:
    """
    Coerce an int, str or Decimal to Decimal.

    Floats are refused outright: a float has already lost the exact value
    the caller meant, and converting it would hide that.
    """
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool) or isinstance(value, float):
        raise TypeError(f"{field} must be Decimal, int or str, got {type(value).__name__}")
    try:
        return Decimal(str(value).strip())
    except (InvalidOperation, ValueError) as e:
        raise ValueError(f"Invalid {field}: {value!r}") from e


@dataclass(frozen=True, slots=True)
class Currency:
    """
    ISO 4217 currency code value object.

    Guarantees:
        - Immutable and hashable.
        - code is uppercase, stripped and known to CurrencyRegistry.
    """

    code: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "code", CurrencyRegistry.validate(self.code))

    @property
    def decimal_places(self) -> int:
        return CurrencyRegistry.get_decimal_places(self.code)

    def __str__(self) -> str:
        return self.code

    def __repr__(self) -> str:
        return f"Currency({self.code!r})"


@dataclass(frozen=True, slots=True)
class Money:
    """
    Monetary amount value object.

    Contract:
        Pairs a Decimal amount with its Currency -- they are never separated.

    Guarantees:
        - amount is always a Decimal (never float).
        - Arithmetic and comparisons enforce the same-currency constraint.
        - No implicit rounding; callers call round() explicitly.
    """

    amount: Decimal
    currency: Currency

    def __post_init__(self) -> None:
        object.__setattr__(self, "amount", to_decimal(self.amount))
        if isinstance(self.currency, str):
            object.__setattr__(self, "currency", Currency(self.currency))
        elif not isinstance(self.currency, Currency):
            raise TypeError(f"currency must be Currency or str, got {type(self.currency)}")

    @classmethod
    def of(cls, amount: Decimal | str | int, currency: str | Currency) -> Money:
        """Factory method for creating Money."""
        return cls(amount=to_decimal(amount), currency=currency)

    @classmethod
    def zero(cls, currency: str | Currency) -> Money:
        """Create a zero amount in the given currency."""
        return cls(amount=ZERO, currency=currency)

    @property
    def is_zero(self) -> bool:
        return self.amount == ZERO

    @property
    def is_positive(self) -> bool:
        return self.amount > ZERO

    @property
    def is_negative(self) -> bool:
        return self.amount < ZERO

    def round(self, rounding: str = ROUND_HALF_UP) -> Money:
        """Round to the currency's minor units."""
        places = self.currency.decimal_places
        quantum = Decimal("1") if places == 0 else Decimal("0." + "0" * places)
        return Money(amount=self.amount.quantize(quantum, rounding=rounding), currency=self.currency)

    def _check_currency(self, other: Money, operation: str) -> None:
        if self.currency != other.currency:
            raise CurrencyMismatchError(self.currency.code, other.currency.code, operation)

    def __add__(self, other: Money) -> Money:
        if not isinstance(other, Money):
            return NotImplemented
        self._check_currency(other, "addition")
        return Money(amount=self.amount + other.amount, currency=self.currency)

    def __sub__(self, other: Money) -> Money:
        if not isinstance(other, Money):
            return NotImplemented
        self._check_currency(other, "subtraction")
        return Money(amount=self.amount - other.amount, currency=self.currency)

    def __neg__(self) -> Money:
        return Money(amount=-self.amount, currency=self.currency)

    def __abs__(self) -> Money:
        return Money(amount=abs(self.amount), currency=self.currency)

    def __mul__(self, factor: Decimal | int | str) -> Money:
        if isinstance(factor, float):
            return NotImplemented
        if isinstance(factor, (int, str)):
            factor = Decimal(str(factor))
        if not isinstance(factor, Decimal):
            return NotImplemented
        return Money(amount=self.amount * factor, currency=self.currency)

    def __rmul__(self, factor: Decimal | int | str) -> Money:
        return self.__mul__(factor)

    def __lt__(self, other: Money) -> bool:
        if not isinstance(other, Money):
            return NotImplemented
        self._check_currency(other, "comparison")
        return self.amount < other.amount

    def __le__(self, other: Money) -> bool:
        if not isinstance(other, Money):
            return NotImplemented
        self._check_currency(other, "comparison")
        return self.amount <= other.amount

    def __gt__(self, other: Money) -> bool:
        if not isinstance(other, Money):
            return NotImplemented
        self._check_currency(other, "comparison")
        return self.amount > other.amount

    def __ge__(self, other: Money) -> bool:
        if not isinstance(other, Money):
            return NotImplemented
        self._check_currency(other, "comparison")
        return self.amount >= other.amount

    def __str__(self) -> str:
        return f"{self.amount} {self.currency.code}"

    def __repr__(self) -> str:
        return f"Money({self.amount!r}, {self.currency!r})"


@dataclass(frozen=True, slots=True)
class ExchangeRate:
    """
    Exchange rate between two currencies.

    Represents: 1 unit of from_currency = rate units of to_currency.
    """

    from_currency: Currency
    to_currency: Currency
    rate: Decimal

    def __post_init__(self) -> None:
        if isinstance(self.from_currency, str):
            object.__setattr__(self, "from_currency", Currency(self.from_currency))
        if isinstance(self.to_currency, str):
            object.__setattr__(self, "to_currency", Currency(self.to_currency))
        object.__setattr__(self, "rate", to_decimal(self.rate, "rate"))
        if self.rate <= ZERO:
            raise InvalidExchangeRateError(str(self.rate), self.from_currency.code)

    def convert(self, money: Money) -> Money:
        """Convert money from from_currency into to_currency."""
        if money.currency != self.from_currency:
            raise CurrencyMismatchError(
                self.from_currency.code, money.currency.code, "conversion"
            )
        return Money(amount=money.amount * self.rate, currency=self.to_currency)

    def inverse(self) -> ExchangeRate:
        return ExchangeRate(
            from_currency=self.to_currency,
            to_currency=self.from_currency,
            rate=ONE / self.rate,
        )

    def __str__(self) -> str:
        return f"{self.from_currency}/{self.to_currency} = {self.rate}"


def validate_frozen_rate(
    currency: str,
    rate: Decimal | str | int | None,
    base_currency: str,
    record_id: str | None = None,
) -> Decimal:
    """
    Validate the exchange rate frozen on a ledger record.

    Postconditions:
        Returns the rate as Decimal.  Base-currency records always carry
        exactly 1; other records carry a strictly positive rate.

    Raises:
        ExchangeRateNotFoundError: rate is missing on a non-base record.
        InvalidExchangeRateError: rate is zero or negative.
        BaseCurrencyRateError: base-currency record with a rate other than 1.
    """
    currency = CurrencyRegistry.validate(currency)
    base_currency = CurrencyRegistry.validate(base_currency)

    if rate is None:
        if currency == base_currency:
            return ONE
        raise ExchangeRateNotFoundError(currency, base_currency, record_id)

    value = to_decimal(rate, "exchange rate")
    if value <= ZERO:
        raise InvalidExchangeRateError(str(value), currency)
    if currency == base_currency and value != ONE:
        raise BaseCurrencyRateError(str(value), base_currency)
    return value


@dataclass(frozen=True, slots=True)
class MonetaryValue:
    """
    An amount in its own currency plus the rate to base frozen on its record.

    Contract:
        to_base() = amount x rate_to_base, exactly, with no rounding.  The
        rate is always the one stored here; no "current" rate is consulted.
    """

    amount: Decimal
    currency: Currency
    rate_to_base: Decimal

    def __post_init__(self) -> None:
        object.__setattr__(self, "amount", to_decimal(self.amount))
        if isinstance(self.currency, str):
            object.__setattr__(self, "currency", Currency(self.currency))
        object.__setattr__(self, "rate_to_base", to_decimal(self.rate_to_base, "rate"))
        if self.rate_to_base <= ZERO:
            raise InvalidExchangeRateError(str(self.rate_to_base), self.currency.code)

    @classmethod
    def of(
        cls,
        amount: Decimal | str | int,
        currency: str | Currency,
        rate_to_base: Decimal | str | int = ONE,
    ) -> MonetaryValue:
        return cls(amount=to_decimal(amount), currency=currency, rate_to_base=to_decimal(rate_to_base, "rate"))

    @property
    def money(self) -> Money:
        """The amount in its own currency."""
        return Money(amount=self.amount, currency=self.currency)

    def to_base(self, base_currency: str | Currency) -> Money:
        """Convert to the base currency using the frozen rate."""
        return Money(amount=self.amount * self.rate_to_base, currency=base_currency)

    def __str__(self) -> str:
        return f"{self.amount} {self.currency.code} @ {self.rate_to_base}"
