"""Currency -- ISO 4217 registry and precision-derived rounding."""

from dataclasses import dataclass
from decimal import Decimal
from typing import ClassVar

from ledger_kernel.exceptions import InvalidCurrencyError


@dataclass(frozen=True)
class CurrencyInfo:
    """Information about a single ISO 4217 currency."""

    code: str
    decimal_places: int
    name: str

    @property
    def rounding_tolerance(self) -> Decimal:
        """Smallest representable unit for this currency."""
        if self.decimal_places == 0:
            return Decimal("1")
        return Decimal("0." + "0" * (self.decimal_places - 1) + "1")

    @property
    def quantize_string(self) -> str:
        """String for Decimal.quantize() to round to this currency's precision."""
        if self.decimal_places == 0:
            return "1"
        return "0." + "0" * self.decimal_places


class CurrencyRegistry:
    """Registry of the ISO 4217 currencies the ledger trades and quotes in."""

    # Base currency plus every currency on the Central Bank of Turkey daily feed
    _CURRENCIES: ClassVar[dict[str, CurrencyInfo]] = {
        "TRY": CurrencyInfo("TRY", 2, "Turkish Lira"),
        "USD": CurrencyInfo("USD", 2, "US Dollar"),
        "EUR": CurrencyInfo("EUR", 2, "Euro"),
        "GBP": CurrencyInfo("GBP", 2, "Pound Sterling"),
        "CHF": CurrencyInfo("CHF", 2, "Swiss Franc"),
        "JPY": CurrencyInfo("JPY", 0, "Japanese Yen"),
        "AUD": CurrencyInfo("AUD", 2, "Australian Dollar"),
        "CAD": CurrencyInfo("CAD", 2, "Canadian Dollar"),
        "DKK": CurrencyInfo("DKK", 2, "Danish Krone"),
        "SEK": CurrencyInfo("SEK", 2, "Swedish Krona"),
        "NOK": CurrencyInfo("NOK", 2, "Norwegian Krone"),
        "SAR": CurrencyInfo("SAR", 2, "Saudi Riyal"),
        "KWD": CurrencyInfo("KWD", 3, "Kuwaiti Dinar"),
        "BGN": CurrencyInfo("BGN", 2, "Bulgarian Lev"),
        "RON": CurrencyInfo("RON", 2, "Romanian Leu"),
        "RUB": CurrencyInfo("RUB", 2, "Russian Ruble"),
        "CNY": CurrencyInfo("CNY", 2, "Chinese Yuan"),
        "PKR": CurrencyInfo("PKR", 2, "Pakistani Rupee"),
        "QAR": CurrencyInfo("QAR", 2, "Qatari Riyal"),
        "KRW": CurrencyInfo("KRW", 0, "South Korean Won"),
        "AZN": CurrencyInfo("AZN", 2, "Azerbaijan Manat"),
        "AED": CurrencyInfo("AED", 2, "UAE Dirham"),
        "IRR": CurrencyInfo("IRR", 2, "Iranian Rial"),
    }

    DEFAULT_DECIMAL_PLACES: ClassVar[int] = 2

    @classmethod
    def is_valid(cls, code: str) -> bool:
        """Check if a currency code is known to the registry."""
        if not code or not isinstance(code, str):
            return False
        return code.upper().strip() in cls._CURRENCIES

    @classmethod
    def get_info(cls, code: str) -> CurrencyInfo | None:
        """Get currency information by code."""
        if not code or not isinstance(code, str):
            return None
        return cls._CURRENCIES.get(code.upper().strip())

    @classmethod
    def get_decimal_places(cls, code: str) -> int:
        """Get decimal places for a currency."""
        info = cls.get_info(code)
        return info.decimal_places if info else cls.DEFAULT_DECIMAL_PLACES

    @classmethod
    def validate(cls, code: str) -> str:
        """Validate and normalize a currency code."""
        if not code or not isinstance(code, str):
            raise InvalidCurrencyError(repr(code))

        normalized = code.upper().strip()
        if normalized not in cls._CURRENCIES:
            raise InvalidCurrencyError(code)
        return normalized

    @classmethod
    def all_codes(cls) -> frozenset[str]:
        """Get all valid currency codes."""
        return frozenset(cls._CURRENCIES.keys())
