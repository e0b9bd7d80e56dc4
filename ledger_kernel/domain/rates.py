"""
Rates -- explicit exchange-rate snapshots.

Responsibility:
    A RateSnapshot is the only way a "current" exchange rate reaches the
    ledger.  It is taken once (e.g. from the Central Bank of Turkey daily
    feed), passed explicitly to whoever creates a record, and its rate is
    frozen onto that record.  Historical statements therefore never move
    when a later snapshot is taken.

Architecture position:
    Kernel > Domain -- pure, zero I/O.  Fetching the feed over HTTP is a
    collaborator concern; this module only parses the XML text.

Failure modes:
    - ExchangeRateNotFoundError when a snapshot has no rate for a currency.
    - RateFeedError when the feed is malformed or a rate is missing or
      non-positive.  There is no offline fallback table.
"""

from __future__ import annotations

import xml.etree.ElementTree as ET
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from types import MappingProxyType

from ledger_kernel.domain.currency import CurrencyRegistry
from ledger_kernel.domain.values import ONE, ZERO, MonetaryValue, to_decimal
from ledger_kernel.exceptions import (
    ExchangeRateNotFoundError,
    InvalidExchangeRateError,
    RateFeedError,
)
from ledger_kernel.logging_config import get_logger

logger = get_logger("domain.rates")

TCMB_BASE_CURRENCY = "TRY"


@dataclass(frozen=True)
class RateSnapshot:
    """
    Immutable currency -> rate-to-base table captured at one moment.

    Guarantees:
        - rate_for(base_currency) is exactly 1.
        - Every stored rate is a positive Decimal.
        - The mapping cannot be mutated after construction.
    """

    base_currency: str
    as_of: date
    rates: Mapping[str, Decimal] = field(default_factory=dict)
    source: str = "manual"

    def __post_init__(self) -> None:
        base = CurrencyRegistry.validate(self.base_currency)
        object.__setattr__(self, "base_currency", base)
        cleaned: dict[str, Decimal] = {}
        for code, rate in self.rates.items():
            code = CurrencyRegistry.validate(code)
            value = to_decimal(rate, "rate")
            if value <= ZERO:
                raise InvalidExchangeRateError(str(value), code)
            cleaned[code] = value
        cleaned[base] = ONE
        object.__setattr__(self, "rates", MappingProxyType(cleaned))

    def rate_for(self, currency: str) -> Decimal:
        code = CurrencyRegistry.validate(currency)
        try:
            return self.rates[code]
        except KeyError:
            raise ExchangeRateNotFoundError(code, self.base_currency) from None

    def has_rate(self, currency: str) -> bool:
        return CurrencyRegistry.is_valid(currency) and currency.upper().strip() in self.rates

    def freeze(self, amount: Decimal | str | int, currency: str) -> MonetaryValue:
        """Bind an amount to this snapshot's rate, for storing on a new record."""
        return MonetaryValue.of(amount, currency, self.rate_for(currency))

    def with_rate(self, currency: str, rate: Decimal | str | int) -> RateSnapshot:
        """Return a new snapshot with one rate added or replaced."""
        updated = dict(self.rates)
        updated[CurrencyRegistry.validate(currency)] = to_decimal(rate, "rate")
        return RateSnapshot(
            base_currency=self.base_currency,
            as_of=self.as_of,
            rates=updated,
            source=self.source,
        )


def _parse_feed_decimal(text: str | None) -> Decimal | None:
    if text is None or not text.strip():
        return None
    try:
        return Decimal(text.strip().replace(",", "."))
    except InvalidOperation:
        return None


def _parse_feed_date(root: ET.Element) -> date:
    # Root element carries Date="MM/DD/YYYY"; Tarih="DD.MM.YYYY" is the fallback
    node = root if root.tag == "Tarih_Date" else root.find(".//Tarih_Date")
    if node is None:
        raise RateFeedError("missing Tarih_Date element")
    raw = node.get("Date")
    if raw:
        try:
            return datetime.strptime(raw, "%m/%d/%Y").date()
        except ValueError:
            pass
    raw = node.get("Tarih")
    if raw:
        try:
            return datetime.strptime(raw, "%d.%m.%Y").date()
        except ValueError:
            pass
    raise RateFeedError("feed date is missing or unreadable")


def parse_tcmb_rates(
    xml_text: str,
    currencies: tuple[str, ...] = ("USD", "EUR"),
) -> RateSnapshot:
    """
    Parse the Central Bank of Turkey ``today.xml`` feed into a TRY snapshot.

    Uses the ForexSelling column divided by the quoted Unit (JPY and a few
    others are quoted per 100 units).  Every requested currency must be
    present with a positive rate.

    Raises:
        RateFeedError: malformed XML, missing date, or a requested currency
            missing or non-positive.
    """
    try:
        root = ET.fromstring(xml_text)
    except ET.ParseError as e:
        raise RateFeedError(f"unparseable XML: {e}") from e

    as_of = _parse_feed_date(root)

    rates: dict[str, Decimal] = {}
    for node in root.iter("Currency"):
        code = (node.get("CurrencyCode") or node.get("Kod") or "").upper()
        if not CurrencyRegistry.is_valid(code):
            continue
        selling = _parse_feed_decimal(node.findtext("ForexSelling"))
        unit = _parse_feed_decimal(node.findtext("Unit")) or ONE
        if selling is None or selling <= ZERO or unit <= ZERO:
            continue
        rates[code] = selling / unit

    missing = [c for c in currencies if c.upper() not in rates]
    if missing:
        logger.error("rate_feed_incomplete", extra={
            "missing": missing,
            "as_of": as_of.isoformat(),
        })
        raise RateFeedError(f"no usable ForexSelling rate for {', '.join(missing)}")

    logger.info("rate_feed_parsed", extra={
        "as_of": as_of.isoformat(),
        "currency_count": len(rates),
    })
    return RateSnapshot(
        base_currency=TCMB_BASE_CURRENCY,
        as_of=as_of,
        rates=rates,
        source="tcmb",
    )
