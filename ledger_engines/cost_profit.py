"""
Module: ledger_engines.cost_profit
Responsibility:
    Attribute revenue, cost of goods sold and gross profit to every sold
    invoice line, and aggregate them per product, customer and category.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Costing basis:
    This is a current-cost snapshot, NOT FIFO.  A product card carries one
    cost (in its own ``cost_currency``) and no purchase-lot history, so the
    cost applied to a line is the product's cost when the report runs,
    converted to base with the RateSnapshot the caller passes in.  Past
    profit figures move when a product's cost is edited.

Invariants enforced:
    - Revenue uses the invoice's own frozen exchange rate.
    - Cost conversion uses only the explicit snapshot; a base-currency cost
      needs none.  A missing rate fails fast.
    - total_profit == total_revenue - total_cost, exactly.

Failure modes:
    - ExchangeRateNotFoundError when a non-base cost has no snapshot rate.
    - CurrencyMismatchError when the snapshot is in another base currency.
    - InvalidPeriodError when the filter's start is after its end.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from ledger_kernel.domain.rates import RateSnapshot
from ledger_kernel.domain.records import Customer, Invoice, LineItem, Product, RecordId
from ledger_kernel.domain.values import ZERO, Money, validate_frozen_rate
from ledger_kernel.exceptions import (
    CurrencyMismatchError,
    ExchangeRateNotFoundError,
    InvalidPeriodError,
)
from ledger_kernel.logging_config import get_logger
from ledger_engines.statement import same_id
from ledger_engines.tracer import traced_engine

logger = get_logger("engines.cost_profit")

DEFAULT_CATEGORY = "General"


@dataclass(frozen=True)
class CostProfitFilter:
    """
    Selection criteria for the cost/profit report.

    Text queries are case-insensitive substring matches: ``product_query``
    against the line's product name or SKU, ``customer_query`` against the
    customer's name.  ``None`` means "no restriction".
    """

    start: date | None = None
    end: date | None = None
    customer_id: RecordId | None = None
    product_id: RecordId | None = None
    category: str | None = None
    product_query: str = ""
    customer_query: str = ""

    def __post_init__(self) -> None:
        if self.start is not None and self.end is not None and self.start > self.end:
            raise InvalidPeriodError(self.start.isoformat(), self.end.isoformat())

    def covers_date(self, day: date) -> bool:
        if self.start is not None and day < self.start:
            return False
        if self.end is not None and day > self.end:
            return False
        return True

    def matches_customer(self, customer_id: RecordId, customer_name: str) -> bool:
        if self.customer_id is not None and not same_id(self.customer_id, customer_id):
            return False
        term = self.customer_query.strip().lower()
        return not term or term in customer_name.lower()

    def matches_product(
        self,
        product_id: RecordId | None,
        name: str,
        sku: str,
        category: str,
    ) -> bool:
        if self.product_id is not None and not same_id(self.product_id, product_id):
            return False
        if self.category is not None and category != self.category:
            return False
        term = self.product_query.strip().lower()
        return not term or term in name.lower() or term in sku.lower()


@dataclass(frozen=True)
class CostProfitLine:
    """One sold line with its base-currency revenue, cost and profit."""

    invoice_id: RecordId
    invoice_date: date
    customer_id: RecordId
    customer_name: str
    product_id: RecordId | None
    product_name: str
    category: str
    quantity: Decimal
    revenue: Money  # document currency
    revenue_base: Money
    cost_base: Money

    @property
    def profit_base(self) -> Money:
        return self.revenue_base - self.cost_base

    @property
    def is_profit(self) -> bool:
        return self.profit_base.is_positive


@dataclass(frozen=True)
class ProfitAggregate:
    """Totals for one product, customer or category."""

    key: str
    quantity: Decimal
    revenue_base: Money
    cost_base: Money

    @property
    def profit_base(self) -> Money:
        return self.revenue_base - self.cost_base


def _margin(revenue: Money, profit: Money) -> Decimal | None:
    if revenue.is_zero:
        return None
    return profit.amount / revenue.amount


@dataclass(frozen=True)
class CostProfitReport:
    base_currency: str
    lines: tuple[CostProfitLine, ...]

    @property
    def total_revenue(self) -> Money:
        return sum((line.revenue_base for line in self.lines), Money.zero(self.base_currency))

    @property
    def total_cost(self) -> Money:
        return sum((line.cost_base for line in self.lines), Money.zero(self.base_currency))

    @property
    def total_profit(self) -> Money:
        return self.total_revenue - self.total_cost

    @property
    def margin(self) -> Decimal | None:
        """Gross margin as a fraction of revenue; None when revenue is zero."""
        return _margin(self.total_revenue, self.total_profit)

    def _aggregate(self, key_of) -> dict[str, ProfitAggregate]:
        totals: dict[str, ProfitAggregate] = {}
        for line in self.lines:
            key = key_of(line)
            current = totals.get(key)
            if current is None:
                totals[key] = ProfitAggregate(
                    key=key,
                    quantity=line.quantity,
                    revenue_base=line.revenue_base,
                    cost_base=line.cost_base,
                )
            else:
                totals[key] = ProfitAggregate(
                    key=key,
                    quantity=current.quantity + line.quantity,
                    revenue_base=current.revenue_base + line.revenue_base,
                    cost_base=current.cost_base + line.cost_base,
                )
        return totals

    def by_product(self) -> dict[str, ProfitAggregate]:
        return self._aggregate(lambda line: line.product_name)

    def by_customer(self) -> dict[str, ProfitAggregate]:
        return self._aggregate(lambda line: line.customer_name)

    def by_category(self) -> dict[str, ProfitAggregate]:
        return self._aggregate(lambda line: line.category)


class _ProductCatalog:
    """Resolves a sold line to its product card: by id first, then by exact name."""

    def __init__(self, products: Iterable[Product]):
        self._by_id: dict[str, Product] = {}
        self._by_name: dict[str, Product] = {}
        for product in products:
            self._by_id[str(product.id)] = product
            self._by_name.setdefault(product.name, product)

    def resolve(self, item: LineItem) -> Product | None:
        if item.product_id is not None:
            product = self._by_id.get(str(item.product_id))
            if product is not None:
                return product
        return self._by_name.get(item.product_name)


def _unit_cost_base(
    product: Product | None,
    base_currency: str,
    cost_rates: RateSnapshot | None,
) -> Decimal:
    if product is None:
        return ZERO
    if product.cost_currency.upper() == base_currency:
        return product.cost
    if cost_rates is None:
        raise ExchangeRateNotFoundError(product.cost_currency, base_currency, str(product.id))
    return product.cost * cost_rates.rate_for(product.cost_currency)


@traced_engine("cost_profit", "1.0", fingerprint_fields=("base_currency",))
def compute_cost_profit(
    *,
    invoices: Iterable[Invoice],
    products: Iterable[Product],
    cost_filter: CostProfitFilter,
    base_currency: str,
    cost_rates: RateSnapshot | None = None,
    customers: Iterable[Customer] = (),
) -> CostProfitReport:
    """
    Pair every matching sold line with its product's current cost.

    Lines whose product cannot be found are kept with zero cost and the
    default category.  Customer names come from ``customers`` when given,
    otherwise from the name captured on the invoice.
    """
    base_currency = base_currency.upper()
    if cost_rates is not None and cost_rates.base_currency != base_currency:
        raise CurrencyMismatchError(base_currency, cost_rates.base_currency, "cost conversion")

    catalog = _ProductCatalog(products)
    names: Mapping[str, str] = {str(c.id): c.name for c in customers}

    lines: list[CostProfitLine] = []
    ordered = sorted(invoices, key=lambda inv: (inv.issue_date, str(inv.id)))
    for invoice in ordered:
        if not cost_filter.covers_date(invoice.issue_date):
            continue
        customer_name = names.get(str(invoice.customer_id), invoice.customer_name)
        if not cost_filter.matches_customer(invoice.customer_id, customer_name):
            continue

        rate = validate_frozen_rate(invoice.currency, invoice.exchange_rate, base_currency, str(invoice.id))
        for item in invoice.items:
            product = catalog.resolve(item)
            category = (product.category if product is not None else "") or DEFAULT_CATEGORY
            sku = item.sku or (product.sku if product is not None else "")
            product_id = product.id if product is not None else item.product_id
            if not cost_filter.matches_product(product_id, item.product_name, sku, category):
                continue

            revenue = item.line_total
            unit_cost = _unit_cost_base(product, base_currency, cost_rates)
            lines.append(
                CostProfitLine(
                    invoice_id=invoice.id,
                    invoice_date=invoice.issue_date,
                    customer_id=invoice.customer_id,
                    customer_name=customer_name,
                    product_id=product_id,
                    product_name=item.product_name,
                    category=category,
                    quantity=item.quantity,
                    revenue=Money.of(revenue, invoice.currency),
                    revenue_base=Money.of(revenue * rate, base_currency),
                    cost_base=Money.of(item.quantity * unit_cost, base_currency),
                )
            )

    report = CostProfitReport(base_currency=base_currency, lines=tuple(lines))

    logger.debug("cost_profit_computed", extra={
        "line_count": len(lines),
        "total_profit": str(report.total_profit.amount),
        "cost_rates_as_of": cost_rates.as_of.isoformat() if cost_rates is not None else None,
    })
    return report


__all__ = [
    "DEFAULT_CATEGORY",
    "CostProfitFilter",
    "CostProfitLine",
    "CostProfitReport",
    "ProfitAggregate",
    "compute_cost_profit",
]
