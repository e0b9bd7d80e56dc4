"""
Module: ledger_engines.reports
Responsibility:
    Operational reports over the loaded ledger: customer balances, overdue
    invoices, sales per customer, stock valuation and cash/bank flows.

Architecture position:
    Engines -- pure calculation layer, zero I/O.  "Today" and rate
    snapshots are always parameters.

Invariants enforced:
    - Customer balances use the same projection as the statement builder,
      so a customer's balance here equals Statement.balance.
    - Base-currency totals use each record's frozen rate; stock valuation
      uses the explicit snapshot passed in.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from ledger_kernel.domain.rates import RateSnapshot
from ledger_kernel.domain.records import (
    Account,
    AccountKind,
    Collection,
    Customer,
    Invoice,
    InvoiceStatus,
    Product,
    RecordId,
    Transaction,
)
from ledger_kernel.domain.values import ZERO, Money, validate_frozen_rate
from ledger_kernel.exceptions import InvalidPeriodError
from ledger_engines.statement import project_entry
from ledger_engines.tracer import traced_engine

# Invoices that no longer represent money owed.
CLOSED_STATUSES = frozenset({InvoiceStatus.PAID, InvoiceStatus.CANCELLED})


def _check_range(start: date, end: date) -> None:
    if start > end:
        raise InvalidPeriodError(start.isoformat(), end.isoformat())


# =============================================================================
# Customer balances
# =============================================================================


@dataclass(frozen=True)
class CustomerBalance:
    customer_id: RecordId
    customer_name: str
    city: str | None
    debt: Money  # invoiced, base currency
    credit: Money  # collected, base currency

    @property
    def balance(self) -> Money:
        """Positive when the customer owes money."""
        return self.debt - self.credit


@traced_engine("customer_balances", "1.0", fingerprint_fields=("base_currency",))
def customer_balances(
    *,
    customers: Iterable[Customer],
    invoices: Iterable[Invoice],
    collections: Iterable[Collection],
    base_currency: str,
) -> tuple[CustomerBalance, ...]:
    """Debt, credit and net balance per customer, in customer order."""
    debt: dict[str, Decimal] = {}
    credit: dict[str, Decimal] = {}
    for invoice in invoices:
        effect = project_entry(invoice, base_currency).base_effect.amount
        key = str(invoice.customer_id)
        debt[key] = debt.get(key, ZERO) + effect
    for collection in collections:
        effect = project_entry(collection, base_currency).base_effect.amount
        key = str(collection.customer_id)
        credit[key] = credit.get(key, ZERO) - effect

    return tuple(
        CustomerBalance(
            customer_id=customer.id,
            customer_name=customer.name,
            city=customer.city,
            debt=Money.of(debt.get(str(customer.id), ZERO), base_currency),
            credit=Money.of(credit.get(str(customer.id), ZERO), base_currency),
        )
        for customer in customers
    )


# =============================================================================
# Overdue invoices
# =============================================================================


@dataclass(frozen=True)
class OverdueInvoice:
    invoice_id: RecordId
    customer_id: RecordId
    customer_name: str
    due_date: date
    days_overdue: int
    amount: Money  # document currency


def overdue_invoices(
    *,
    invoices: Iterable[Invoice],
    customers: Iterable[Customer],
    as_of: date,
    grace_days: int = 0,
) -> tuple[OverdueInvoice, ...]:
    """
    Unpaid invoices whose due date has passed, oldest first.

    An invoice is overdue when ``as_of - due_date > grace_days``.  Paid and
    cancelled invoices and invoices without a due date never appear.
    """
    names = {str(c.id): c.name for c in customers}
    rows: list[OverdueInvoice] = []
    for invoice in invoices:
        if invoice.status in CLOSED_STATUSES or invoice.due_date is None:
            continue
        days = (as_of - invoice.due_date).days
        if days <= grace_days:
            continue
        rows.append(
            OverdueInvoice(
                invoice_id=invoice.id,
                customer_id=invoice.customer_id,
                customer_name=names.get(str(invoice.customer_id), invoice.customer_name),
                due_date=invoice.due_date,
                days_overdue=days,
                amount=Money.of(invoice.total_amount, invoice.currency),
            )
        )
    rows.sort(key=lambda r: (r.due_date, str(r.invoice_id)))
    return tuple(rows)


# =============================================================================
# Sales by customer
# =============================================================================


@dataclass(frozen=True)
class CustomerSales:
    customer_id: RecordId
    customer_name: str
    total: Money  # base currency
    invoice_count: int


def sales_by_customer(
    *,
    invoices: Iterable[Invoice],
    customers: Iterable[Customer],
    start: date,
    end: date,
    base_currency: str,
) -> tuple[CustomerSales, ...]:
    """Base-currency invoiced totals per customer within [start, end], largest first."""
    _check_range(start, end)
    names = {str(c.id): c.name for c in customers}
    totals: dict[str, Decimal] = {}
    counts: dict[str, int] = {}
    first_seen: dict[str, RecordId] = {}
    fallback_names: dict[str, str] = {}
    for invoice in invoices:
        if not start <= invoice.issue_date <= end:
            continue
        rate = validate_frozen_rate(invoice.currency, invoice.exchange_rate, base_currency, str(invoice.id))
        key = str(invoice.customer_id)
        totals[key] = totals.get(key, ZERO) + invoice.total_amount * rate
        counts[key] = counts.get(key, 0) + 1
        first_seen.setdefault(key, invoice.customer_id)
        fallback_names.setdefault(key, invoice.customer_name)

    rows = [
        CustomerSales(
            customer_id=first_seen[key],
            customer_name=names.get(key, fallback_names[key]),
            total=Money.of(total, base_currency),
            invoice_count=counts[key],
        )
        for key, total in totals.items()
    ]
    rows.sort(key=lambda r: (-r.total.amount, r.customer_name))
    return tuple(rows)


# =============================================================================
# Stock valuation
# =============================================================================


@dataclass(frozen=True)
class StockValue:
    product_id: RecordId
    name: str
    sku: str
    category: str
    stock: Decimal
    unit_cost: Money  # product cost currency
    value_base: Money


def stock_valuation(
    *,
    products: Iterable[Product],
    rates: RateSnapshot,
) -> tuple[StockValue, ...]:
    """
    Value on hand at current cost: stock x cost, converted with ``rates``.

    Like the cost/profit report this is a current-cost figure.
    """
    rows: list[StockValue] = []
    for product in products:
        rate = rates.rate_for(product.cost_currency)
        rows.append(
            StockValue(
                product_id=product.id,
                name=product.name,
                sku=product.sku,
                category=product.category,
                stock=product.stock,
                unit_cost=Money.of(product.cost, product.cost_currency),
                value_base=Money.of(product.stock * product.cost * rate, rates.base_currency),
            )
        )
    return tuple(rows)


# =============================================================================
# Cash and bank flows
# =============================================================================


@dataclass(frozen=True)
class AccountFlow:
    account_id: RecordId
    name: str
    kind: AccountKind
    inflow: Money
    outflow: Money  # positive amount
    balance: Money  # cached balance at report time

    @property
    def net_flow(self) -> Money:
        return self.inflow - self.outflow


def cash_flow_by_account(
    *,
    accounts: Iterable[Account],
    transactions: Iterable[Transaction],
    start: date,
    end: date,
) -> tuple[AccountFlow, ...]:
    """Inflow and outflow per account for transactions dated within [start, end]."""
    _check_range(start, end)
    inflow: dict[str, Decimal] = {}
    outflow: dict[str, Decimal] = {}
    for txn in transactions:
        if not start <= txn.transaction_date <= end:
            continue
        key = str(txn.account_id)
        if txn.amount > ZERO:
            inflow[key] = inflow.get(key, ZERO) + txn.amount
        else:
            outflow[key] = outflow.get(key, ZERO) - txn.amount

    return tuple(
        AccountFlow(
            account_id=account.id,
            name=account.name,
            kind=account.kind,
            inflow=Money.of(inflow.get(str(account.id), ZERO), account.currency),
            outflow=Money.of(outflow.get(str(account.id), ZERO), account.currency),
            balance=Money.of(account.balance, account.currency),
        )
        for account in accounts
    )
