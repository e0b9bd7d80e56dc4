"""
Module: ledger_engines.statement
Responsibility:
    Turn a customer's invoices (debits) and collections (credits) into a
    chronological running-balance statement in the base currency.  This is
    the single computation behind the customer screen, the reconciliation
    letter and the balance reports.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import ledger_kernel.domain.

Invariants enforced:
    - Each entry is converted with the exchange rate frozen on its own
      record; no other rate is ever consulted.
    - Deterministic ordering: (date, created_at, kind, id).  Entries with
      no created_at sort before stamped ones on the same day; on a full
      tie invoices precede collections.
    - Exact Decimal arithmetic; running balances are never rounded.
    - The last line's balance equals the customer's net balance
      (positive = customer owes, negative = credit in customer's favour).

Failure modes:
    - ExchangeRateNotFoundError / InvalidExchangeRateError /
      BaseCurrencyRateError when a record's frozen rate is unusable.
    - TypeError when something other than an Invoice or Collection is
      passed as a ledger entry.

Usage:
    from ledger_engines.statement import build_statement

    statement = build_statement(
        customer_id="C1",
        invoices=invoices,
        collections=collections,
        base_currency="TRY",
    )
    statement.balance            # Money
    statement.balance_as_of(day) # Money
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import date, datetime, timezone
from decimal import Decimal

from ledger_kernel.domain.records import (
    Collection,
    EntryKind,
    Invoice,
    LedgerEntry,
    RecordId,
)
from ledger_kernel.domain.values import Money, validate_frozen_rate
from ledger_kernel.logging_config import get_logger
from ledger_engines.tracer import traced_engine

logger = get_logger("engines.statement")

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

_KIND_RANK = {
    EntryKind.INVOICE: 0,
    EntryKind.COLLECTION: 1,
}


def same_id(a: RecordId | None, b: RecordId | None) -> bool:
    """Compare record ids regardless of whether they are str or UUID."""
    if a is None or b is None:
        return False
    return str(a) == str(b)


@dataclass(frozen=True)
class ProjectedEntry:
    """A ledger entry reduced to what the running-balance scan needs."""

    entry_id: RecordId
    entry_date: date
    kind: EntryKind
    description: str
    amount: Money  # document currency, always positive for well-formed input
    exchange_rate: Decimal
    base_effect: Money  # signed, base currency
    document_id: RecordId | None
    created_at: datetime | None

    @property
    def sort_key(self) -> tuple:
        stamp = self.created_at
        if stamp is None:
            stamped = (0, _EPOCH)
        else:
            if stamp.tzinfo is None:
                stamp = stamp.replace(tzinfo=timezone.utc)
            stamped = (1, stamp)
        return (self.entry_date, stamped, _KIND_RANK[self.kind], str(self.entry_id))


@dataclass(frozen=True)
class StatementLine:
    """
    One row of a customer statement.

    Contract:
        ``debit`` and ``credit`` are in the document's own currency (one of
        them is zero); ``base_effect`` and ``balance`` are in base currency.
    """

    entry_id: RecordId
    entry_date: date
    kind: EntryKind
    description: str
    debit: Money
    credit: Money
    exchange_rate: Decimal
    base_effect: Money
    balance: Money
    document_id: RecordId | None = None

    @property
    def currency(self) -> str:
        return self.debit.currency.code


@dataclass(frozen=True)
class Statement:
    """
    Full-history statement for one customer.

    Guarantees:
        - ``entries`` are in ledger order.
        - ``balance`` equals the last line's running balance (zero if empty).
    """

    customer_id: RecordId
    base_currency: str
    entries: tuple[StatementLine, ...]

    @property
    def balance(self) -> Money:
        if not self.entries:
            return Money.zero(self.base_currency)
        return self.entries[-1].balance

    @property
    def total_debit_base(self) -> Money:
        """Sum of positive base effects (invoiced)."""
        total = Money.zero(self.base_currency)
        for line in self.entries:
            if line.base_effect.is_positive:
                total = total + line.base_effect
        return total

    @property
    def total_credit_base(self) -> Money:
        """Sum of negative base effects (collected), as a positive amount."""
        total = Money.zero(self.base_currency)
        for line in self.entries:
            if line.base_effect.is_negative:
                total = total - line.base_effect
        return total

    def balance_as_of(self, as_of: date) -> Money:
        """Running balance after every entry dated on or before ``as_of``."""
        balance = Money.zero(self.base_currency)
        for line in self.entries:
            if line.entry_date > as_of:
                break
            balance = line.balance
        return balance

    def entries_between(self, start: date, end: date) -> tuple[StatementLine, ...]:
        return tuple(line for line in self.entries if start <= line.entry_date <= end)


def project_entry(entry: LedgerEntry, base_currency: str) -> ProjectedEntry:
    """
    Reduce an Invoice or Collection to its signed base-currency effect.

    Invoices increase what the customer owes; collections decrease it.
    """
    if isinstance(entry, Invoice):
        rate = validate_frozen_rate(entry.currency, entry.exchange_rate, base_currency, str(entry.id))
        amount = Money.of(entry.total_amount, entry.currency)
        return ProjectedEntry(
            entry_id=entry.id,
            entry_date=entry.issue_date,
            kind=EntryKind.INVOICE,
            description=f"Sales invoice {entry.id}",
            amount=amount,
            exchange_rate=rate,
            base_effect=Money(amount=entry.total_amount * rate, currency=base_currency),
            document_id=entry.id,
            created_at=entry.created_at,
        )
    if isinstance(entry, Collection):
        rate = validate_frozen_rate(entry.currency, entry.exchange_rate, base_currency, str(entry.id))
        amount = Money.of(entry.amount, entry.currency)
        return ProjectedEntry(
            entry_id=entry.id,
            entry_date=entry.collection_date,
            kind=EntryKind.COLLECTION,
            description=entry.description or "Collection",
            amount=amount,
            exchange_rate=rate,
            base_effect=Money(amount=-(entry.amount * rate), currency=base_currency),
            document_id=entry.invoice_id,
            created_at=entry.created_at,
        )
    raise TypeError(f"Not a ledger entry: {type(entry).__name__}")


def project_customer_entries(
    customer_id: RecordId,
    invoices: Iterable[Invoice],
    collections: Iterable[Collection],
    base_currency: str,
) -> list[ProjectedEntry]:
    """Project every entry belonging to ``customer_id``, in ledger order."""
    projected: list[ProjectedEntry] = []
    for invoice in invoices:
        if same_id(invoice.customer_id, customer_id):
            projected.append(project_entry(invoice, base_currency))
    for collection in collections:
        if same_id(collection.customer_id, customer_id):
            projected.append(project_entry(collection, base_currency))
    projected.sort(key=lambda p: p.sort_key)
    return projected


def run_balances(
    entries: Sequence[ProjectedEntry],
    opening: Money,
) -> tuple[StatementLine, ...]:
    """
    Scan entries in the given order, carrying a running balance.

    Each line's balance = previous balance + this entry's base effect.
    """
    running = opening
    lines: list[StatementLine] = []
    for entry in entries:
        running = running + entry.base_effect
        zero = Money.zero(entry.amount.currency)
        is_debit = entry.kind is EntryKind.INVOICE
        lines.append(
            StatementLine(
                entry_id=entry.entry_id,
                entry_date=entry.entry_date,
                kind=entry.kind,
                description=entry.description,
                debit=entry.amount if is_debit else zero,
                credit=zero if is_debit else entry.amount,
                exchange_rate=entry.exchange_rate,
                base_effect=entry.base_effect,
                balance=running,
                document_id=entry.document_id,
            )
        )
    return tuple(lines)


@traced_engine("statement", "1.0", fingerprint_fields=("customer_id", "base_currency"))
def build_statement(
    *,
    customer_id: RecordId,
    invoices: Iterable[Invoice],
    collections: Iterable[Collection],
    base_currency: str,
) -> Statement:
    """
    Build the full-history running-balance statement for one customer.

    Records for other customers are ignored.  Pure: no side effects.
    """
    projected = project_customer_entries(customer_id, invoices, collections, base_currency)
    lines = run_balances(projected, Money.zero(base_currency))
    statement = Statement(customer_id=customer_id, base_currency=base_currency, entries=lines)

    logger.debug("statement_built", extra={
        "customer_id": str(customer_id),
        "line_count": len(lines),
        "balance": str(statement.balance.amount),
    })
    return statement
