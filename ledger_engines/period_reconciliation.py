"""
Module: ledger_engines.period_reconciliation
Responsibility:
    Produce the figures printed on a customer reconciliation letter: the
    balance brought forward from before the period, the in-period entries
    with running balances seeded from it, and the period-end balance.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    Built on ledger_engines.statement (same projection and ordering).

Invariants enforced:
    - brought_forward = sum of base effects strictly before period_start.
    - In-period = period_start <= date <= period_end, in statement order.
    - final_balance equals Statement.balance_as_of(period_end) for the
      same records; both paths use the same projection and exact Decimal
      arithmetic.
    - Persisting the result (ReconciliationService) never feeds back into
      this computation.

Failure modes:
    - InvalidPeriodError if period_start > period_end.
    - Rate errors propagate from ledger_engines.statement.project_entry.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date
from enum import Enum

from ledger_kernel.domain.records import Collection, Invoice, RecordId
from ledger_kernel.domain.values import Money
from ledger_kernel.exceptions import InvalidPeriodError
from ledger_kernel.logging_config import get_logger
from ledger_engines.statement import (
    StatementLine,
    project_customer_entries,
    run_balances,
)
from ledger_engines.tracer import traced_engine

logger = get_logger("engines.period_reconciliation")


class BalanceLabel(str, Enum):
    """How a balance reads on the letter."""

    DEBIT = "debit"  # customer owes
    CREDIT = "credit"  # customer is in credit
    ZERO = "zero"


@dataclass(frozen=True)
class PeriodReconciliation:
    """
    Reconciliation figures for one customer and period.

    Guarantees:
        - final_balance == brought_forward + sum(line.base_effect).
        - entries are in statement order.
    """

    customer_id: RecordId
    period_start: date
    period_end: date
    base_currency: str
    brought_forward: Money
    entries: tuple[StatementLine, ...]

    @property
    def final_balance(self) -> Money:
        if not self.entries:
            return self.brought_forward
        return self.entries[-1].balance

    @property
    def period_debit(self) -> Money:
        total = Money.zero(self.base_currency)
        for line in self.entries:
            if line.base_effect.is_positive:
                total = total + line.base_effect
        return total

    @property
    def period_credit(self) -> Money:
        total = Money.zero(self.base_currency)
        for line in self.entries:
            if line.base_effect.is_negative:
                total = total - line.base_effect
        return total

    @property
    def balance_label(self) -> BalanceLabel:
        if self.final_balance.is_positive:
            return BalanceLabel.DEBIT
        if self.final_balance.is_negative:
            return BalanceLabel.CREDIT
        return BalanceLabel.ZERO


@traced_engine(
    "period_reconciliation",
    "1.0",
    fingerprint_fields=("customer_id", "period_start", "period_end", "base_currency"),
)
def build_period_reconciliation(
    *,
    customer_id: RecordId,
    period_start: date,
    period_end: date,
    invoices: Iterable[Invoice],
    collections: Iterable[Collection],
    base_currency: str,
) -> PeriodReconciliation:
    """
    Split a customer's history at ``period_start`` and re-run the balance.

    Entries dated after ``period_end`` are ignored.
    """
    if period_start > period_end:
        raise InvalidPeriodError(period_start.isoformat(), period_end.isoformat())

    projected = project_customer_entries(customer_id, invoices, collections, base_currency)

    brought_forward = Money.zero(base_currency)
    in_period = []
    for entry in projected:
        if entry.entry_date < period_start:
            brought_forward = brought_forward + entry.base_effect
        elif entry.entry_date <= period_end:
            in_period.append(entry)

    result = PeriodReconciliation(
        customer_id=customer_id,
        period_start=period_start,
        period_end=period_end,
        base_currency=base_currency,
        brought_forward=brought_forward,
        entries=run_balances(in_period, brought_forward),
    )

    logger.debug("period_reconciliation_built", extra={
        "customer_id": str(customer_id),
        "period_start": period_start.isoformat(),
        "period_end": period_end.isoformat(),
        "brought_forward": str(brought_forward.amount),
        "final_balance": str(result.final_balance.amount),
        "entry_count": len(result.entries),
    })
    return result
