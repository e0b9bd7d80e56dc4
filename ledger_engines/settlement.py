"""
Module: ledger_engines.settlement
Responsibility:
    Decide how far an invoice has been paid by the collections linked to it,
    and which status it should carry as a result.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - Amounts are compared in base currency using each record's own frozen
      rate, so a USD invoice may be settled by TRY collections.
    - remaining <= tolerance -> PAID; something collected -> PARTIAL_PAID;
      nothing collected -> the invoice keeps its current status.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from decimal import Decimal

from ledger_kernel.domain.records import Collection, Invoice, InvoiceStatus, RecordId
from ledger_kernel.domain.values import ZERO, validate_frozen_rate
from ledger_engines.statement import same_id


@dataclass(frozen=True)
class InvoiceSettlement:
    invoice_id: RecordId
    invoiced_base: Decimal
    collected_base: Decimal
    status: InvoiceStatus

    @property
    def remaining_base(self) -> Decimal:
        return self.invoiced_base - self.collected_base

    @property
    def is_settled(self) -> bool:
        return self.status is InvoiceStatus.PAID


def settle_invoice(
    invoice: Invoice,
    collections: Iterable[Collection],
    tolerance: Decimal,
    base_currency: str = "TRY",
) -> InvoiceSettlement:
    """Sum the collections that reference ``invoice`` and derive its status."""
    rate = validate_frozen_rate(invoice.currency, invoice.exchange_rate, base_currency, str(invoice.id))
    invoiced = invoice.total_amount * rate

    collected = ZERO
    for collection in collections:
        if not same_id(collection.invoice_id, invoice.id):
            continue
        c_rate = validate_frozen_rate(
            collection.currency, collection.exchange_rate, base_currency, str(collection.id),
        )
        collected += collection.amount * c_rate

    if invoiced - collected <= tolerance:
        status = InvoiceStatus.PAID
    elif collected > ZERO:
        status = InvoiceStatus.PARTIAL_PAID
    else:
        status = invoice.status

    return InvoiceSettlement(
        invoice_id=invoice.id,
        invoiced_base=invoiced,
        collected_base=collected,
        status=status,
    )
