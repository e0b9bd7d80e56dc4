"""
ReconciliationService -- persisting reconciliation letters.

Responsibility:
    Compute a customer's period-end balance with the period reconciliation
    engine and store it together with the customer's answer (agreed or
    not agreed) as an audit snapshot.

Invariants enforced:
    - The stored balance is exactly PeriodReconciliation.final_balance for
      the records on file when the snapshot was taken.
    - Snapshots are write-once audit rows; nothing reads them back into a
      balance computation.
"""

from __future__ import annotations

from datetime import date

from sqlalchemy.orm import Session

from ledger_kernel.domain.clock import Clock
from ledger_kernel.domain.currency import CurrencyRegistry
from ledger_kernel.domain.records import AgreementStatus, Reconciliation, RecordId
from ledger_kernel.exceptions import CustomerNotFoundError
from ledger_kernel.logging_config import LogContext, get_logger
from ledger_kernel.models.reconciliation import ReconciliationModel
from ledger_kernel.services.base import BaseService
from ledger_engines.period_reconciliation import build_period_reconciliation

logger = get_logger("services.reconciliation")


class ReconciliationService(BaseService):

    def __init__(self, session: Session, clock: Clock | None = None, base_currency: str = "TRY"):
        super().__init__(session, clock)
        self.base_currency = CurrencyRegistry.validate(base_currency)

    def record_reconciliation(
        self,
        customer_id: RecordId,
        period_start: date,
        period_end: date,
        agreement: AgreementStatus,
        note: str = "",
    ) -> Reconciliation:
        snapshot = self.selector.load_snapshot(customer_id)
        if snapshot is None:
            raise CustomerNotFoundError(str(customer_id))

        result = build_period_reconciliation(
            customer_id=snapshot.customer.id,
            period_start=period_start,
            period_end=period_end,
            invoices=snapshot.invoices,
            collections=snapshot.collections,
            base_currency=self.base_currency,
        )

        row = ReconciliationModel(
            customer_id=snapshot.customer.id,
            period_start=period_start,
            period_end=period_end,
            balance=result.final_balance.amount,
            currency=self.base_currency,
            status=AgreementStatus(agreement).value,
            note=note,
            created_at=self.clock.now(),
        )
        self.session.add(row)
        self.session.flush()

        with LogContext.bind(customer_id=str(snapshot.customer.id)):
            logger.info("reconciliation_recorded", extra={
                "reconciliation_id": str(row.id),
                "period_start": period_start.isoformat(),
                "period_end": period_end.isoformat(),
                "balance": str(row.balance),
                "status": row.status,
            })
        return row.to_dto()

    def list_for_customer(self, customer_id: RecordId) -> list[Reconciliation]:
        """Snapshots for one customer, newest first."""
        return self.selector.list_reconciliations(customer_id)
