"""
Module: ledger_kernel.models.reconciliation
Responsibility: ORM persistence for reconciliation snapshots: the balance
    printed on a reconciliation letter and the customer's answer.
Architecture position: Kernel > Models.

Invariants enforced:
    - Audit trail only.  No ledger computation reads these rows back.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from uuid import UUID

from sqlalchemy import Date, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from ledger_kernel.db.base import TrackedBase, UUIDString
from ledger_kernel.domain.records import AgreementStatus, Reconciliation


class ReconciliationModel(TrackedBase):
    __tablename__ = "reconciliations"

    __table_args__ = (
        Index("idx_reconciliation_customer", "customer_id", "created_at"),
    )

    customer_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("customers.id"),
        nullable=False,
    )
    period_start: Mapped[date] = mapped_column(Date, nullable=False)
    period_end: Mapped[date] = mapped_column(Date, nullable=False)
    balance: Mapped[Decimal] = mapped_column(nullable=False)
    currency: Mapped[str] = mapped_column(String(3), nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False)
    note: Mapped[str] = mapped_column(String(1000), nullable=False, default="")

    def to_dto(self) -> Reconciliation:
        return Reconciliation(
            id=self.id,
            customer_id=self.customer_id,
            period_start=self.period_start,
            period_end=self.period_end,
            balance=self.balance,
            status=AgreementStatus(self.status),
            created_at=self.created_at,
            note=self.note,
            currency=self.currency,
        )
