"""
Module: ledger_kernel.models.check
Responsibility: ORM persistence for post-dated checks received from customers.
Architecture position: Kernel > Models.

Invariants enforced:
    - status moves only PENDING -> COLLECTED | BOUNCED | RETURNED; the
      guard lives in ledger_engines.check_lifecycle and CheckService
      applies it under a row lock.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from uuid import UUID

from sqlalchemy import Date, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from ledger_kernel.db.base import TrackedBase, UUIDString
from ledger_kernel.domain.records import Check, CheckStatus


class CheckModel(TrackedBase):
    __tablename__ = "checks"

    __table_args__ = (
        Index("idx_check_status_due", "status", "due_date"),
        Index("idx_check_customer", "customer_id"),
    )

    check_number: Mapped[str] = mapped_column(String(50), nullable=False)
    bank_name: Mapped[str] = mapped_column(String(100), nullable=False)
    drawer: Mapped[str] = mapped_column(String(255), nullable=False)
    amount: Mapped[Decimal] = mapped_column(nullable=False)
    currency: Mapped[str] = mapped_column(String(3), nullable=False)
    issue_date: Mapped[date] = mapped_column(Date, nullable=False)
    due_date: Mapped[date] = mapped_column(Date, nullable=False)
    customer_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("customers.id"),
        nullable=False,
    )
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=CheckStatus.PENDING.value,
    )
    description: Mapped[str] = mapped_column(String(500), nullable=False, default="")

    def to_dto(self) -> Check:
        return Check(
            id=self.id,
            check_number=self.check_number,
            bank_name=self.bank_name,
            drawer=self.drawer,
            amount=self.amount,
            currency=self.currency,
            issue_date=self.issue_date,
            due_date=self.due_date,
            customer_id=self.customer_id,
            status=CheckStatus(self.status),
            description=self.description,
        )

    def __repr__(self) -> str:
        return f"<Check {self.check_number} {self.amount} {self.currency} ({self.status})>"
