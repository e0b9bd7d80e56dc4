"""
Module: ledger_kernel.models.collection
Responsibility: ORM persistence for collections (payments received from
    customers).
Architecture position: Kernel > Models.

Invariants enforced:
    - exchange_rate is frozen at recording time.
    - A CHECK collection references its Check row; a BANK or CASH
      collection references the account it was posted to.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from uuid import UUID

from sqlalchemy import Date, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from ledger_kernel.db.base import TrackedBase, UUIDString
from ledger_kernel.db.types import RATE_PRECISION, ExactDecimal
from ledger_kernel.domain.records import Collection, CollectionMethod


class CollectionModel(TrackedBase):
    """A payment received: a credit on the customer's account."""

    __tablename__ = "collections"

    __table_args__ = (
        Index("idx_collection_customer_date", "customer_id", "collection_date"),
        Index("idx_collection_invoice", "invoice_id"),
        Index("idx_collection_account", "account_id"),
    )

    customer_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("customers.id"),
        nullable=False,
    )
    collection_date: Mapped[date] = mapped_column(Date, nullable=False)
    amount: Mapped[Decimal] = mapped_column(nullable=False)
    currency: Mapped[str] = mapped_column(String(3), nullable=False)
    exchange_rate: Mapped[Decimal] = mapped_column(ExactDecimal(*RATE_PRECISION), nullable=False)
    method: Mapped[str] = mapped_column(String(10), nullable=False)
    invoice_id: Mapped[UUID | None] = mapped_column(
        UUIDString(),
        ForeignKey("invoices.id"),
        nullable=True,
    )
    account_id: Mapped[UUID | None] = mapped_column(
        UUIDString(),
        ForeignKey("cash_accounts.id"),
        nullable=True,
    )
    check_id: Mapped[UUID | None] = mapped_column(
        UUIDString(),
        ForeignKey("checks.id"),
        nullable=True,
    )
    description: Mapped[str] = mapped_column(String(500), nullable=False, default="")

    def to_dto(self) -> Collection:
        return Collection(
            id=self.id,
            customer_id=self.customer_id,
            collection_date=self.collection_date,
            amount=self.amount,
            currency=self.currency,
            exchange_rate=self.exchange_rate,
            method=CollectionMethod(self.method),
            invoice_id=self.invoice_id,
            account_id=self.account_id,
            check_id=self.check_id,
            description=self.description,
            created_at=self.created_at,
        )

    def __repr__(self) -> str:
        return f"<Collection {self.id} {self.amount} {self.currency} ({self.method})>"
