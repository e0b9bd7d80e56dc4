"""
Module: ledger_kernel.models.invoice
Responsibility: ORM persistence for sales invoices and their lines.
Architecture position: Kernel > Models.

Invariants enforced:
    - exchange_rate is the rate to base frozen when the invoice was
      recorded; nothing in the ledger rewrites it.
    - total_amount is stored, not recomputed, so an edited line total can
      never silently move a historical statement.

Failure modes:
    - IntegrityError if customer_id does not reference a customer.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from uuid import UUID

from sqlalchemy import Date, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ledger_kernel.db.base import TrackedBase, UUIDString
from ledger_kernel.db.types import RATE_PRECISION, ExactDecimal
from ledger_kernel.domain.records import Invoice, InvoiceStatus, LineItem


class InvoiceModel(TrackedBase):
    """A sales invoice: a debit on the customer's account."""

    __tablename__ = "invoices"

    __table_args__ = (
        Index("idx_invoice_customer_date", "customer_id", "issue_date"),
        Index("idx_invoice_status", "status"),
    )

    customer_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("customers.id"),
        nullable=False,
    )
    customer_name: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    issue_date: Mapped[date] = mapped_column(Date, nullable=False)
    due_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    currency: Mapped[str] = mapped_column(String(3), nullable=False)
    exchange_rate: Mapped[Decimal] = mapped_column(ExactDecimal(*RATE_PRECISION), nullable=False)
    total_amount: Mapped[Decimal] = mapped_column(nullable=False)
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=InvoiceStatus.INVOICED.value,
    )

    lines: Mapped[list[InvoiceLineModel]] = relationship(
        back_populates="invoice",
        cascade="all, delete-orphan",
        order_by="InvoiceLineModel.line_no",
    )

    def to_dto(self) -> Invoice:
        return Invoice(
            id=self.id,
            customer_id=self.customer_id,
            issue_date=self.issue_date,
            currency=self.currency,
            exchange_rate=self.exchange_rate,
            total_amount=self.total_amount,
            items=tuple(line.to_dto() for line in self.lines),
            status=InvoiceStatus(self.status),
            due_date=self.due_date,
            created_at=self.created_at,
            customer_name=self.customer_name,
        )

    def __repr__(self) -> str:
        return f"<Invoice {self.id} {self.total_amount} {self.currency} ({self.status})>"


class InvoiceLineModel(TrackedBase):
    """One sold line of an invoice."""

    __tablename__ = "invoice_lines"

    __table_args__ = (
        Index("idx_invoice_line_invoice", "invoice_id"),
        Index("idx_invoice_line_product", "product_id"),
    )

    invoice_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("invoices.id"),
        nullable=False,
    )
    line_no: Mapped[int] = mapped_column(Integer, nullable=False)
    product_id: Mapped[UUID | None] = mapped_column(
        UUIDString(),
        ForeignKey("products.id"),
        nullable=True,
    )
    product_name: Mapped[str] = mapped_column(String(255), nullable=False)
    sku: Mapped[str] = mapped_column(String(50), nullable=False, default="")
    unit: Mapped[str | None] = mapped_column(String(20), nullable=True)
    quantity: Mapped[Decimal] = mapped_column(nullable=False)
    unit_price: Mapped[Decimal] = mapped_column(nullable=False)
    discount: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))
    tax_rate: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))
    line_total: Mapped[Decimal] = mapped_column(nullable=False)

    invoice: Mapped[InvoiceModel] = relationship(back_populates="lines")

    def to_dto(self) -> LineItem:
        return LineItem(
            product_id=self.product_id,
            product_name=self.product_name,
            quantity=self.quantity,
            unit_price=self.unit_price,
            discount=self.discount,
            tax_rate=self.tax_rate,
            sku=self.sku,
            unit=self.unit,
        )
