"""
Module: ledger_kernel.models.customer
Responsibility: ORM persistence for customers (the counterparties whose
    running balance the ledger keeps).
Architecture position: Kernel > Models.  May import from db/ and domain/records.
    MUST NOT import from services/, selectors/ or outer layers.

Failure modes:
    - IntegrityError on delete while invoices, collections, checks or
      reconciliations reference the row (foreign keys).  CustomerService
      checks dependants first and reports them without deleting.
"""

from __future__ import annotations

from sqlalchemy import Boolean, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from ledger_kernel.db.base import TrackedBase
from ledger_kernel.domain.records import Customer


class CustomerModel(TrackedBase):
    """A customer card."""

    __tablename__ = "customers"

    __table_args__ = (
        Index("idx_customer_name", "name"),
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    tax_no: Mapped[str] = mapped_column(String(20), nullable=False, default="")
    tax_office: Mapped[str | None] = mapped_column(String(100), nullable=True)
    address: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    city: Mapped[str | None] = mapped_column(String(100), nullable=True)
    is_legal_entity: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    def to_dto(self) -> Customer:
        """Convert ORM model to frozen domain record."""
        return Customer(
            id=self.id,
            name=self.name,
            email=self.email,
            tax_no=self.tax_no,
            tax_office=self.tax_office,
            address=self.address,
            phone=self.phone,
            city=self.city,
            is_legal_entity=self.is_legal_entity,
        )

    def __repr__(self) -> str:
        return f"<Customer {self.name}>"
