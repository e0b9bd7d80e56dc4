"""
Module: ledger_kernel.models.product
Responsibility: ORM persistence for product cards.
Architecture position: Kernel > Models.

Invariants enforced:
    - ``cost`` is the single current cost in ``cost_currency``; no cost
      history is stored.  Reports built on it are current-cost figures.
"""

from __future__ import annotations

from decimal import Decimal

from sqlalchemy import Index, String
from sqlalchemy.orm import Mapped, mapped_column

from ledger_kernel.db.base import TrackedBase
from ledger_kernel.domain.records import Product


class ProductModel(TrackedBase):
    """A product card with its list price and current cost."""

    __tablename__ = "products"

    __table_args__ = (
        Index("idx_product_sku", "sku"),
        Index("idx_product_category", "category"),
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    sku: Mapped[str] = mapped_column(String(50), nullable=False, default="")
    price: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))
    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="TRY")
    cost: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))
    cost_currency: Mapped[str] = mapped_column(String(3), nullable=False, default="TRY")
    stock: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))
    category: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    unit: Mapped[str] = mapped_column(String(20), nullable=False, default="pcs")

    def to_dto(self) -> Product:
        return Product(
            id=self.id,
            name=self.name,
            sku=self.sku,
            price=self.price,
            currency=self.currency,
            cost=self.cost,
            cost_currency=self.cost_currency,
            stock=self.stock,
            category=self.category,
            unit=self.unit,
        )

    def __repr__(self) -> str:
        return f"<Product {self.sku or self.name}>"
