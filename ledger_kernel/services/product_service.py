"""
ProductService -- product cards, cost updates and guarded deletion.

Invariants enforced:
    - Updating a product's cost changes every later cost/profit report
      (current-cost basis).  Each update is logged with the old and new
      cost so report differences can be explained.
    - A product referenced by any invoice line is never deleted.
    - Cost is never negative; zero means "cost unknown".
"""

from __future__ import annotations

from decimal import Decimal

from ledger_kernel.domain.currency import CurrencyRegistry
from ledger_kernel.domain.records import Product, RecordId
from ledger_kernel.domain.values import ZERO, to_decimal
from ledger_kernel.exceptions import (
    NonPositiveAmountError,
    ProductNotFoundError,
    ProductReferencedError,
)
from ledger_kernel.logging_config import get_logger
from ledger_kernel.models.product import ProductModel
from ledger_kernel.selectors.base import as_uuid
from ledger_kernel.services.base import BaseService

logger = get_logger("services.product")


def _parse_cost(cost: Decimal | str | int) -> Decimal:
    value = to_decimal(cost, "cost")
    if value < ZERO:
        raise NonPositiveAmountError(str(value), "cost")
    return value


class ProductService(BaseService):

    def _get(self, product_id: RecordId) -> ProductModel:
        key = as_uuid(product_id)
        row = self.session.get(ProductModel, key) if key is not None else None
        if row is None:
            raise ProductNotFoundError(str(product_id))
        return row

    def create_product(
        self,
        name: str,
        sku: str = "",
        price: Decimal | str | int = ZERO,
        currency: str = "TRY",
        cost: Decimal | str | int = ZERO,
        cost_currency: str = "TRY",
        stock: Decimal | str | int = ZERO,
        category: str = "",
        unit: str = "pcs",
    ) -> Product:
        unit_cost = _parse_cost(cost)
        row = ProductModel(
            name=name,
            sku=sku,
            price=to_decimal(price, "price"),
            currency=CurrencyRegistry.validate(currency),
            cost=unit_cost,
            cost_currency=CurrencyRegistry.validate(cost_currency),
            stock=to_decimal(stock, "stock"),
            category=category,
            unit=unit,
            created_at=self.clock.now(),
        )
        self.session.add(row)
        self.session.flush()
        logger.info("product_created", extra={"product_id": str(row.id), "sku": sku})
        return row.to_dto()

    def update_cost(
        self,
        product_id: RecordId,
        cost: Decimal | str | int,
        cost_currency: str | None = None,
    ) -> Product:
        unit_cost = _parse_cost(cost)
        row = self._get(product_id)
        previous = (row.cost, row.cost_currency)
        row.cost = unit_cost
        if cost_currency is not None:
            row.cost_currency = CurrencyRegistry.validate(cost_currency)
        self.session.flush()

        logger.info("product_cost_updated", extra={
            "product_id": str(row.id),
            "previous_cost": str(previous[0]),
            "previous_currency": previous[1],
            "cost": str(row.cost),
            "cost_currency": row.cost_currency,
        })
        return row.to_dto()

    def delete_product(self, product_id: RecordId) -> bool:
        """Delete a product; returns False while invoice lines reference it."""
        row = self._get(product_id)
        line_count = self.selector.count_product_lines(row.id)
        if line_count:
            logger.warning("product_delete_refused", extra={
                "product_id": str(row.id),
                "reason": ProductReferencedError.code,
                "line_count": line_count,
            })
            return False

        self.session.delete(row)
        self.session.flush()
        logger.info("product_deleted", extra={"product_id": str(product_id)})
        return True

    def delete_product_or_raise(self, product_id: RecordId) -> None:
        """Like delete_product(), but raises ProductReferencedError on refusal."""
        if not self.delete_product(product_id):
            raise ProductReferencedError(
                str(product_id), self.selector.count_product_lines(product_id),
            )
