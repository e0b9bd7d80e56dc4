"""
CustomerService -- customer cards and guarded deletion.

Invariants enforced:
    - A customer with any invoice, collection, check or reconciliation is
      never deleted; delete_customer() reports False and names the
      dependants in the log instead.
"""

from __future__ import annotations

from sqlalchemy import func, select

from ledger_kernel.domain.records import Customer, RecordId
from ledger_kernel.exceptions import CustomerHasRecordsError, CustomerNotFoundError
from ledger_kernel.logging_config import get_logger
from ledger_kernel.models.check import CheckModel
from ledger_kernel.models.collection import CollectionModel
from ledger_kernel.models.customer import CustomerModel
from ledger_kernel.models.invoice import InvoiceModel
from ledger_kernel.models.reconciliation import ReconciliationModel
from ledger_kernel.selectors.base import as_uuid
from ledger_kernel.services.base import BaseService

logger = get_logger("services.customer")

_DEPENDANT_TABLES = (
    ("invoices", InvoiceModel),
    ("collections", CollectionModel),
    ("checks", CheckModel),
    ("reconciliations", ReconciliationModel),
)


class CustomerService(BaseService):

    def _get(self, customer_id: RecordId) -> CustomerModel:
        key = as_uuid(customer_id)
        row = self.session.get(CustomerModel, key) if key is not None else None
        if row is None:
            raise CustomerNotFoundError(str(customer_id))
        return row

    def create_customer(
        self,
        name: str,
        email: str = "",
        tax_no: str = "",
        tax_office: str | None = None,
        address: str | None = None,
        phone: str | None = None,
        city: str | None = None,
        is_legal_entity: bool = True,
    ) -> Customer:
        row = CustomerModel(
            name=name,
            email=email,
            tax_no=tax_no,
            tax_office=tax_office,
            address=address,
            phone=phone,
            city=city,
            is_legal_entity=is_legal_entity,
            created_at=self.clock.now(),
        )
        self.session.add(row)
        self.session.flush()
        logger.info("customer_created", extra={"customer_id": str(row.id), "name": name})
        return row.to_dto()

    def dependants(self, customer_id: RecordId) -> dict[str, int]:
        """Count of records per table that still reference the customer."""
        key = self._get(customer_id).id
        counts: dict[str, int] = {}
        for label, model in _DEPENDANT_TABLES:
            count = self.session.scalar(
                select(func.count()).select_from(model).where(model.customer_id == key)
            ) or 0
            if count:
                counts[label] = count
        return counts

    def delete_customer(self, customer_id: RecordId) -> bool:
        """
        Delete a customer without history.

        Returns False, deleting nothing, while any invoice, collection,
        check or reconciliation references it.

        Raises:
            CustomerNotFoundError: unknown customer id.
        """
        counts = self.dependants(customer_id)
        if counts:
            logger.warning("customer_delete_refused", extra={
                "customer_id": str(customer_id),
                "reason": CustomerHasRecordsError.code,
                "dependants": counts,
            })
            return False

        self.session.delete(self._get(customer_id))
        self.session.flush()
        logger.info("customer_deleted", extra={"customer_id": str(customer_id)})
        return True

    def delete_customer_or_raise(self, customer_id: RecordId) -> None:
        counts = self.dependants(customer_id)
        if counts:
            raise CustomerHasRecordsError(str(customer_id), counts)
        self.delete_customer(customer_id)
