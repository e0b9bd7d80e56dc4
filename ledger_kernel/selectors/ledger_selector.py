"""
Module: ledger_kernel.selectors.ledger_selector
Responsibility: Read-only loading of everything the ledger engines consume:
    customers, invoices (with lines), collections, products, accounts,
    account transactions, checks and reconciliation snapshots -- all as
    frozen domain records.
Architecture position: Kernel > Selectors.

Invariants enforced:
    - Results are deterministic: every list query has an ORDER BY.
    - Unknown or malformed ids yield None / empty results, never errors;
      services decide whether that is a NotFoundError.
"""

from __future__ import annotations

from datetime import date

from sqlalchemy import func, select
from sqlalchemy.orm import selectinload

from ledger_kernel.domain.records import (
    Account,
    Check,
    CheckStatus,
    Collection,
    Customer,
    Invoice,
    LedgerSnapshot,
    Product,
    Reconciliation,
    RecordId,
    Transaction,
)
from ledger_kernel.models.account import AccountTransactionModel, CashAccountModel
from ledger_kernel.models.check import CheckModel
from ledger_kernel.models.collection import CollectionModel
from ledger_kernel.models.customer import CustomerModel
from ledger_kernel.models.invoice import InvoiceLineModel, InvoiceModel
from ledger_kernel.models.product import ProductModel
from ledger_kernel.models.reconciliation import ReconciliationModel
from ledger_kernel.selectors.base import BaseSelector, as_uuid


class LedgerSelector(BaseSelector):
    """Read path for customer ledgers, accounts and reports."""

    # -- customers ------------------------------------------------------------

    def get_customer(self, customer_id: RecordId) -> Customer | None:
        key = as_uuid(customer_id)
        if key is None:
            return None
        row = self.session.get(CustomerModel, key)
        return row.to_dto() if row is not None else None

    def list_customers(self) -> list[Customer]:
        rows = self.session.scalars(
            select(CustomerModel).order_by(CustomerModel.name, CustomerModel.id)
        )
        return [row.to_dto() for row in rows]

    # -- invoices and collections ---------------------------------------------

    def list_invoices(
        self,
        customer_id: RecordId | None = None,
        start: date | None = None,
        end: date | None = None,
    ) -> list[Invoice]:
        stmt = select(InvoiceModel).options(selectinload(InvoiceModel.lines))
        if customer_id is not None:
            stmt = stmt.where(InvoiceModel.customer_id == as_uuid(customer_id))
        if start is not None:
            stmt = stmt.where(InvoiceModel.issue_date >= start)
        if end is not None:
            stmt = stmt.where(InvoiceModel.issue_date <= end)
        stmt = stmt.order_by(InvoiceModel.issue_date, InvoiceModel.created_at, InvoiceModel.id)
        return [row.to_dto() for row in self.session.scalars(stmt)]

    def get_invoice(self, invoice_id: RecordId) -> Invoice | None:
        key = as_uuid(invoice_id)
        if key is None:
            return None
        row = self.session.get(InvoiceModel, key)
        return row.to_dto() if row is not None else None

    def list_collections(
        self,
        customer_id: RecordId | None = None,
        invoice_id: RecordId | None = None,
    ) -> list[Collection]:
        stmt = select(CollectionModel)
        if customer_id is not None:
            stmt = stmt.where(CollectionModel.customer_id == as_uuid(customer_id))
        if invoice_id is not None:
            stmt = stmt.where(CollectionModel.invoice_id == as_uuid(invoice_id))
        stmt = stmt.order_by(
            CollectionModel.collection_date, CollectionModel.created_at, CollectionModel.id,
        )
        return [row.to_dto() for row in self.session.scalars(stmt)]

    def load_snapshot(self, customer_id: RecordId) -> LedgerSnapshot | None:
        """Everything the statement and reconciliation engines need, in one read."""
        customer = self.get_customer(customer_id)
        if customer is None:
            return None
        return LedgerSnapshot(
            customer=customer,
            invoices=tuple(self.list_invoices(customer_id=customer.id)),
            collections=tuple(self.list_collections(customer_id=customer.id)),
        )

    # -- products ---------------------------------------------------------------

    def list_products(self) -> list[Product]:
        rows = self.session.scalars(
            select(ProductModel).order_by(ProductModel.name, ProductModel.id)
        )
        return [row.to_dto() for row in rows]

    def get_product(self, product_id: RecordId) -> Product | None:
        key = as_uuid(product_id)
        if key is None:
            return None
        row = self.session.get(ProductModel, key)
        return row.to_dto() if row is not None else None

    def count_product_lines(self, product_id: RecordId) -> int:
        return self.session.scalar(
            select(func.count())
            .select_from(InvoiceLineModel)
            .where(InvoiceLineModel.product_id == as_uuid(product_id))
        ) or 0

    # -- accounts -----------------------------------------------------------------

    def list_accounts(self) -> list[Account]:
        rows = self.session.scalars(
            select(CashAccountModel).order_by(CashAccountModel.name, CashAccountModel.id)
        )
        return [row.to_dto() for row in rows]

    def get_account(self, account_id: RecordId) -> Account | None:
        key = as_uuid(account_id)
        if key is None:
            return None
        row = self.session.get(CashAccountModel, key)
        return row.to_dto() if row is not None else None

    def list_transactions(
        self,
        account_id: RecordId | None = None,
        start: date | None = None,
        end: date | None = None,
    ) -> list[Transaction]:
        stmt = select(AccountTransactionModel)
        if account_id is not None:
            stmt = stmt.where(AccountTransactionModel.account_id == as_uuid(account_id))
        if start is not None:
            stmt = stmt.where(AccountTransactionModel.transaction_date >= start)
        if end is not None:
            stmt = stmt.where(AccountTransactionModel.transaction_date <= end)
        stmt = stmt.order_by(
            AccountTransactionModel.transaction_date,
            AccountTransactionModel.created_at,
            AccountTransactionModel.id,
        )
        return [row.to_dto() for row in self.session.scalars(stmt)]

    def transactions_for_reference(self, related_id: str) -> list[Transaction]:
        """Both legs of a transfer, or the posting made for a collection."""
        stmt = (
            select(AccountTransactionModel)
            .where(AccountTransactionModel.related_id == str(related_id))
            .order_by(AccountTransactionModel.amount, AccountTransactionModel.id)
        )
        return [row.to_dto() for row in self.session.scalars(stmt)]

    # -- checks -------------------------------------------------------------------

    def list_checks(self, status: CheckStatus | None = None) -> list[Check]:
        stmt = select(CheckModel)
        if status is not None:
            stmt = stmt.where(CheckModel.status == status.value)
        stmt = stmt.order_by(CheckModel.due_date, CheckModel.id)
        return [row.to_dto() for row in self.session.scalars(stmt)]

    def get_check(self, check_id: RecordId) -> Check | None:
        key = as_uuid(check_id)
        if key is None:
            return None
        row = self.session.get(CheckModel, key)
        return row.to_dto() if row is not None else None

    # -- reconciliations ----------------------------------------------------------

    def list_reconciliations(self, customer_id: RecordId) -> list[Reconciliation]:
        """Newest first."""
        stmt = (
            select(ReconciliationModel)
            .where(ReconciliationModel.customer_id == as_uuid(customer_id))
            .order_by(ReconciliationModel.created_at.desc(), ReconciliationModel.id.desc())
        )
        return [row.to_dto() for row in self.session.scalars(stmt)]
