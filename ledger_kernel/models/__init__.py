"""SQLAlchemy ORM models for the ledger."""

from ledger_kernel.models.account import AccountTransactionModel, CashAccountModel
from ledger_kernel.models.check import CheckModel
from ledger_kernel.models.collection import CollectionModel
from ledger_kernel.models.customer import CustomerModel
from ledger_kernel.models.invoice import InvoiceLineModel, InvoiceModel
from ledger_kernel.models.product import ProductModel
from ledger_kernel.models.reconciliation import ReconciliationModel

__all__ = [
    "AccountTransactionModel",
    "CashAccountModel",
    "CheckModel",
    "CollectionModel",
    "CustomerModel",
    "InvoiceLineModel",
    "InvoiceModel",
    "ProductModel",
    "ReconciliationModel",
]
