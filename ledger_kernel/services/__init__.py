"""Kernel services: flush-only writers over the ledger tables."""

from ledger_kernel.services.account_ledger_service import AccountLedgerService, TransferResult
from ledger_kernel.services.base import BaseService
from ledger_kernel.services.check_service import CheckService
from ledger_kernel.services.collection_service import CollectionService
from ledger_kernel.services.customer_service import CustomerService
from ledger_kernel.services.product_service import ProductService
from ledger_kernel.services.reconciliation_service import ReconciliationService

__all__ = [
    "AccountLedgerService",
    "BaseService",
    "CheckService",
    "CollectionService",
    "CustomerService",
    "ProductService",
    "ReconciliationService",
    "TransferResult",
]
