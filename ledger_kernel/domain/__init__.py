"""
Pure domain layer.

Values, records and rate snapshots with NO dependencies on:
- ORM (SQLAlchemy)
- Database
- Time/clock (except the Clock abstraction itself)
- I/O

All domain objects are immutable and deterministic.
"""

from ledger_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from ledger_kernel.domain.currency import CurrencyInfo, CurrencyRegistry
from ledger_kernel.domain.rates import RateSnapshot, parse_tcmb_rates
from ledger_kernel.domain.records import (
    Account,
    AccountKind,
    AgreementStatus,
    Check,
    CheckStatus,
    Collection,
    CollectionMethod,
    Customer,
    EntryKind,
    Invoice,
    InvoiceStatus,
    LedgerEntry,
    LedgerSnapshot,
    LineItem,
    Product,
    Reconciliation,
    RecordId,
    Transaction,
    TransactionType,
)
from ledger_kernel.domain.values import (
    Currency,
    ExchangeRate,
    MonetaryValue,
    Money,
    to_decimal,
    validate_frozen_rate,
)

__all__ = [
    # Clock
    "Clock",
    "DeterministicClock",
    "SystemClock",
    # Currency
    "CurrencyInfo",
    "CurrencyRegistry",
    # Rates
    "RateSnapshot",
    "parse_tcmb_rates",
    # Records
    "Account",
    "AccountKind",
    "AgreementStatus",
    "Check",
    "CheckStatus",
    "Collection",
    "CollectionMethod",
    "Customer",
    "EntryKind",
    "Invoice",
    "InvoiceStatus",
    "LedgerEntry",
    "LedgerSnapshot",
    "LineItem",
    "Product",
    "Reconciliation",
    "RecordId",
    "Transaction",
    "TransactionType",
    # Values
    "Currency",
    "ExchangeRate",
    "MonetaryValue",
    "Money",
    "to_decimal",
    "validate_frozen_rate",
]
