"""
Records -- frozen snapshots of the ledger's persisted entities.

Responsibility:
    Typed, immutable views over customers, products, invoices, collections,
    checks, cash/bank accounts, account transactions and reconciliation
    snapshots.  Engines consume only these; selectors build them from ORM
    rows; nothing here touches a session.

Architecture position:
    Kernel > Domain -- pure, zero I/O.

Invariants enforced:
    - Amounts, quantities and rates are Decimal (floats are refused).
    - An Invoice or Collection always carries its own frozen exchange rate.
    - LedgerEntry is the closed union Invoice | Collection.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import TypeAlias
from uuid import UUID

from ledger_kernel.domain.values import ONE, ZERO, MonetaryValue, to_decimal
from ledger_kernel.exceptions import ExchangeRateNotFoundError

RecordId: TypeAlias = str | UUID

HUNDRED = Decimal("100")


class InvoiceStatus(str, Enum):
    """Lifecycle status of a commercial document."""

    DRAFT = "draft"
    PENDING = "pending"
    APPROVED = "approved"
    SHIPPED = "shipped"
    PARTIAL = "partial"
    INVOICED = "invoiced"
    PARTIAL_PAID = "partial_paid"
    PAID = "paid"
    CANCELLED = "cancelled"
    SUSPENDED = "suspended"
    REJECTED = "rejected"


class CollectionMethod(str, Enum):
    """How a collection was received."""

    BANK = "bank"
    CASH = "cash"
    CHECK = "check"


class CheckStatus(str, Enum):
    """Post-dated check status. PENDING is the only non-terminal state."""

    PENDING = "pending"
    COLLECTED = "collected"
    BOUNCED = "bounced"
    RETURNED = "returned"

    @property
    def is_terminal(self) -> bool:
        return self is not CheckStatus.PENDING


class AccountKind(str, Enum):
    CASH = "cash"
    BANK = "bank"


class TransactionType(str, Enum):
    """Kinds of movement on a cash/bank account."""

    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"
    TRANSFER = "transfer"
    PAYMENT = "payment"
    COLLECTION = "collection"


class AgreementStatus(str, Enum):
    """Customer's answer to a reconciliation letter."""

    AGREED = "agreed"
    NOT_AGREED = "not_agreed"


class EntryKind(str, Enum):
    """Kind of a statement line."""

    INVOICE = "invoice"
    COLLECTION = "collection"


def _frozen_rate(rate: Decimal | str | int | None, currency: str, record_id: RecordId) -> Decimal:
    if rate is None:
        raise ExchangeRateNotFoundError(currency, "base", str(record_id))
    return to_decimal(rate, "exchange rate")


@dataclass(frozen=True)
class Customer:
    id: RecordId
    name: str
    email: str = ""
    tax_no: str = ""
    tax_office: str | None = None
    address: str | None = None
    phone: str | None = None
    city: str | None = None
    is_legal_entity: bool = True


@dataclass(frozen=True)
class Product:
    """
    Product card.

    ``cost`` is the single current cost, in ``cost_currency``.  No cost
    history is kept, so any profit figure built on it reflects the cost at
    report time, not at time of sale.
    """

    id: RecordId
    name: str
    sku: str = ""
    price: Decimal = ZERO
    currency: str = "TRY"
    cost: Decimal = ZERO
    cost_currency: str = "TRY"
    stock: Decimal = ZERO
    category: str = ""
    unit: str = "pcs"

    def __post_init__(self) -> None:
        object.__setattr__(self, "price", to_decimal(self.price, "price"))
        object.__setattr__(self, "cost", to_decimal(self.cost, "cost"))
        object.__setattr__(self, "stock", to_decimal(self.stock, "stock"))


@dataclass(frozen=True)
class LineItem:
    """A sold line: quantity x unit price less a percentage discount."""

    product_id: RecordId | None
    product_name: str
    quantity: Decimal
    unit_price: Decimal
    discount: Decimal = ZERO
    tax_rate: Decimal = ZERO
    sku: str = ""
    unit: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "quantity", to_decimal(self.quantity, "quantity"))
        object.__setattr__(self, "unit_price", to_decimal(self.unit_price, "unit_price"))
        object.__setattr__(self, "discount", to_decimal(self.discount, "discount"))
        object.__setattr__(self, "tax_rate", to_decimal(self.tax_rate, "tax_rate"))

    @property
    def line_total(self) -> Decimal:
        return self.quantity * self.unit_price * (ONE - self.discount / HUNDRED)

    @property
    def tax_amount(self) -> Decimal:
        return self.line_total * self.tax_rate / HUNDRED

    @property
    def gross_total(self) -> Decimal:
        """Line total including tax; what the line adds to the invoice total."""
        return self.line_total + self.tax_amount


@dataclass(frozen=True)
class Invoice:
    """
    Sales invoice -- a debit on the customer's account.

    ``exchange_rate`` is the rate to base captured when the invoice was
    issued; it is never recalculated.
    """

    id: RecordId
    customer_id: RecordId
    issue_date: date
    currency: str
    exchange_rate: Decimal
    total_amount: Decimal
    items: tuple[LineItem, ...] = ()
    status: InvoiceStatus = InvoiceStatus.INVOICED
    due_date: date | None = None
    created_at: datetime | None = None
    customer_name: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "total_amount", to_decimal(self.total_amount, "total_amount"))
        object.__setattr__(self, "exchange_rate", _frozen_rate(self.exchange_rate, self.currency, self.id))
        object.__setattr__(self, "items", tuple(self.items))

    @property
    def value(self) -> MonetaryValue:
        return MonetaryValue.of(self.total_amount, self.currency, self.exchange_rate)


@dataclass(frozen=True)
class Collection:
    """
    Payment received from a customer -- a credit on the customer's account.

    ``invoice_id`` is set when the collection settles a specific invoice.
    ``account_id`` is absent for checks not yet banked.
    """

    id: RecordId
    customer_id: RecordId
    collection_date: date
    amount: Decimal
    currency: str
    exchange_rate: Decimal
    method: CollectionMethod = CollectionMethod.BANK
    invoice_id: RecordId | None = None
    account_id: RecordId | None = None
    check_id: RecordId | None = None
    description: str = ""
    created_at: datetime | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "amount", to_decimal(self.amount))
        object.__setattr__(self, "exchange_rate", _frozen_rate(self.exchange_rate, self.currency, self.id))

    @property
    def value(self) -> MonetaryValue:
        return MonetaryValue.of(self.amount, self.currency, self.exchange_rate)


LedgerEntry: TypeAlias = Invoice | Collection


@dataclass(frozen=True)
class Check:
    id: RecordId
    check_number: str
    bank_name: str
    drawer: str
    amount: Decimal
    currency: str
    issue_date: date
    due_date: date
    customer_id: RecordId
    status: CheckStatus = CheckStatus.PENDING
    description: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "amount", to_decimal(self.amount))


@dataclass(frozen=True)
class Account:
    """Cash box or bank account.  ``balance`` is a cache over its transactions."""

    id: RecordId
    name: str
    kind: AccountKind
    currency: str
    balance: Decimal = ZERO
    opening_balance: Decimal = ZERO
    iban: str | None = None
    bank_name: str | None = None
    branch: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "balance", to_decimal(self.balance, "balance"))
        object.__setattr__(self, "opening_balance", to_decimal(self.opening_balance, "opening_balance"))


@dataclass(frozen=True)
class Transaction:
    """One signed movement on an account, with the balance it left behind."""

    id: RecordId
    account_id: RecordId
    transaction_date: date
    amount: Decimal
    type: TransactionType
    description: str
    balance_after: Decimal
    related_id: RecordId | None = None
    created_at: datetime | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "amount", to_decimal(self.amount))
        object.__setattr__(self, "balance_after", to_decimal(self.balance_after, "balance_after"))


@dataclass(frozen=True)
class Reconciliation:
    """Audit snapshot of a reconciliation letter and the customer's answer."""

    id: RecordId
    customer_id: RecordId
    period_start: date
    period_end: date
    balance: Decimal
    status: AgreementStatus
    created_at: datetime
    note: str = ""
    currency: str = "TRY"

    def __post_init__(self) -> None:
        object.__setattr__(self, "balance", to_decimal(self.balance, "balance"))


@dataclass(frozen=True)
class LedgerSnapshot:
    """Everything the read-side engines need for one customer, fetched once."""

    customer: Customer
    invoices: tuple[Invoice, ...] = ()
    collections: tuple[Collection, ...] = ()
