"""
Module: ledger_kernel.models.account
Responsibility: ORM persistence for cash boxes, bank accounts and the signed
    transactions posted to them.
Architecture position: Kernel > Models.

Invariants enforced:
    - account_transactions is the source of truth.  cash_accounts.balance
      is a cache equal to opening_balance + sum(amount), maintained by
      AccountLedgerService under a row lock and rebuildable from the log.
    - Each transaction stores the balance it left behind (balance_after).

Failure modes:
    - IntegrityError on deleting an account that still has transactions.
      AccountLedgerService refuses such deletes before touching the row.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from uuid import UUID

from sqlalchemy import Date, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from ledger_kernel.db.base import TrackedBase, UUIDString
from ledger_kernel.domain.records import Account, AccountKind, Transaction, TransactionType


class CashAccountModel(TrackedBase):
    """A cash box or bank account in one currency."""

    __tablename__ = "cash_accounts"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    kind: Mapped[str] = mapped_column(String(10), nullable=False)
    currency: Mapped[str] = mapped_column(String(3), nullable=False)
    balance: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))
    opening_balance: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))
    iban: Mapped[str | None] = mapped_column(String(34), nullable=True)
    bank_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    branch: Mapped[str | None] = mapped_column(String(100), nullable=True)

    def to_dto(self) -> Account:
        return Account(
            id=self.id,
            name=self.name,
            kind=AccountKind(self.kind),
            currency=self.currency,
            balance=self.balance,
            opening_balance=self.opening_balance,
            iban=self.iban,
            bank_name=self.bank_name,
            branch=self.branch,
        )

    def __repr__(self) -> str:
        return f"<CashAccount {self.name} {self.balance} {self.currency}>"


class AccountTransactionModel(TrackedBase):
    """One signed movement on a cash/bank account."""

    __tablename__ = "account_transactions"

    __table_args__ = (
        Index("idx_account_txn_account_date", "account_id", "transaction_date"),
        Index("idx_account_txn_related", "related_id"),
    )

    account_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("cash_accounts.id"),
        nullable=False,
    )
    transaction_date: Mapped[date] = mapped_column(Date, nullable=False)
    amount: Mapped[Decimal] = mapped_column(nullable=False)
    type: Mapped[str] = mapped_column(String(20), nullable=False)
    description: Mapped[str] = mapped_column(String(500), nullable=False, default="")
    balance_after: Mapped[Decimal] = mapped_column(nullable=False)
    # Transfer reference shared by both legs, or the originating collection
    related_id: Mapped[str | None] = mapped_column(String(36), nullable=True)

    def to_dto(self) -> Transaction:
        return Transaction(
            id=self.id,
            account_id=self.account_id,
            transaction_date=self.transaction_date,
            amount=self.amount,
            type=TransactionType(self.type),
            description=self.description,
            balance_after=self.balance_after,
            related_id=self.related_id,
            created_at=self.created_at,
        )
