"""
AccountLedgerService -- postings, transfers and balance upkeep for cash/bank accounts.

Responsibility:
    Persist signed transactions on cash boxes and bank accounts, keep each
    account's cached balance in step with its transaction log, move money
    between accounts of the same currency, and refuse to delete accounts
    that still have history.

Architecture position:
    Kernel > Services -- imperative shell.  Arithmetic and validation come
    from ledger_engines.account_ledger; this class adds locking and I/O.

Invariants enforced:
    - Single writer per account: every posting locks the account row
      (SELECT ... FOR UPDATE) before reading its balance.  Transfers lock
      both rows in ascending id order so two opposite transfers cannot
      deadlock.
    - A transaction row and the cached balance it implies are written in
      the same SAVEPOINT; a transfer's two legs share one SAVEPOINT.
      Nothing partial is ever flushed.
    - The transaction log is the source of truth: rebuild_balance()
      restores the cache to opening_balance + sum(amount).

Failure modes:
    - AccountNotFoundError for unknown account ids.
    - NonPositiveAmountError / AmountSignError / SameAccountTransferError
      raised before any row is touched.
    - CurrencyMismatchError for cross-currency transfers.
    - UnpairedTransferError when record_transaction() is asked for a
      single TRANSFER leg.
    - AccountHasTransactionsError from delete_account_or_raise().
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from uuid import uuid4

from sqlalchemy import func, select

from ledger_kernel.domain.records import (
    Account,
    AccountKind,
    RecordId,
    Transaction,
    TransactionType,
)
from ledger_kernel.domain.values import ZERO, Money, to_decimal
from ledger_kernel.domain.currency import CurrencyRegistry
from ledger_kernel.exceptions import (
    AccountHasTransactionsError,
    AccountNotFoundError,
    NonPositiveAmountError,
    SameAccountTransferError,
    UnpairedTransferError,
)
from ledger_kernel.logging_config import LogContext, get_logger
from ledger_kernel.models.account import AccountTransactionModel, CashAccountModel
from ledger_kernel.selectors.base import as_uuid
from ledger_kernel.services.base import BaseService
from ledger_engines.account_ledger import (
    apply_transaction,
    derive_balance,
    plan_transfer,
    signed_amount,
    validate_amount_sign,
)

logger = get_logger("services.account_ledger")


@dataclass(frozen=True)
class TransferResult:
    """Both persisted legs of a transfer."""

    transfer_ref: str
    outgoing: Transaction
    incoming: Transaction


class AccountLedgerService(BaseService):
    """Writes to cash/bank accounts under a per-account row lock."""

    # -- locking ----------------------------------------------------------------

    def _lock_account(self, account_id: RecordId) -> CashAccountModel:
        """Lock and return the account row, re-reading its current balance."""
        key = as_uuid(account_id)
        row = None
        if key is not None:
            row = self.session.execute(
                select(CashAccountModel)
                .where(CashAccountModel.id == key)
                .with_for_update()
                .execution_options(populate_existing=True)
            ).scalar_one_or_none()
        if row is None:
            raise AccountNotFoundError(str(account_id))
        return row

    def _count_transactions(self, account_id) -> int:
        return self.session.scalar(
            select(func.count())
            .select_from(AccountTransactionModel)
            .where(AccountTransactionModel.account_id == account_id)
        ) or 0

    def _post(
        self,
        row: CashAccountModel,
        amount: Decimal,
        transaction_type: TransactionType,
        description: str,
        transaction_date: date,
        related_id: str | None,
    ) -> AccountTransactionModel:
        """Append a transaction to a locked account and move its cached balance."""
        balance_after = apply_transaction(
            Money.of(row.balance, row.currency),
            Money.of(amount, row.currency),
            transaction_type,
        )
        txn = AccountTransactionModel(
            account_id=row.id,
            transaction_date=transaction_date,
            amount=amount,
            type=transaction_type.value,
            description=description,
            balance_after=balance_after.amount,
            related_id=related_id,
            created_at=self.clock.now(),
        )
        self.session.add(txn)
        row.balance = balance_after.amount
        return txn

    # -- accounts ---------------------------------------------------------------

    def open_account(
        self,
        name: str,
        kind: AccountKind,
        currency: str,
        opening_balance: Decimal | str | int = ZERO,
        iban: str | None = None,
        bank_name: str | None = None,
        branch: str | None = None,
    ) -> Account:
        """Create an account whose cached balance starts at its opening balance."""
        currency = CurrencyRegistry.validate(currency)
        opening = to_decimal(opening_balance, "opening_balance")
        row = CashAccountModel(
            name=name,
            kind=AccountKind(kind).value,
            currency=currency,
            balance=opening,
            opening_balance=opening,
            iban=iban,
            bank_name=bank_name,
            branch=branch,
            created_at=self.clock.now(),
        )
        self.session.add(row)
        self.session.flush()

        logger.info("account_opened", extra={
            "account_id": str(row.id),
            "kind": row.kind,
            "currency": currency,
            "opening_balance": str(opening),
        })
        return row.to_dto()

    # -- postings ---------------------------------------------------------------

    def record_transaction(
        self,
        account_id: RecordId,
        amount: Decimal | str | int,
        transaction_type: TransactionType,
        description: str = "",
        transaction_date: date | None = None,
        related_id: str | None = None,
    ) -> Transaction:
        """
        Post a signed amount to an account.

        ``amount`` must already carry the sign its type requires (negative
        for withdrawals and payments).  Returns the stored transaction,
        whose ``balance_after`` is the account's new cached balance.

        TRANSFER is refused: both legs of a transfer are written together
        by transfer().
        """
        value = to_decimal(amount)
        transaction_type = TransactionType(transaction_type)
        if transaction_type is TransactionType.TRANSFER:
            raise UnpairedTransferError(str(account_id), str(value))
        validate_amount_sign(transaction_type, value)

        savepoint = self.session.begin_nested()
        try:
            row = self._lock_account(account_id)
            txn = self._post(
                row,
                value,
                transaction_type,
                description,
                transaction_date or self.clock.today(),
                related_id,
            )
            self.session.flush()
            savepoint.commit()
        except Exception:
            savepoint.rollback()
            raise

        with LogContext.bind(account_id=str(row.id)):
            logger.info("transaction_recorded", extra={
                "transaction_id": str(txn.id),
                "type": transaction_type.value,
                "amount": str(value),
                "balance_after": str(txn.balance_after),
            })
        return txn.to_dto()

    def deposit(
        self,
        account_id: RecordId,
        amount: Decimal | str | int,
        description: str = "",
        transaction_date: date | None = None,
    ) -> Transaction:
        return self.record_transaction(
            account_id,
            signed_amount(TransactionType.DEPOSIT, amount),
            TransactionType.DEPOSIT,
            description,
            transaction_date,
        )

    def withdraw(
        self,
        account_id: RecordId,
        amount: Decimal | str | int,
        description: str = "",
        transaction_date: date | None = None,
    ) -> Transaction:
        return self.record_transaction(
            account_id,
            signed_amount(TransactionType.WITHDRAWAL, amount),
            TransactionType.WITHDRAWAL,
            description,
            transaction_date,
        )

    def transfer(
        self,
        from_account_id: RecordId,
        to_account_id: RecordId,
        amount: Decimal | str | int,
        description: str = "",
        transfer_date: date | None = None,
    ) -> TransferResult:
        """
        Move ``amount`` between two accounts of the same currency.

        Both legs are written with the same date, timestamp and transfer
        reference inside one SAVEPOINT: either both persist or neither does.
        """
        value = to_decimal(amount)
        if value <= ZERO:
            raise NonPositiveAmountError(str(value))
        if str(from_account_id) == str(to_account_id):
            raise SameAccountTransferError(str(from_account_id))

        transfer_ref = str(uuid4())
        day = transfer_date or self.clock.today()

        savepoint = self.session.begin_nested()
        try:
            locked: dict[str, CashAccountModel] = {}
            for key in sorted((str(from_account_id), str(to_account_id))):
                locked[key] = self._lock_account(key)
            source = locked[str(from_account_id)]
            destination = locked[str(to_account_id)]

            plan = plan_transfer(
                source=source.to_dto(),
                destination=destination.to_dto(),
                amount=value,
                transfer_ref=transfer_ref,
            )
            outgoing = self._post(
                source,
                plan.source.amount.amount,
                TransactionType.TRANSFER,
                description or f"Transfer to {destination.name}",
                day,
                transfer_ref,
            )
            incoming = self._post(
                destination,
                plan.destination.amount.amount,
                TransactionType.TRANSFER,
                description or f"Transfer from {source.name}",
                day,
                transfer_ref,
            )
            self.session.flush()
            savepoint.commit()
        except Exception:
            savepoint.rollback()
            logger.warning("transfer_rolled_back", extra={
                "transfer_ref": transfer_ref,
                "from_account": str(from_account_id),
                "to_account": str(to_account_id),
                "amount": str(value),
            })
            raise

        logger.info("transfer_completed", extra={
            "transfer_ref": transfer_ref,
            "from_account": str(source.id),
            "to_account": str(destination.id),
            "amount": str(value),
            "currency": source.currency,
        })
        return TransferResult(
            transfer_ref=transfer_ref,
            outgoing=outgoing.to_dto(),
            incoming=incoming.to_dto(),
        )

    # -- deletion ---------------------------------------------------------------

    def delete_account(self, account_id: RecordId) -> bool:
        """
        Delete an account with no transactions.

        Returns False, without deleting anything, when any transaction
        references the account.

        Raises:
            AccountNotFoundError: unknown account id.
        """
        row = self._lock_account(account_id)
        count = self._count_transactions(row.id)
        if count > 0:
            logger.warning("account_delete_refused", extra={
                "account_id": str(row.id),
                "reason": AccountHasTransactionsError.code,
                "transaction_count": count,
            })
            return False

        self.session.delete(row)
        self.session.flush()
        logger.info("account_deleted", extra={"account_id": str(account_id)})
        return True

    def delete_account_or_raise(self, account_id: RecordId) -> None:
        """Like delete_account(), but raises AccountHasTransactionsError on refusal."""
        if not self.delete_account(account_id):
            key = as_uuid(account_id)
            raise AccountHasTransactionsError(str(account_id), self._count_transactions(key))

    # -- balance upkeep -----------------------------------------------------------

    def derived_balance(self, account_id: RecordId) -> Money:
        """Balance recomputed from the transaction log."""
        account = self.selector.get_account(account_id)
        if account is None:
            raise AccountNotFoundError(str(account_id))
        amounts = [t.amount for t in self.selector.list_transactions(account_id=account.id)]
        return derive_balance(Money.of(account.opening_balance, account.currency), amounts)

    def verify_balance(self, account_id: RecordId) -> bool:
        """True when the cached balance equals the log-derived balance."""
        account = self.selector.get_account(account_id)
        if account is None:
            raise AccountNotFoundError(str(account_id))
        derived = self.derived_balance(account_id)
        ok = derived.amount == account.balance
        if not ok:
            logger.warning("account_balance_drift", extra={
                "account_id": str(account.id),
                "cached_balance": str(account.balance),
                "derived_balance": str(derived.amount),
            })
        return ok

    def rebuild_balance(self, account_id: RecordId) -> Account:
        """Reset the cached balance from the transaction log, under the row lock."""
        row = self._lock_account(account_id)
        derived = self.derived_balance(row.id)
        previous = row.balance
        row.balance = derived.amount
        self.session.flush()

        logger.info("account_balance_rebuilt", extra={
            "account_id": str(row.id),
            "previous_balance": str(previous),
            "balance": str(derived.amount),
        })
        return row.to_dto()
