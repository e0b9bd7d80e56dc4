"""
CheckService -- status changes for post-dated checks.

Responsibility:
    Apply check lifecycle transitions under a row lock and, when a check is
    collected into an account, post the matching COLLECTION transaction.

Architecture position:
    Kernel > Services.  The transition guard is
    ledger_engines.check_lifecycle; this class adds locking and I/O.

Invariants enforced:
    - Only PENDING checks change status; terminal states are final.
    - Two concurrent status changes serialize on the row lock, so exactly
      one of them wins and the other sees a terminal state.
    - Collecting into an account writes the status change and the account
      posting in one SAVEPOINT.

Failure modes:
    - CheckNotFoundError, CheckTransitionError.
    - CurrencyMismatchError when the deposit account's currency differs
      from the check's.
"""

from __future__ import annotations

from datetime import date

from sqlalchemy import select

from ledger_kernel.domain.records import Check, CheckStatus, RecordId, TransactionType
from ledger_kernel.exceptions import CheckNotFoundError, CurrencyMismatchError
from ledger_kernel.logging_config import get_logger
from ledger_kernel.models.check import CheckModel
from ledger_kernel.selectors.base import as_uuid
from ledger_kernel.services.account_ledger_service import AccountLedgerService
from ledger_kernel.services.base import BaseService
from ledger_engines.check_lifecycle import CheckPortfolioSummary, summarize_checks, transition

logger = get_logger("services.check")


class CheckService(BaseService):

    def _lock_check(self, check_id: RecordId) -> CheckModel:
        key = as_uuid(check_id)
        row = None
        if key is not None:
            row = self.session.execute(
                select(CheckModel)
                .where(CheckModel.id == key)
                .with_for_update()
                .execution_options(populate_existing=True)
            ).scalar_one_or_none()
        if row is None:
            raise CheckNotFoundError(str(check_id))
        return row

    def change_status(self, check_id: RecordId, new_status: CheckStatus) -> Check:
        """Move a check to ``new_status``; raises CheckTransitionError if not allowed."""
        row = self._lock_check(check_id)
        previous = row.status
        updated = transition(row.to_dto(), CheckStatus(new_status))
        row.status = updated.status.value
        self.session.flush()

        logger.info("check_status_changed", extra={
            "check_id": str(row.id),
            "check_number": row.check_number,
            "from_status": previous,
            "to_status": row.status,
        })
        return row.to_dto()

    def collect(
        self,
        check_id: RecordId,
        account_id: RecordId | None = None,
        collected_on: date | None = None,
    ) -> Check:
        """
        Mark a check as collected.

        With ``account_id``, the check amount is also posted to that account
        as a COLLECTION transaction referencing the check.
        """
        if account_id is None:
            return self.change_status(check_id, CheckStatus.COLLECTED)

        savepoint = self.session.begin_nested()
        try:
            row = self._lock_check(check_id)
            ledger = AccountLedgerService(self.session, self.clock)
            account = self.selector.get_account(account_id)
            if account is not None and account.currency != row.currency:
                raise CurrencyMismatchError(account.currency, row.currency, "check deposit")
            check = self.change_status(row.id, CheckStatus.COLLECTED)
            ledger.record_transaction(
                account_id,
                check.amount,
                TransactionType.COLLECTION,
                f"Check {check.check_number} ({check.bank_name})",
                collected_on,
                related_id=str(check.id),
            )
            savepoint.commit()
        except Exception:
            savepoint.rollback()
            raise
        return check

    def bounce(self, check_id: RecordId) -> Check:
        return self.change_status(check_id, CheckStatus.BOUNCED)

    def return_to_drawer(self, check_id: RecordId) -> Check:
        return self.change_status(check_id, CheckStatus.RETURNED)

    def portfolio(self) -> dict[str, CheckPortfolioSummary]:
        """Per-currency totals by status over every check on file."""
        return summarize_checks(self.selector.list_checks())
