"""
ledger_services.customer_ledger -- Public façade over the customer ledger.

Responsibility:
    The one object UI, export and letter-rendering collaborators talk to.
    Read operations load records through LedgerSelector and run the pure
    engines; write operations delegate to the kernel services, which are
    constructed here exactly once and share this façade's session and
    clock.

Architecture position:
    Services -- orchestration over ledger_engines + ledger_kernel.  This is
    the only layer that reads ledger_config.

Invariants enforced:
    - Base currency, settlement tolerance and the overdue grace period come
      from the LedgerConfig passed in, never from ambient state.
    - Every read works on one snapshot fetched up front, so the statement,
      the period reconciliation and the balance report agree for the same
      records.
    - Historical figures use each record's frozen rate; only cost/profit and
      stock valuation take a caller-supplied RateSnapshot.

Failure modes:
    - CustomerNotFoundError for an unknown customer id.
    - InvalidPeriodError when a date range is inverted.
    - Whatever the delegated kernel service raises on writes.

Non-goals:
    - Does NOT commit.  The caller owns the transaction (see
      ``ledger_kernel.db.session_scope``).

Usage:
    with session_scope() as session:
        ledger = CustomerLedgerService(session, get_active_config())
        statement = ledger.build_statement(customer_id)
        statement.balance
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal

from sqlalchemy.orm import Session

from ledger_config import LedgerConfig, get_active_config
from ledger_kernel.domain.clock import Clock, SystemClock
from ledger_kernel.domain.rates import RateSnapshot
from ledger_kernel.domain.records import (
    Check,
    CheckStatus,
    LedgerSnapshot,
    RecordId,
    Transaction,
    TransactionType,
)
from ledger_kernel.exceptions import CustomerNotFoundError
from ledger_kernel.logging_config import LogContext, get_logger
from ledger_kernel.selectors.ledger_selector import LedgerSelector
from ledger_kernel.services.account_ledger_service import AccountLedgerService, TransferResult
from ledger_kernel.services.check_service import CheckService
from ledger_kernel.services.collection_service import CollectionService
from ledger_kernel.services.customer_service import CustomerService
from ledger_kernel.services.product_service import ProductService
from ledger_kernel.services.reconciliation_service import ReconciliationService
from ledger_engines.cost_profit import CostProfitFilter, CostProfitReport, compute_cost_profit
from ledger_engines.period_reconciliation import (
    PeriodReconciliation,
    build_period_reconciliation,
)
from ledger_engines.reports import (
    AccountFlow,
    CustomerBalance,
    CustomerSales,
    OverdueInvoice,
    StockValue,
    cash_flow_by_account,
    customer_balances,
    overdue_invoices,
    sales_by_customer,
    stock_valuation,
)
from ledger_engines.statement import Statement, build_statement

logger = get_logger("services.customer_ledger")


class CustomerLedgerService:
    """Façade over selectors, engines and kernel services.

    Contract:
        Receives a SQLAlchemy Session and an optional LedgerConfig and
        Clock.  Constructs every kernel service once, wired to the same
        session, clock and configured base currency, and exposes them as
        public attributes.

    Guarantees:
        - Read methods never write.
        - Write methods flush but do not commit.
    """

    def __init__(
        self,
        session: Session,
        config: LedgerConfig | None = None,
        clock: Clock | None = None,
    ) -> None:
        self._session = session
        self._config = config or get_active_config()
        self._clock = clock or SystemClock()
        self._selector = LedgerSelector(session)

        base = self._config.base_currency
        self.customers = CustomerService(session, self._clock)
        self.products = ProductService(session, self._clock)
        self.accounts = AccountLedgerService(session, self._clock)
        self.checks = CheckService(session, self._clock)
        self.collections = CollectionService(
            session,
            self._clock,
            base_currency=base,
            settlement_tolerance=self._config.settlement_tolerance,
        )
        self.reconciliations = ReconciliationService(session, self._clock, base_currency=base)

    @property
    def base_currency(self) -> str:
        return self._config.base_currency

    def _snapshot(self, customer_id: RecordId) -> LedgerSnapshot:
        snapshot = self._selector.load_snapshot(customer_id)
        if snapshot is None:
            raise CustomerNotFoundError(str(customer_id))
        return snapshot

    # -- customer reads ---------------------------------------------------------

    def build_statement(self, customer_id: RecordId) -> Statement:
        """Every invoice and collection of one customer with running balances."""
        snapshot = self._snapshot(customer_id)
        statement = build_statement(
            customer_id=snapshot.customer.id,
            invoices=snapshot.invoices,
            collections=snapshot.collections,
            base_currency=self.base_currency,
        )
        with LogContext.bind(customer_id=str(snapshot.customer.id)):
            logger.info("customer_statement_served", extra={
                "entry_count": len(statement.entries),
                "balance": str(statement.balance.amount),
            })
        return statement

    def build_period_reconciliation(
        self,
        customer_id: RecordId,
        period_start: date,
        period_end: date,
    ) -> PeriodReconciliation:
        """Brought-forward balance, in-period entries and final balance."""
        snapshot = self._snapshot(customer_id)
        result = build_period_reconciliation(
            customer_id=snapshot.customer.id,
            period_start=period_start,
            period_end=period_end,
            invoices=snapshot.invoices,
            collections=snapshot.collections,
            base_currency=self.base_currency,
        )
        with LogContext.bind(customer_id=str(snapshot.customer.id)):
            logger.info("period_reconciliation_served", extra={
                "period_start": period_start.isoformat(),
                "period_end": period_end.isoformat(),
                "brought_forward": str(result.brought_forward.amount),
                "final_balance": str(result.final_balance.amount),
            })
        return result

    # -- reports ----------------------------------------------------------------

    def compute_cost_profit(
        self,
        cost_filter: CostProfitFilter | None = None,
        cost_rates: RateSnapshot | None = None,
    ) -> CostProfitReport:
        """
        Revenue, cost and profit per invoice line at current product cost.

        ``cost_rates`` converts product costs held in other currencies; it
        is only required when such a product is actually sold.
        """
        cost_filter = cost_filter or CostProfitFilter()
        return compute_cost_profit(
            invoices=self._selector.list_invoices(
                customer_id=cost_filter.customer_id,
                start=cost_filter.start,
                end=cost_filter.end,
            ),
            products=self._selector.list_products(),
            cost_filter=cost_filter,
            base_currency=self.base_currency,
            cost_rates=cost_rates,
            customers=self._selector.list_customers(),
        )

    def customer_balances(self) -> tuple[CustomerBalance, ...]:
        return customer_balances(
            customers=self._selector.list_customers(),
            invoices=self._selector.list_invoices(),
            collections=self._selector.list_collections(),
            base_currency=self.base_currency,
        )

    def overdue_invoices(self, as_of: date | None = None) -> tuple[OverdueInvoice, ...]:
        """Unpaid invoices past due as of ``as_of`` (default: today)."""
        return overdue_invoices(
            invoices=self._selector.list_invoices(),
            customers=self._selector.list_customers(),
            as_of=as_of or self._clock.today(),
            grace_days=self._config.reports.overdue_grace_days,
        )

    def sales_by_customer(self, start: date, end: date) -> tuple[CustomerSales, ...]:
        return sales_by_customer(
            invoices=self._selector.list_invoices(start=start, end=end),
            customers=self._selector.list_customers(),
            start=start,
            end=end,
            base_currency=self.base_currency,
        )

    def stock_valuation(self, rates: RateSnapshot) -> tuple[StockValue, ...]:
        return stock_valuation(products=self._selector.list_products(), rates=rates)

    def cash_flow(self, start: date, end: date) -> tuple[AccountFlow, ...]:
        return cash_flow_by_account(
            accounts=self._selector.list_accounts(),
            transactions=self._selector.list_transactions(start=start, end=end),
            start=start,
            end=end,
        )

    # -- writes -----------------------------------------------------------------

    def record_transaction(
        self,
        account_id: RecordId,
        amount: Decimal | str | int,
        transaction_type: TransactionType,
        description: str = "",
        transaction_date: date | None = None,
    ) -> Transaction:
        """Post a single signed amount; transfers go through transfer()."""
        return self.accounts.record_transaction(
            account_id, amount, transaction_type, description, transaction_date,
        )

    def transfer(
        self,
        from_account_id: RecordId,
        to_account_id: RecordId,
        amount: Decimal | str | int,
        description: str = "",
        transfer_date: date | None = None,
    ) -> TransferResult:
        return self.accounts.transfer(
            from_account_id, to_account_id, amount, description, transfer_date,
        )

    def delete_account(self, account_id: RecordId) -> bool:
        return self.accounts.delete_account(account_id)

    def transition_check(self, check_id: RecordId, new_status: CheckStatus) -> Check:
        return self.checks.change_status(check_id, new_status)
