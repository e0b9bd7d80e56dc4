"""
Module: ledger_engines
Responsibility:
    Package entrypoint that re-exports the public symbols of the pure ledger
    engines.  This is the import surface for ledger_services and the kernel
    services.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import ledger_kernel.domain (and sibling engine modules).
    MUST NOT import ledger_services or open a session.

Invariants enforced:
    - Purity: engines never read the clock.  "Today" and rate snapshots are
      explicit parameters supplied by services.
    - Decimal-only arithmetic; floats are refused at record construction.
    - Determinism: identical inputs always produce identical outputs.

Audit relevance:
    Engine entry points are wrapped by ``@traced_engine`` and emit one
    LEDGER_ENGINE_TRACE record per call.

Usage:
    from ledger_engines import build_statement, build_period_reconciliation
    from ledger_engines import CostProfitFilter, compute_cost_profit
"""

from ledger_kernel.logging_config import get_logger

logger = get_logger("engines")

from ledger_engines.account_ledger import (
    SIGN_RULES,
    AmountSign,
    TransferLeg,
    TransferPlan,
    apply_transaction,
    derive_balance,
    plan_transfer,
    signed_amount,
    validate_amount_sign,
)
from ledger_engines.check_lifecycle import (
    ALLOWED_TRANSITIONS,
    CheckPortfolioSummary,
    can_transition,
    summarize_checks,
    transition,
)
from ledger_engines.cost_profit import (
    DEFAULT_CATEGORY,
    CostProfitFilter,
    CostProfitLine,
    CostProfitReport,
    ProfitAggregate,
    compute_cost_profit,
)
from ledger_engines.period_reconciliation import (
    BalanceLabel,
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
from ledger_engines.settlement import InvoiceSettlement, settle_invoice
from ledger_engines.statement import (
    Statement,
    StatementLine,
    build_statement,
    project_entry,
)

__all__ = [
    # Account ledger
    "SIGN_RULES",
    "AmountSign",
    "TransferLeg",
    "TransferPlan",
    "apply_transaction",
    "derive_balance",
    "plan_transfer",
    "signed_amount",
    "validate_amount_sign",
    # Check lifecycle
    "ALLOWED_TRANSITIONS",
    "CheckPortfolioSummary",
    "can_transition",
    "summarize_checks",
    "transition",
    # Cost/profit
    "DEFAULT_CATEGORY",
    "CostProfitFilter",
    "CostProfitLine",
    "CostProfitReport",
    "ProfitAggregate",
    "compute_cost_profit",
    # Period reconciliation
    "BalanceLabel",
    "PeriodReconciliation",
    "build_period_reconciliation",
    # Reports
    "AccountFlow",
    "CustomerBalance",
    "CustomerSales",
    "OverdueInvoice",
    "StockValue",
    "cash_flow_by_account",
    "customer_balances",
    "overdue_invoices",
    "sales_by_customer",
    "stock_valuation",
    # Settlement
    "InvoiceSettlement",
    "settle_invoice",
    # Statement
    "Statement",
    "StatementLine",
    "build_statement",
    "project_entry",
]
