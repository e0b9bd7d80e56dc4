"""
Tests for the operational reports.

Covers:
- Customer balances
- Overdue invoices
- Sales by customer
- Stock valuation
- Cash flow by account
"""

from datetime import date
from decimal import Decimal

import pytest

from ledger_kernel.domain.rates import RateSnapshot
from ledger_kernel.domain.records import (
    Account,
    AccountKind,
    Customer,
    InvoiceStatus,
    Product,
    Transaction,
    TransactionType,
)
from ledger_kernel.domain.values import Money
from ledger_kernel.exceptions import ExchangeRateNotFoundError, InvalidPeriodError
from ledger_engines.reports import (
    cash_flow_by_account,
    customer_balances,
    overdue_invoices,
    sales_by_customer,
    stock_valuation,
)
from ledger_engines.statement import build_statement
from tests.conftest import make_collection, make_invoice


CUSTOMERS = [
    Customer(id="C1", name="Acme Ltd", city="Istanbul"),
    Customer(id="C2", name="Beta AS", city="Izmir"),
    Customer(id="C3", name="Quiet Co"),
]


class TestCustomerBalances:

    def setup_method(self):
        self.invoices = [
            make_invoice(customer_id="C1", total="1000"),
            make_invoice(customer_id="C2", total="10", currency="USD", rate="30"),
        ]
        self.collections = [make_collection(customer_id="C1", amount="400")]

    def _rows(self):
        return customer_balances(
            customers=CUSTOMERS,
            invoices=self.invoices,
            collections=self.collections,
            base_currency="TRY",
        )

    def test_debt_credit_balance(self):
        acme, beta, quiet = self._rows()

        assert acme.debt == Money.of("1000", "TRY")
        assert acme.credit == Money.of("400", "TRY")
        assert acme.balance == Money.of("600", "TRY")
        assert beta.balance == Money.of("300", "TRY")
        assert quiet.balance.is_zero

    def test_matches_statement_balance(self):
        statement = build_statement(
            customer_id="C1",
            invoices=self.invoices,
            collections=self.collections,
            base_currency="TRY",
        )

        assert self._rows()[0].balance == statement.balance


class TestOverdueInvoices:

    def _rows(self, invoices, grace_days=0):
        return overdue_invoices(
            invoices=invoices, customers=CUSTOMERS, as_of=date(2024, 3, 1), grace_days=grace_days,
        )

    def test_days_overdue(self):
        rows = self._rows([make_invoice(customer_id="C1", due_date=date(2024, 2, 20))])

        (row,) = rows
        assert row.days_overdue == 10
        assert row.customer_name == "Acme Ltd"
        assert row.amount == Money.of("1000", "TRY")

    def test_due_today_not_overdue(self):
        assert self._rows([make_invoice(due_date=date(2024, 3, 1))]) == ()

    def test_paid_and_cancelled_excluded(self):
        rows = self._rows([
            make_invoice(due_date=date(2024, 1, 1), status=InvoiceStatus.PAID),
            make_invoice(due_date=date(2024, 1, 1), status=InvoiceStatus.CANCELLED),
            make_invoice(due_date=None),
        ])

        assert rows == ()

    def test_grace_days(self):
        invoices = [make_invoice(due_date=date(2024, 2, 25))]

        assert self._rows(invoices, grace_days=5) == ()
        assert len(self._rows(invoices, grace_days=4)) == 1

    def test_oldest_first(self):
        rows = self._rows([
            make_invoice(invoice_id="new", due_date=date(2024, 2, 20)),
            make_invoice(invoice_id="old", due_date=date(2024, 1, 20)),
        ])

        assert [r.invoice_id for r in rows] == ["old", "new"]


class TestSalesByCustomer:

    def test_totals_descending(self):
        rows = sales_by_customer(
            invoices=[
                make_invoice(customer_id="C1", total="100", issue_date=date(2024, 1, 5)),
                make_invoice(customer_id="C1", total="50", issue_date=date(2024, 1, 6)),
                make_invoice(customer_id="C2", total="10", currency="USD", rate="30",
                             issue_date=date(2024, 1, 7)),
                make_invoice(customer_id="C2", total="999", issue_date=date(2024, 3, 1)),
            ],
            customers=CUSTOMERS,
            start=date(2024, 1, 1),
            end=date(2024, 1, 31),
            base_currency="TRY",
        )

        assert [(r.customer_name, r.total.amount, r.invoice_count) for r in rows] == [
            ("Beta AS", Decimal("300"), 1),
            ("Acme Ltd", Decimal("150"), 2),
        ]

    def test_inverted_range(self):
        with pytest.raises(InvalidPeriodError):
            sales_by_customer(
                invoices=[], customers=CUSTOMERS,
                start=date(2024, 2, 1), end=date(2024, 1, 1), base_currency="TRY",
            )


class TestStockValuation:

    def test_value_at_current_cost(self):
        rows = stock_valuation(
            products=[
                Product(id="P1", name="Widget", cost=Decimal("5"), stock=Decimal("10")),
                Product(id="P2", name="Gadget", cost=Decimal("2"), cost_currency="USD",
                        stock=Decimal("3")),
            ],
            rates=RateSnapshot("TRY", date(2024, 3, 1), {"USD": Decimal("31")}),
        )

        assert [r.value_base for r in rows] == [Money.of("50", "TRY"), Money.of("186", "TRY")]

    def test_missing_rate(self):
        with pytest.raises(ExchangeRateNotFoundError):
            stock_valuation(
                products=[Product(id="P1", name="X", cost=Decimal("1"), cost_currency="EUR")],
                rates=RateSnapshot("TRY", date(2024, 3, 1)),
            )


class TestCashFlow:

    def test_inflow_outflow(self):
        account = Account(id="A1", name="Main", kind=AccountKind.BANK, currency="TRY",
                          balance=Decimal("650"))
        transactions = [
            Transaction(id="T1", account_id="A1", transaction_date=date(2024, 1, 5),
                        amount=Decimal("1000"), type=TransactionType.DEPOSIT,
                        description="", balance_after=Decimal("1000")),
            Transaction(id="T2", account_id="A1", transaction_date=date(2024, 1, 6),
                        amount=Decimal("-350"), type=TransactionType.WITHDRAWAL,
                        description="", balance_after=Decimal("650")),
            Transaction(id="T3", account_id="A1", transaction_date=date(2024, 2, 6),
                        amount=Decimal("-1"), type=TransactionType.WITHDRAWAL,
                        description="", balance_after=Decimal("649")),
        ]

        (flow,) = cash_flow_by_account(
            accounts=[account], transactions=transactions,
            start=date(2024, 1, 1), end=date(2024, 1, 31),
        )

        assert flow.inflow == Money.of("1000", "TRY")
        assert flow.outflow == Money.of("350", "TRY")
        assert flow.net_flow == Money.of("650", "TRY")
        assert flow.balance == Money.of("650", "TRY")
