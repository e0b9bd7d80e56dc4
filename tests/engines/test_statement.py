"""
Tests for the statement builder.

Covers:
- The I1/P1 end-to-end scenario
- Running balances with exact decimal arithmetic
- Ordering and tie-breaks
- Multi-currency conversion with frozen rates
- Edge cases (empty input, other customers, bad records)
"""

from datetime import date, datetime, timezone
from decimal import Decimal

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from ledger_kernel.domain.records import Customer, EntryKind
from ledger_kernel.domain.values import Money
from ledger_kernel.exceptions import BaseCurrencyRateError, ExchangeRateNotFoundError
from ledger_engines.statement import build_statement, project_entry
from tests.conftest import make_collection, make_invoice


def _statement(invoices=(), collections=(), customer_id="C1", base="TRY"):
    return build_statement(
        customer_id=customer_id,
        invoices=invoices,
        collections=collections,
        base_currency=base,
    )


class TestEndToEndScenario:
    """One invoice and one partial collection."""

    def setup_method(self):
        self.invoice = make_invoice(invoice_id="I1", issue_date=date(2024, 1, 10), total="1000")
        self.collection = make_collection(
            collection_id="P1", collection_date=date(2024, 2, 1), amount="400",
        )

    def test_entries_and_balances(self):
        """I1 then P1 with balances 1000 and 600."""
        statement = _statement([self.invoice], [self.collection])

        assert [line.entry_id for line in statement.entries] == ["I1", "P1"]
        assert [line.base_effect.amount for line in statement.entries] == [
            Decimal("1000"), Decimal("-400"),
        ]
        assert [line.balance.amount for line in statement.entries] == [
            Decimal("1000"), Decimal("600"),
        ]
        assert statement.balance == Money.of("600", "TRY")

    def test_debit_and_credit_columns(self):
        statement = _statement([self.invoice], [self.collection])
        invoice_line, collection_line = statement.entries

        assert invoice_line.debit == Money.of("1000", "TRY")
        assert invoice_line.credit.is_zero
        assert collection_line.credit == Money.of("400", "TRY")
        assert collection_line.debit.is_zero

    def test_totals(self):
        statement = _statement([self.invoice], [self.collection])

        assert statement.total_debit_base == Money.of("1000", "TRY")
        assert statement.total_credit_base == Money.of("400", "TRY")

    def test_balance_as_of(self):
        statement = _statement([self.invoice], [self.collection])

        assert statement.balance_as_of(date(2024, 1, 9)).is_zero
        assert statement.balance_as_of(date(2024, 1, 31)) == Money.of("1000", "TRY")
        assert statement.balance_as_of(date(2024, 2, 1)) == Money.of("600", "TRY")

    def test_descriptions(self):
        statement = _statement([self.invoice], [self.collection])

        assert statement.entries[0].description == "Sales invoice I1"
        assert statement.entries[1].description == "Collection"


class TestRunningBalance:
    """Running balances are exact."""

    def test_known_sequence(self):
        """Effects +100, -40, +25 give balances 100, 60, 85."""
        statement = _statement(
            invoices=[
                make_invoice(issue_date=date(2024, 1, 1), total="100"),
                make_invoice(issue_date=date(2024, 1, 3), total="25"),
            ],
            collections=[make_collection(collection_date=date(2024, 1, 2), amount="40")],
        )

        assert [line.balance.amount for line in statement.entries] == [
            Decimal("100"), Decimal("60"), Decimal("85"),
        ]

    def test_no_float_drift(self):
        """Ten collections of 0.1 against 1.0 leave exactly zero."""
        collections = [
            make_collection(collection_date=date(2024, 1, 2), amount="0.1") for _ in range(10)
        ]
        statement = _statement([make_invoice(issue_date=date(2024, 1, 1), total="1.0")], collections)

        assert statement.balance.amount == Decimal("0")

    @given(
        st.lists(
            st.decimals(
                min_value=Decimal("0.01"),
                max_value=Decimal("1000000"),
                places=2,
                allow_nan=False,
                allow_infinity=False,
            ),
            min_size=1,
            max_size=30,
        )
    )
    @settings(max_examples=50, deadline=None)
    def test_final_balance_equals_sum_of_effects(self, amounts):
        """The last balance is exactly invoiced minus collected."""
        invoices = [
            make_invoice(issue_date=date(2024, 1, 1 + i % 28), total=str(a))
            for i, a in enumerate(amounts) if i % 2 == 0
        ]
        collections = [
            make_collection(collection_date=date(2024, 1, 1 + i % 28), amount=str(a))
            for i, a in enumerate(amounts) if i % 2 == 1
        ]
        statement = _statement(invoices, collections)

        expected = sum(
            (a if i % 2 == 0 else -a for i, a in enumerate(amounts)), Decimal("0"),
        )
        assert statement.balance.amount == expected
        running = Decimal("0")
        for line in statement.entries:
            running += line.base_effect.amount
            assert line.balance.amount == running


class TestOrdering:
    """Deterministic ledger order."""

    def test_sorted_by_date(self):
        statement = _statement(
            invoices=[make_invoice(invoice_id="late", issue_date=date(2024, 3, 1))],
            collections=[make_collection(collection_id="early", collection_date=date(2024, 1, 1))],
        )

        assert [line.entry_id for line in statement.entries] == ["early", "late"]

    def test_same_day_ordered_by_created_at(self):
        stamp = datetime(2024, 1, 5, 10, 0, tzinfo=timezone.utc)
        statement = _statement(
            invoices=[make_invoice(
                invoice_id="I", issue_date=date(2024, 1, 5),
                created_at=stamp.replace(hour=11),
            )],
            collections=[make_collection(
                collection_id="P", collection_date=date(2024, 1, 5), created_at=stamp,
            )],
        )

        assert [line.entry_id for line in statement.entries] == ["P", "I"]

    def test_missing_created_at_sorts_first(self):
        statement = _statement(
            invoices=[make_invoice(
                invoice_id="stamped", issue_date=date(2024, 1, 5),
                created_at=datetime(2024, 1, 5, 8, 0, tzinfo=timezone.utc),
            )],
            collections=[make_collection(
                collection_id="unstamped", collection_date=date(2024, 1, 5),
            )],
        )

        assert [line.entry_id for line in statement.entries] == ["unstamped", "stamped"]

    def test_invoice_before_collection_on_full_tie(self):
        statement = _statement(
            invoices=[make_invoice(invoice_id="zzz", issue_date=date(2024, 1, 5))],
            collections=[make_collection(collection_id="aaa", collection_date=date(2024, 1, 5))],
        )

        assert [line.kind for line in statement.entries] == [EntryKind.INVOICE, EntryKind.COLLECTION]

    def test_id_breaks_remaining_ties(self):
        statement = _statement(
            invoices=[
                make_invoice(invoice_id="b", issue_date=date(2024, 1, 5)),
                make_invoice(invoice_id="a", issue_date=date(2024, 1, 5)),
            ],
        )

        assert [line.entry_id for line in statement.entries] == ["a", "b"]

    def test_input_order_does_not_matter(self):
        invoices = [
            make_invoice(invoice_id=f"I{i}", issue_date=date(2024, 1, 1 + i)) for i in range(5)
        ]

        forward = _statement(invoices)
        backward = _statement(list(reversed(invoices)))

        assert forward.entries == backward.entries


class TestMultiCurrency:
    """Conversion uses each record's own frozen rate."""

    def test_foreign_invoice_converted_with_its_rate(self):
        statement = _statement(
            invoices=[make_invoice(total="100", currency="USD", rate="30")],
            collections=[make_collection(amount="50", currency="EUR", rate="33")],
        )

        invoice_line, collection_line = statement.entries
        assert invoice_line.debit == Money.of("100", "USD")
        assert invoice_line.base_effect == Money.of("3000", "TRY")
        assert collection_line.base_effect == Money.of("-1650", "TRY")
        assert statement.balance == Money.of("1350", "TRY")

    def test_two_invoices_two_rates(self):
        """A later rate never rewrites an earlier record."""
        statement = _statement(
            invoices=[
                make_invoice(issue_date=date(2024, 1, 1), total="10", currency="USD", rate="30"),
                make_invoice(issue_date=date(2024, 2, 1), total="10", currency="USD", rate="32"),
            ],
        )

        assert [line.base_effect.amount for line in statement.entries] == [
            Decimal("300"), Decimal("320"),
        ]

    def test_base_record_with_wrong_rate_fails(self):
        with pytest.raises(BaseCurrencyRateError):
            _statement(invoices=[make_invoice(currency="TRY", rate="1.2")])

    def test_rate_belongs_to_base_currency(self):
        """In a USD statement a USD record must carry rate 1."""
        with pytest.raises(BaseCurrencyRateError):
            _statement(invoices=[make_invoice(currency="USD", rate="30")], base="USD")


class TestEdgeCases:
    """Empty input and foreign records."""

    def test_empty_statement(self):
        statement = _statement()

        assert statement.entries == ()
        assert statement.balance == Money.zero("TRY")
        assert statement.balance_as_of(date(2030, 1, 1)).is_zero

    def test_other_customers_ignored(self):
        statement = _statement(
            invoices=[make_invoice(customer_id="C1"), make_invoice(customer_id="C2", total="999")],
        )

        assert len(statement.entries) == 1
        assert statement.balance == Money.of("1000", "TRY")

    def test_entries_between(self):
        statement = _statement(
            invoices=[make_invoice(issue_date=date(2024, d, 1)) for d in (1, 2, 3)],
        )

        window = statement.entries_between(date(2024, 2, 1), date(2024, 2, 29))

        assert len(window) == 1
        assert window[0].entry_date == date(2024, 2, 1)

    def test_project_entry_rejects_other_records(self):
        with pytest.raises(TypeError):
            project_entry(Customer(id="C1", name="Acme"), "TRY")

    def test_collection_description_kept(self):
        statement = _statement(collections=[make_collection(description="Wire 123")])

        assert statement.entries[0].description == "Wire 123"

    def test_collection_links_invoice(self):
        statement = _statement(collections=[make_collection(invoice_id="I1")])

        assert statement.entries[0].document_id == "I1"


class TestTracing:
    """Engine trace emitted on every build."""

    def test_trace_logged(self, captured_logs):
        _statement([make_invoice()])

        traces = [r for r in captured_logs() if r["message"] == "LEDGER_ENGINE_TRACE"]
        assert traces
        assert traces[-1]["engine_name"] == "statement"
