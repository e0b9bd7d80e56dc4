"""Tests for ReconciliationService: stored reconciliation letters."""

from datetime import date
from decimal import Decimal

import pytest

from ledger_kernel.domain.records import AgreementStatus, CollectionMethod, LineItem
from ledger_kernel.exceptions import CustomerNotFoundError, InvalidPeriodError


@pytest.fixture
def history(collection_service, customer, try_account):
    """I1 1000 TRY on 2024-01-10 and P1 400 TRY on 2024-02-01."""
    invoice = collection_service.record_invoice(
        customer.id, date(2024, 1, 10), "TRY",
        [LineItem(product_id=None, product_name="Service", quantity=Decimal("1"),
                  unit_price=Decimal("1000"))],
    )
    collection_service.record_collection(
        customer.id, "400", "TRY", CollectionMethod.BANK,
        account_id=try_account.id, collection_date=date(2024, 2, 1), invoice_id=invoice.id,
    )
    return invoice


class TestRecordReconciliation:

    def test_stores_final_balance(self, reconciliation_service, customer, history):
        snapshot = reconciliation_service.record_reconciliation(
            customer.id, date(2024, 2, 1), date(2024, 2, 28), AgreementStatus.AGREED, note="ok",
        )

        assert snapshot.balance == Decimal("600")
        assert snapshot.status is AgreementStatus.AGREED
        assert snapshot.currency == "TRY"
        assert snapshot.note == "ok"

    def test_list_newest_first(self, reconciliation_service, deterministic_clock, customer, history):
        first = reconciliation_service.record_reconciliation(
            customer.id, date(2024, 1, 1), date(2024, 1, 31), AgreementStatus.AGREED,
        )
        deterministic_clock.advance(60)
        second = reconciliation_service.record_reconciliation(
            customer.id, date(2024, 2, 1), date(2024, 2, 29), AgreementStatus.NOT_AGREED,
        )

        rows = reconciliation_service.list_for_customer(customer.id)

        assert [r.id for r in rows] == [second.id, first.id]
        assert [r.balance for r in rows] == [Decimal("600"), Decimal("1000")]

    def test_unknown_customer(self, reconciliation_service):
        with pytest.raises(CustomerNotFoundError):
            reconciliation_service.record_reconciliation(
                "77777777-7777-7777-7777-777777777777",
                date(2024, 1, 1), date(2024, 1, 31), AgreementStatus.AGREED,
            )

    def test_inverted_period(self, reconciliation_service, customer):
        with pytest.raises(InvalidPeriodError):
            reconciliation_service.record_reconciliation(
                customer.id, date(2024, 2, 1), date(2024, 1, 1), AgreementStatus.AGREED,
            )
