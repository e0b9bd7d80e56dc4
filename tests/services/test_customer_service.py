"""Tests for CustomerService: creation and deletion guarded by dependants."""

from datetime import date
from decimal import Decimal

import pytest

from ledger_kernel.domain.records import AgreementStatus, LineItem
from ledger_kernel.exceptions import CustomerHasRecordsError, CustomerNotFoundError


def _invoice(collection_service, customer_id):
    return collection_service.record_invoice(
        customer_id, date(2024, 1, 10), "TRY",
        [LineItem(product_id=None, product_name="Service", quantity=Decimal("1"),
                  unit_price=Decimal("100"))],
    )


class TestCreateCustomer:

    def test_fields_stored(self, customer_service):
        customer = customer_service.create_customer(
            name="Beta AS", tax_no="9876543210", tax_office="Kadikoy", city="Istanbul",
            is_legal_entity=False,
        )

        stored = customer_service.selector.get_customer(customer.id)
        assert stored.name == "Beta AS"
        assert stored.tax_office == "Kadikoy"
        assert stored.is_legal_entity is False


class TestDeleteCustomer:
    """Customers with ledger history are never deleted."""

    def test_delete_without_history(self, customer_service, customer):
        assert customer_service.delete_customer(customer.id) is True
        assert customer_service.selector.get_customer(customer.id) is None

    def test_delete_with_invoice_returns_false(self, customer_service, collection_service, customer):
        _invoice(collection_service, customer.id)

        assert customer_service.delete_customer(customer.id) is False
        assert customer_service.selector.get_customer(customer.id) is not None

    def test_delete_with_reconciliation_returns_false(
        self, customer_service, reconciliation_service, customer,
    ):
        reconciliation_service.record_reconciliation(
            customer.id, date(2024, 1, 1), date(2024, 1, 31), AgreementStatus.AGREED,
        )

        assert customer_service.delete_customer(customer.id) is False

    def test_refusal_logged(self, customer_service, collection_service, customer, captured_logs):
        _invoice(collection_service, customer.id)

        customer_service.delete_customer(customer.id)

        refused = [r for r in captured_logs() if r["message"] == "customer_delete_refused"]
        assert refused[-1]["dependants"] == {"invoices": 1}

    def test_delete_or_raise(self, customer_service, collection_service, customer):
        _invoice(collection_service, customer.id)

        with pytest.raises(CustomerHasRecordsError) as exc_info:
            customer_service.delete_customer_or_raise(customer.id)

        assert exc_info.value.dependents == {"invoices": 1}

    def test_unknown_customer(self, customer_service):
        with pytest.raises(CustomerNotFoundError):
            customer_service.delete_customer("66666666-6666-6666-6666-666666666666")
