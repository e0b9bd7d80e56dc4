"""Fixtures shared by the database-backed service tests."""

import pytest

from ledger_kernel.domain.records import AccountKind
from ledger_kernel.services import (
    AccountLedgerService,
    CheckService,
    CollectionService,
    CustomerService,
    ProductService,
    ReconciliationService,
)


@pytest.fixture
def customer_service(session, deterministic_clock):
    return CustomerService(session, deterministic_clock)


@pytest.fixture
def product_service(session, deterministic_clock):
    return ProductService(session, deterministic_clock)


@pytest.fixture
def account_service(session, deterministic_clock):
    return AccountLedgerService(session, deterministic_clock)


@pytest.fixture
def check_service(session, deterministic_clock):
    return CheckService(session, deterministic_clock)


@pytest.fixture
def collection_service(session, deterministic_clock):
    return CollectionService(session, deterministic_clock, base_currency="TRY")


@pytest.fixture
def reconciliation_service(session, deterministic_clock):
    return ReconciliationService(session, deterministic_clock, base_currency="TRY")


@pytest.fixture
def customer(customer_service):
    return customer_service.create_customer(
        name="Acme Ltd", email="ap@acme.example", tax_no="1234567890", city="Istanbul",
    )


@pytest.fixture
def try_account(account_service):
    return account_service.open_account("Main bank", AccountKind.BANK, "TRY")


@pytest.fixture
def usd_account(account_service):
    return account_service.open_account("USD bank", AccountKind.BANK, "USD")
