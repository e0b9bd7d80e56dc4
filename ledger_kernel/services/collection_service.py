"""
CollectionService -- recording invoices and the payments that settle them.

Responsibility:
    Store sales invoices with their line items and frozen exchange rate,
    and record collections: validate the counterpart (account or check
    details), freeze the rate, create the Check or the account posting,
    write the Collection and move the linked invoice to PARTIAL_PAID/PAID.

Architecture position:
    Kernel > Services.  Settlement arithmetic is
    ledger_engines.settlement; account postings go through
    AccountLedgerService so they take the same row lock.

Invariants enforced:
    - Every validation runs before the first write.
    - The rate stored on a record is fixed at creation: either the explicit
      ``exchange_rate`` or the caller's RateSnapshot at that moment.  A
      later snapshot never touches existing rows.
    - A collection's side effects (check or posting, collection row,
      invoice status) are one SAVEPOINT: all or nothing.

Failure modes:
    - NonPositiveAmountError, MissingCounterpartError before any write.
    - CustomerNotFoundError / AccountNotFoundError / InvoiceNotFoundError /
      ProductNotFoundError for unknown references.
    - CurrencyMismatchError when a BANK/CASH collection's currency differs
      from its account's.
    - ExchangeRateNotFoundError when a non-base record has no rate.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date
from decimal import Decimal
from uuid import uuid4

from sqlalchemy.orm import Session

from ledger_kernel.domain.clock import Clock
from ledger_kernel.domain.currency import CurrencyRegistry
from ledger_kernel.domain.rates import RateSnapshot
from ledger_kernel.domain.records import (
    Collection,
    CollectionMethod,
    Invoice,
    InvoiceStatus,
    LineItem,
    RecordId,
    TransactionType,
)
from ledger_kernel.domain.values import ZERO, to_decimal, validate_frozen_rate
from ledger_kernel.exceptions import (
    AccountNotFoundError,
    CurrencyMismatchError,
    CustomerNotFoundError,
    ExchangeRateNotFoundError,
    InvoiceNotFoundError,
    MissingCounterpartError,
    NonPositiveAmountError,
    ProductNotFoundError,
)
from ledger_kernel.logging_config import LogContext, get_logger
from ledger_kernel.models.check import CheckModel
from ledger_kernel.models.collection import CollectionModel
from ledger_kernel.models.invoice import InvoiceLineModel, InvoiceModel
from ledger_kernel.selectors.base import as_uuid
from ledger_kernel.services.account_ledger_service import AccountLedgerService
from ledger_kernel.services.base import BaseService
from ledger_engines.settlement import settle_invoice

logger = get_logger("services.collection")

DEFAULT_TOLERANCE = Decimal("0.01")


class CollectionService(BaseService):
    """Writes invoices and collections for one base currency."""

    def __init__(
        self,
        session: Session,
        clock: Clock | None = None,
        base_currency: str = "TRY",
        settlement_tolerance: Decimal = DEFAULT_TOLERANCE,
    ):
        super().__init__(session, clock)
        self.base_currency = CurrencyRegistry.validate(base_currency)
        self.settlement_tolerance = settlement_tolerance

    # -- helpers ------------------------------------------------------------------

    def _freeze_rate(
        self,
        currency: str,
        exchange_rate: Decimal | str | int | None,
        rates: RateSnapshot | None,
    ) -> Decimal:
        """Pick the rate to store on a new record; never defaults silently."""
        if exchange_rate is None and rates is not None:
            if rates.base_currency != self.base_currency:
                raise CurrencyMismatchError(self.base_currency, rates.base_currency, "rate snapshot")
            exchange_rate = rates.rate_for(currency)
        if exchange_rate is None and currency != self.base_currency:
            raise ExchangeRateNotFoundError(currency, self.base_currency)
        return validate_frozen_rate(currency, exchange_rate, self.base_currency)

    def _require_customer(self, customer_id: RecordId):
        customer = self.selector.get_customer(customer_id)
        if customer is None:
            raise CustomerNotFoundError(str(customer_id))
        return customer

    # -- invoices -----------------------------------------------------------------

    def record_invoice(
        self,
        customer_id: RecordId,
        issue_date: date,
        currency: str,
        items: Iterable[LineItem],
        rates: RateSnapshot | None = None,
        exchange_rate: Decimal | str | int | None = None,
        due_date: date | None = None,
        status: InvoiceStatus = InvoiceStatus.INVOICED,
        total_amount: Decimal | str | int | None = None,
    ) -> Invoice:
        """
        Store a sales invoice.

        ``total_amount`` defaults to the sum of the lines' tax-inclusive
        totals; imported invoices may pass the printed total instead.
        """
        currency = CurrencyRegistry.validate(currency)
        customer = self._require_customer(customer_id)
        lines = tuple(items)
        for item in lines:
            if item.quantity <= ZERO:
                raise NonPositiveAmountError(str(item.quantity), "quantity")
            if item.product_id is not None and self.selector.get_product(item.product_id) is None:
                raise ProductNotFoundError(str(item.product_id))

        if total_amount is None:
            total = sum((item.gross_total for item in lines), ZERO)
        else:
            total = to_decimal(total_amount, "total_amount")
        if total <= ZERO:
            raise NonPositiveAmountError(str(total), "total_amount")
        rate = self._freeze_rate(currency, exchange_rate, rates)

        row = InvoiceModel(
            customer_id=customer.id,
            customer_name=customer.name,
            issue_date=issue_date,
            due_date=due_date,
            currency=currency,
            exchange_rate=rate,
            total_amount=total,
            status=InvoiceStatus(status).value,
            created_at=self.clock.now(),
        )
        for line_no, item in enumerate(lines, start=1):
            row.lines.append(
                InvoiceLineModel(
                    line_no=line_no,
                    product_id=as_uuid(item.product_id),
                    product_name=item.product_name,
                    sku=item.sku,
                    unit=item.unit,
                    quantity=item.quantity,
                    unit_price=item.unit_price,
                    discount=item.discount,
                    tax_rate=item.tax_rate,
                    line_total=item.line_total,
                )
            )
        self.session.add(row)
        self.session.flush()

        with LogContext.bind(customer_id=str(customer.id)):
            logger.info("invoice_recorded", extra={
                "invoice_id": str(row.id),
                "total_amount": str(total),
                "currency": currency,
                "exchange_rate": str(rate),
                "line_count": len(lines),
            })
        return row.to_dto()

    # -- collections --------------------------------------------------------------

    def record_collection(
        self,
        customer_id: RecordId,
        amount: Decimal | str | int,
        currency: str,
        method: CollectionMethod,
        rates: RateSnapshot | None = None,
        exchange_rate: Decimal | str | int | None = None,
        collection_date: date | None = None,
        invoice_id: RecordId | None = None,
        account_id: RecordId | None = None,
        check_number: str | None = None,
        bank_name: str | None = None,
        drawer: str | None = None,
        due_date: date | None = None,
        description: str = "",
    ) -> Collection:
        """
        Record a payment received from a customer.

        BANK and CASH collections are posted to ``account_id`` as a
        COLLECTION transaction.  CHECK collections create a PENDING check
        from the check details instead and touch no account.
        """
        value = to_decimal(amount)
        if value <= ZERO:
            raise NonPositiveAmountError(str(value))
        currency = CurrencyRegistry.validate(currency)
        method = CollectionMethod(method)
        customer = self._require_customer(customer_id)

        if method is CollectionMethod.CHECK:
            details = {
                "check_number": check_number,
                "bank_name": bank_name,
                "drawer": drawer,
                "due_date": due_date,
            }
            missing = [name for name, given in details.items() if not given]
            if missing:
                raise MissingCounterpartError(method.value, missing)
        else:
            if account_id is None:
                raise MissingCounterpartError(method.value, ["account_id"])
            account = self.selector.get_account(account_id)
            if account is None:
                raise AccountNotFoundError(str(account_id))
            if account.currency != currency:
                raise CurrencyMismatchError(account.currency, currency, "collection")

        invoice = None
        if invoice_id is not None:
            invoice = self.selector.get_invoice(invoice_id)
            if invoice is None or str(invoice.customer_id) != str(customer.id):
                raise InvoiceNotFoundError(str(invoice_id))

        rate = self._freeze_rate(currency, exchange_rate, rates)
        day = collection_date or self.clock.today()
        collection_id = uuid4()
        now = self.clock.now()

        savepoint = self.session.begin_nested()
        try:
            check_id = None
            if method is CollectionMethod.CHECK:
                check = CheckModel(
                    check_number=check_number,
                    bank_name=bank_name,
                    drawer=drawer,
                    amount=value,
                    currency=currency,
                    issue_date=day,
                    due_date=due_date,
                    customer_id=customer.id,
                    description=description,
                    created_at=now,
                )
                self.session.add(check)
                self.session.flush()
                check_id = check.id

            row = CollectionModel(
                id=collection_id,
                customer_id=customer.id,
                collection_date=day,
                amount=value,
                currency=currency,
                exchange_rate=rate,
                method=method.value,
                invoice_id=as_uuid(invoice.id) if invoice is not None else None,
                account_id=as_uuid(account_id) if method is not CollectionMethod.CHECK else None,
                check_id=check_id,
                description=description,
                created_at=now,
            )
            self.session.add(row)
            self.session.flush()

            if method is not CollectionMethod.CHECK:
                AccountLedgerService(self.session, self.clock).record_transaction(
                    account_id,
                    value,
                    TransactionType.COLLECTION,
                    description or f"Collection from {customer.name}",
                    day,
                    related_id=str(collection_id),
                )

            if invoice is not None:
                self._update_invoice_status(invoice)

            savepoint.commit()
        except Exception:
            savepoint.rollback()
            logger.warning("collection_rolled_back", extra={
                "customer_id": str(customer.id),
                "method": method.value,
                "amount": str(value),
            })
            raise

        with LogContext.bind(customer_id=str(customer.id)):
            logger.info("collection_recorded", extra={
                "collection_id": str(collection_id),
                "method": method.value,
                "amount": str(value),
                "currency": currency,
                "exchange_rate": str(rate),
                "invoice_id": str(invoice.id) if invoice is not None else None,
            })
        return row.to_dto()

    def _update_invoice_status(self, invoice: Invoice) -> None:
        settlement = settle_invoice(
            invoice,
            self.selector.list_collections(invoice_id=invoice.id),
            self.settlement_tolerance,
            self.base_currency,
        )
        if settlement.status is invoice.status:
            return
        row = self.session.get(InvoiceModel, as_uuid(invoice.id))
        row.status = settlement.status.value
        self.session.flush()
        logger.info("invoice_status_changed", extra={
            "invoice_id": str(invoice.id),
            "from_status": invoice.status.value,
            "to_status": settlement.status.value,
            "remaining_base": str(settlement.remaining_base),
        })
