"""
Typed exception hierarchy for the ledger kernel.

Every error a caller may want to react to has its own class, a
machine-readable ``code`` class attribute, and structured attributes
carrying the values involved.  Callers catch by type, never by message.

Hierarchy::

    LedgerError (base)
    |
    +-- ValidationError
    |   +-- NonPositiveAmountError
    |   +-- AmountSignError
    |   +-- MissingCounterpartError
    |   +-- InvalidPeriodError
    |   +-- SameAccountTransferError
    |   +-- UnpairedTransferError
    |
    +-- NotFoundError
    |   +-- CustomerNotFoundError
    |   +-- AccountNotFoundError
    |   +-- CheckNotFoundError
    |   +-- InvoiceNotFoundError
    |   +-- ProductNotFoundError
    |
    +-- CurrencyError
    |   +-- InvalidCurrencyError
    |   +-- CurrencyMismatchError
    |   +-- ExchangeRateNotFoundError
    |   +-- InvalidExchangeRateError
    |   +-- BaseCurrencyRateError
    |
    +-- CheckError
    |   +-- CheckTransitionError
    |
    +-- ReferentialIntegrityError
    |   +-- AccountHasTransactionsError
    |   +-- CustomerHasRecordsError
    |   +-- ProductReferencedError
    |
    +-- RateFeedError

Error codes
-----------

Category        | Code                        | When raised
----------------|-----------------------------|-----------------------------------------
Validation      | NON_POSITIVE_AMOUNT         | Amount is zero or negative
                | AMOUNT_SIGN_MISMATCH        | Signed amount contradicts transaction type
                | MISSING_COUNTERPART         | Account / check details missing for method
                | INVALID_PERIOD              | Period start is after period end
                | SAME_ACCOUNT_TRANSFER       | Transfer source equals destination
----------------|-----------------------------|-----------------------------------------
Not found       | CUSTOMER_NOT_FOUND          | Customer id doesn't exist
                | ACCOUNT_NOT_FOUND           | Account id doesn't exist
                | CHECK_NOT_FOUND             | Check id doesn't exist
                | INVOICE_NOT_FOUND           | Invoice id doesn't exist
                | PRODUCT_NOT_FOUND           | Product id doesn't exist
----------------|-----------------------------|-----------------------------------------
Currency        | INVALID_CURRENCY            | Not a valid ISO 4217 code
                | CURRENCY_MISMATCH           | Cross-currency transfer or posting
                | EXCHANGE_RATE_NOT_FOUND     | Non-base record without a rate
                | INVALID_EXCHANGE_RATE       | Rate is zero or negative
                | BASE_CURRENCY_RATE          | Base-currency record with rate != 1
----------------|-----------------------------|-----------------------------------------
Check           | CHECK_TRANSITION_REJECTED   | Transition out of a terminal state
----------------|-----------------------------|-----------------------------------------
Integrity       | ACCOUNT_HAS_TRANSACTIONS    | Deleting an account with history
                | CUSTOMER_HAS_RECORDS        | Deleting a customer with documents
                | PRODUCT_REFERENCED          | Deleting a product sold on invoices
----------------|-----------------------------|-----------------------------------------
Rates           | RATE_FEED_INVALID           | Exchange-rate feed missing or malformed

Deletion APIs return ``False`` on referential-integrity failures; the
``ReferentialIntegrityError`` family is raised only by their ``*_or_raise``
counterparts.
"""


class LedgerError(Exception):
    """
    Base exception for all ledger errors.

    All subclasses carry a ``code`` class attribute for machine-readable
    identification.
    """

    code: str = "LEDGER_ERROR"


# Validation


class ValidationError(LedgerError):
    """Base exception for input rejected before any state mutation."""

    code: str = "VALIDATION_ERROR"


class NonPositiveAmountError(ValidationError):
    """Amount must be strictly positive."""

    code: str = "NON_POSITIVE_AMOUNT"

    def __init__(self, amount: str, field: str = "amount"):
        self.amount = amount
        self.field = field
        super().__init__(f"{field} must be positive, got {amount}")


class AmountSignError(ValidationError):
    """Signed amount does not match the transaction type."""

    code: str = "AMOUNT_SIGN_MISMATCH"

    def __init__(self, transaction_type: str, amount: str):
        self.transaction_type = transaction_type
        self.amount = amount
        super().__init__(
            f"Amount {amount} has the wrong sign for a {transaction_type} transaction"
        )


class MissingCounterpartError(ValidationError):
    """Required counterpart (account or check details) is missing."""

    code: str = "MISSING_COUNTERPART"

    def __init__(self, method: str, missing_fields: list[str]):
        self.method = method
        self.missing_fields = missing_fields
        super().__init__(
            f"{method} collection is missing: {', '.join(missing_fields)}"
        )


class InvalidPeriodError(ValidationError):
    """Period start date is after its end date."""

    code: str = "INVALID_PERIOD"

    def __init__(self, period_start: str, period_end: str):
        self.period_start = period_start
        self.period_end = period_end
        super().__init__(f"Invalid period: {period_start} is after {period_end}")


class SameAccountTransferError(ValidationError):
    """Transfer source and destination are the same account."""

    code: str = "SAME_ACCOUNT_TRANSFER"

    def __init__(self, account_id: str):
        self.account_id = account_id
        super().__init__(f"Cannot transfer from account {account_id} to itself")


class UnpairedTransferError(ValidationError):
    """A single transfer leg was posted outside transfer()."""

    code: str = "UNPAIRED_TRANSFER"

    def __init__(self, account_id: str, amount: str):
        self.account_id = account_id
        self.amount = amount
        super().__init__(
            f"Transfer legs are written in pairs by transfer(); refused {amount} on account {account_id}"
        )


# Not found


class NotFoundError(LedgerError):
    """Base exception for missing records."""

    code: str = "NOT_FOUND"


class CustomerNotFoundError(NotFoundError):
    """Customer with given ID was not found."""

    code: str = "CUSTOMER_NOT_FOUND"

    def __init__(self, customer_id: str):
        self.customer_id = customer_id
        super().__init__(f"Customer not found: {customer_id}")


class AccountNotFoundError(NotFoundError):
    """Account with given ID was not found."""

    code: str = "ACCOUNT_NOT_FOUND"

    def __init__(self, account_id: str):
        self.account_id = account_id
        super().__init__(f"Account not found: {account_id}")


class CheckNotFoundError(NotFoundError):
    """Check with given ID was not found."""

    code: str = "CHECK_NOT_FOUND"

    def __init__(self, check_id: str):
        self.check_id = check_id
        super().__init__(f"Check not found: {check_id}")


class InvoiceNotFoundError(NotFoundError):
    """Invoice with given ID was not found."""

    code: str = "INVOICE_NOT_FOUND"

    def __init__(self, invoice_id: str):
        self.invoice_id = invoice_id
        super().__init__(f"Invoice not found: {invoice_id}")


class ProductNotFoundError(NotFoundError):
    """Product with given ID was not found."""

    code: str = "PRODUCT_NOT_FOUND"

    def __init__(self, product_id: str):
        self.product_id = product_id
        super().__init__(f"Product not found: {product_id}")


# Currency


class CurrencyError(LedgerError):
    """Base exception for currency and exchange-rate errors."""

    code: str = "CURRENCY_ERROR"


class InvalidCurrencyError(CurrencyError):
    """Currency code is not a valid ISO 4217 code."""

    code: str = "INVALID_CURRENCY"

    def __init__(self, currency: str):
        self.currency = currency
        super().__init__(f"Invalid ISO 4217 currency code: {currency}")


class CurrencyMismatchError(CurrencyError):
    """Two amounts that must share a currency do not."""

    code: str = "CURRENCY_MISMATCH"

    def __init__(self, expected: str, received: str, operation: str = ""):
        self.expected = expected
        self.received = received
        self.operation = operation
        suffix = f" in {operation}" if operation else ""
        super().__init__(f"Currency mismatch{suffix}: expected {expected}, got {received}")


class ExchangeRateNotFoundError(CurrencyError):
    """No exchange rate available for a non-base currency."""

    code: str = "EXCHANGE_RATE_NOT_FOUND"

    def __init__(self, currency: str, base_currency: str, record_id: str | None = None):
        self.currency = currency
        self.base_currency = base_currency
        self.record_id = record_id
        where = f" on record {record_id}" if record_id else ""
        super().__init__(
            f"No exchange rate {currency}->{base_currency}{where}"
        )


class InvalidExchangeRateError(CurrencyError):
    """Exchange rate is zero, negative or not a number."""

    code: str = "INVALID_EXCHANGE_RATE"

    def __init__(self, rate: str, currency: str):
        self.rate = rate
        self.currency = currency
        super().__init__(f"Invalid exchange rate {rate} for {currency}")


class BaseCurrencyRateError(CurrencyError):
    """A base-currency record carries a rate other than exactly 1."""

    code: str = "BASE_CURRENCY_RATE"

    def __init__(self, rate: str, base_currency: str):
        self.rate = rate
        self.base_currency = base_currency
        super().__init__(
            f"Records in base currency {base_currency} must use rate 1, got {rate}"
        )


# Checks


class CheckError(LedgerError):
    """Base exception for check lifecycle errors."""

    code: str = "CHECK_ERROR"


class CheckTransitionError(CheckError):
    """Requested check status change is not permitted."""

    code: str = "CHECK_TRANSITION_REJECTED"

    def __init__(self, check_id: str, current_status: str, requested_status: str):
        self.check_id = check_id
        self.current_status = current_status
        self.requested_status = requested_status
        super().__init__(
            f"Check {check_id} cannot move from {current_status} to {requested_status}"
        )


# Referential integrity


class ReferentialIntegrityError(LedgerError):
    """Base exception for deletes blocked by dependent records."""

    code: str = "REFERENTIAL_INTEGRITY"


class AccountHasTransactionsError(ReferentialIntegrityError):
    """Account cannot be deleted while transactions reference it."""

    code: str = "ACCOUNT_HAS_TRANSACTIONS"

    def __init__(self, account_id: str, transaction_count: int):
        self.account_id = account_id
        self.transaction_count = transaction_count
        super().__init__(
            f"Account {account_id} has {transaction_count} dependent transaction(s)"
        )


class CustomerHasRecordsError(ReferentialIntegrityError):
    """Customer cannot be deleted while it owns ledger records."""

    code: str = "CUSTOMER_HAS_RECORDS"

    def __init__(self, customer_id: str, dependents: dict[str, int]):
        self.customer_id = customer_id
        self.dependents = dependents
        detail = ", ".join(f"{k}={v}" for k, v in sorted(dependents.items()))
        super().__init__(f"Customer {customer_id} has dependent records: {detail}")


class ProductReferencedError(ReferentialIntegrityError):
    """Product cannot be deleted while invoice lines reference it."""

    code: str = "PRODUCT_REFERENCED"

    def __init__(self, product_id: str, line_count: int):
        self.product_id = product_id
        self.line_count = line_count
        super().__init__(
            f"Product {product_id} is referenced by {line_count} invoice line(s)"
        )


# Rate feeds


class RateFeedError(LedgerError):
    """Exchange-rate feed is missing data or malformed."""

    code: str = "RATE_FEED_INVALID"

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Exchange-rate feed rejected: {reason}")
