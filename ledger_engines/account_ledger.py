"""
Module: ledger_engines.account_ledger
Responsibility:
    Balance arithmetic for cash boxes and bank accounts: sign rules per
    transaction type, balance-after computation, transfer planning and
    re-derivation of a balance from the transaction log.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    AccountLedgerService (kernel/services) persists what this module plans.

Invariants enforced:
    - DEPOSIT and COLLECTION amounts are positive; WITHDRAWAL and PAYMENT
      amounts are negative; a TRANSFER leg is non-zero.
    - A transfer is planned only between two distinct accounts of the same
      currency, for a positive amount; its two legs sum to zero.
    - derive_balance(opening, amounts) = opening + sum(amounts), exactly.

Failure modes:
    - AmountSignError, NonPositiveAmountError, SameAccountTransferError.
    - CurrencyMismatchError for a cross-currency transfer or posting.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

from ledger_kernel.domain.records import Account, RecordId, TransactionType
from ledger_kernel.domain.values import ZERO, Money, to_decimal
from ledger_kernel.exceptions import (
    AmountSignError,
    CurrencyMismatchError,
    NonPositiveAmountError,
    SameAccountTransferError,
)
from ledger_kernel.logging_config import get_logger
from ledger_engines.tracer import traced_engine

logger = get_logger("engines.account_ledger")


class AmountSign(str, Enum):
    POSITIVE = "positive"
    NEGATIVE = "negative"
    NONZERO = "nonzero"


SIGN_RULES: dict[TransactionType, AmountSign] = {
    TransactionType.DEPOSIT: AmountSign.POSITIVE,
    TransactionType.COLLECTION: AmountSign.POSITIVE,
    TransactionType.WITHDRAWAL: AmountSign.NEGATIVE,
    TransactionType.PAYMENT: AmountSign.NEGATIVE,
    TransactionType.TRANSFER: AmountSign.NONZERO,
}


def validate_amount_sign(transaction_type: TransactionType, amount: Decimal) -> None:
    """Raise AmountSignError unless ``amount`` has the sign its type requires."""
    rule = SIGN_RULES[transaction_type]
    if rule is AmountSign.POSITIVE:
        ok = amount > ZERO
    elif rule is AmountSign.NEGATIVE:
        ok = amount < ZERO
    else:
        ok = amount != ZERO
    if not ok:
        raise AmountSignError(transaction_type.value, str(amount))


def signed_amount(transaction_type: TransactionType, magnitude: Decimal | str | int) -> Decimal:
    """
    Turn a positive magnitude into the signed amount stored for its type.

    Withdrawals and payments are stored negative; deposits and collections
    positive.  Transfers have no single sign and are rejected here.
    """
    value = to_decimal(magnitude)
    if value <= ZERO:
        raise NonPositiveAmountError(str(value))
    rule = SIGN_RULES[transaction_type]
    if rule is AmountSign.NONZERO:
        raise AmountSignError(transaction_type.value, str(value))
    return -value if rule is AmountSign.NEGATIVE else value


def apply_transaction(
    balance: Money,
    amount: Money,
    transaction_type: TransactionType,
) -> Money:
    """
    Return the account balance after posting ``amount``.

    The amount must already carry its sign and the account's currency.
    """
    validate_amount_sign(transaction_type, amount.amount)
    if amount.currency != balance.currency:
        raise CurrencyMismatchError(balance.currency.code, amount.currency.code, "posting")
    return balance + amount


def derive_balance(opening_balance: Money, amounts: Iterable[Decimal]) -> Money:
    """Recompute a balance from the transaction log: opening + sum(amounts)."""
    total = opening_balance.amount
    for amount in amounts:
        total += amount
    return Money(amount=total, currency=opening_balance.currency)


@dataclass(frozen=True)
class TransferLeg:
    account_id: RecordId
    amount: Money  # signed: negative on the source, positive on the destination
    balance_after: Money


@dataclass(frozen=True)
class TransferPlan:
    """
    Both legs of an inter-account transfer.

    Guarantees:
        - source.amount + destination.amount == 0.
        - Both legs share ``transfer_ref``.
    """

    transfer_ref: str
    source: TransferLeg
    destination: TransferLeg

    @property
    def legs(self) -> tuple[TransferLeg, TransferLeg]:
        return (self.source, self.destination)


@traced_engine("account_transfer", "1.0", fingerprint_fields=("transfer_ref", "amount"))
def plan_transfer(
    *,
    source: Account,
    destination: Account,
    amount: Decimal | str | int,
    transfer_ref: str,
) -> TransferPlan:
    """
    Plan a same-currency transfer from ``source`` to ``destination``.

    Balances are taken from the account records passed in, so callers must
    pass freshly locked rows.
    """
    value = to_decimal(amount)
    if value <= ZERO:
        raise NonPositiveAmountError(str(value))
    if str(source.id) == str(destination.id):
        raise SameAccountTransferError(str(source.id))
    if source.currency != destination.currency:
        raise CurrencyMismatchError(source.currency, destination.currency, "transfer")

    currency = source.currency
    outgoing = Money.of(-value, currency)
    incoming = Money.of(value, currency)
    plan = TransferPlan(
        transfer_ref=transfer_ref,
        source=TransferLeg(
            account_id=source.id,
            amount=outgoing,
            balance_after=apply_transaction(Money.of(source.balance, currency), outgoing, TransactionType.TRANSFER),
        ),
        destination=TransferLeg(
            account_id=destination.id,
            amount=incoming,
            balance_after=apply_transaction(
                Money.of(destination.balance, currency), incoming, TransactionType.TRANSFER,
            ),
        ),
    )

    logger.debug("transfer_planned", extra={
        "transfer_ref": transfer_ref,
        "source_account": str(source.id),
        "destination_account": str(destination.id),
        "amount": str(value),
        "currency": currency,
    })
    return plan
