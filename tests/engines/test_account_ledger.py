"""Tests for account ledger arithmetic: sign rules, postings and transfer plans."""

from decimal import Decimal

import pytest

from ledger_kernel.domain.records import Account, AccountKind, TransactionType
from ledger_kernel.domain.values import Money
from ledger_kernel.exceptions import (
    AmountSignError,
    CurrencyMismatchError,
    NonPositiveAmountError,
    SameAccountTransferError,
)
from ledger_engines.account_ledger import (
    apply_transaction,
    derive_balance,
    plan_transfer,
    signed_amount,
    validate_amount_sign,
)


def _account(account_id, currency="TRY", balance="0"):
    return Account(
        id=account_id,
        name=f"Account {account_id}",
        kind=AccountKind.BANK,
        currency=currency,
        balance=Decimal(balance),
    )


class TestSignRules:
    """Each transaction type has a required sign."""

    @pytest.mark.parametrize("txn_type", [TransactionType.DEPOSIT, TransactionType.COLLECTION])
    def test_inflows_must_be_positive(self, txn_type):
        validate_amount_sign(txn_type, Decimal("1"))
        with pytest.raises(AmountSignError):
            validate_amount_sign(txn_type, Decimal("-1"))

    @pytest.mark.parametrize("txn_type", [TransactionType.WITHDRAWAL, TransactionType.PAYMENT])
    def test_outflows_must_be_negative(self, txn_type):
        validate_amount_sign(txn_type, Decimal("-1"))
        with pytest.raises(AmountSignError):
            validate_amount_sign(txn_type, Decimal("1"))

    def test_transfer_must_be_nonzero(self):
        validate_amount_sign(TransactionType.TRANSFER, Decimal("-5"))
        with pytest.raises(AmountSignError):
            validate_amount_sign(TransactionType.TRANSFER, Decimal("0"))

    def test_signed_amount_for_withdrawal(self):
        assert signed_amount(TransactionType.WITHDRAWAL, "25") == Decimal("-25")

    def test_signed_amount_rejects_non_positive(self):
        with pytest.raises(NonPositiveAmountError):
            signed_amount(TransactionType.DEPOSIT, "0")

    def test_signed_amount_rejects_transfer(self):
        with pytest.raises(AmountSignError):
            signed_amount(TransactionType.TRANSFER, "10")


class TestPostingArithmetic:

    def test_apply_transaction(self):
        after = apply_transaction(
            Money.of("100", "TRY"), Money.of("-30", "TRY"), TransactionType.WITHDRAWAL,
        )

        assert after == Money.of("70", "TRY")

    def test_apply_rejects_currency_mismatch(self):
        with pytest.raises(CurrencyMismatchError):
            apply_transaction(Money.of("100", "TRY"), Money.of("5", "USD"), TransactionType.DEPOSIT)

    def test_derive_balance(self):
        """Opening balance plus every signed amount."""
        balance = derive_balance(
            Money.of("50", "EUR"), [Decimal("100"), Decimal("-40"), Decimal("25")],
        )

        assert balance == Money.of("135", "EUR")


class TestPlanTransfer:
    """Two equal and opposite legs."""

    def test_legs(self):
        plan = plan_transfer(
            source=_account("A", balance="500"),
            destination=_account("B", balance="20"),
            amount=Decimal("100"),
            transfer_ref="T1",
        )

        assert plan.source.amount == Money.of("-100", "TRY")
        assert plan.destination.amount == Money.of("100", "TRY")
        assert plan.source.balance_after == Money.of("400", "TRY")
        assert plan.destination.balance_after == Money.of("120", "TRY")
        assert plan.source.amount + plan.destination.amount == Money.zero("TRY")
        assert plan.transfer_ref == "T1"
        assert len(plan.legs) == 2

    def test_non_positive_amount(self):
        with pytest.raises(NonPositiveAmountError):
            plan_transfer(source=_account("A"), destination=_account("B"), amount="0", transfer_ref="T")

    def test_same_account(self):
        with pytest.raises(SameAccountTransferError):
            plan_transfer(source=_account("A"), destination=_account("A"), amount="1", transfer_ref="T")

    def test_cross_currency_rejected(self):
        with pytest.raises(CurrencyMismatchError):
            plan_transfer(
                source=_account("A", "TRY"), destination=_account("B", "USD"),
                amount="1", transfer_ref="T",
            )

    def test_overdraft_allowed(self):
        """Balances may go negative; there is no overdraft limit."""
        plan = plan_transfer(
            source=_account("A", balance="10"), destination=_account("B"),
            amount="25", transfer_ref="T",
        )

        assert plan.source.balance_after == Money.of("-15", "TRY")
