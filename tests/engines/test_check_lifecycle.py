"""Tests for the post-dated check state machine and portfolio summary."""

from datetime import date
from decimal import Decimal

import pytest

from ledger_kernel.domain.records import Check, CheckStatus
from ledger_kernel.exceptions import CheckTransitionError
from ledger_engines.check_lifecycle import can_transition, summarize_checks, transition


def _check(status=CheckStatus.PENDING, amount="1000", currency="TRY", check_id="K1"):
    return Check(
        id=check_id,
        check_number="123456",
        bank_name="Ziraat",
        drawer="Acme Ltd",
        amount=Decimal(amount),
        currency=currency,
        issue_date=date(2024, 1, 1),
        due_date=date(2024, 4, 1),
        customer_id="C1",
        status=status,
    )


class TestTransitions:
    """PENDING moves once; terminal states never move."""

    @pytest.mark.parametrize(
        "target", [CheckStatus.COLLECTED, CheckStatus.BOUNCED, CheckStatus.RETURNED],
    )
    def test_pending_moves_to_terminal(self, target):
        result = transition(_check(), target)

        assert result.status is target
        assert result.status.is_terminal

    def test_original_unchanged(self):
        original = _check()
        transition(original, CheckStatus.COLLECTED)

        assert original.status is CheckStatus.PENDING

    @pytest.mark.parametrize(
        "current", [CheckStatus.COLLECTED, CheckStatus.BOUNCED, CheckStatus.RETURNED],
    )
    def test_second_transition_rejected(self, current):
        with pytest.raises(CheckTransitionError) as exc_info:
            transition(_check(status=current), CheckStatus.BOUNCED)

        assert exc_info.value.current_status == current.value

    def test_pending_to_pending_rejected(self):
        assert not can_transition(CheckStatus.PENDING, CheckStatus.PENDING)


class TestPortfolioSummary:
    """Totals per status, grouped by currency."""

    def test_summary(self):
        checks = [
            _check(CheckStatus.PENDING, "100"),
            _check(CheckStatus.COLLECTED, "250"),
            _check(CheckStatus.BOUNCED, "40"),
            _check(CheckStatus.PENDING, "10", currency="USD"),
        ]

        summaries = summarize_checks(checks)

        try_summary = summaries["TRY"]
        assert try_summary.total == Decimal("390")
        assert try_summary.pending == Decimal("100")
        assert try_summary.collected == Decimal("250")
        assert try_summary.bounced == Decimal("40")
        assert try_summary.returned == Decimal("0")
        assert try_summary.count == 3
        assert summaries["USD"].pending == Decimal("10")

    def test_empty(self):
        assert summarize_checks([]) == {}
