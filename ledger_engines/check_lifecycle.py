"""
Module: ledger_engines.check_lifecycle
Responsibility:
    State machine for post-dated checks received from customers, and the
    portfolio summary shown on the checks screen.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - PENDING is the only state with outgoing transitions:
      PENDING -> COLLECTED | BOUNCED | RETURNED.
    - Terminal states never change; a second transition is rejected.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, replace
from decimal import Decimal

from ledger_kernel.domain.records import Check, CheckStatus
from ledger_kernel.domain.values import ZERO
from ledger_kernel.exceptions import CheckTransitionError
from ledger_kernel.logging_config import get_logger

logger = get_logger("engines.check_lifecycle")

ALLOWED_TRANSITIONS: dict[CheckStatus, frozenset[CheckStatus]] = {
    CheckStatus.PENDING: frozenset({
        CheckStatus.COLLECTED,
        CheckStatus.BOUNCED,
        CheckStatus.RETURNED,
    }),
    CheckStatus.COLLECTED: frozenset(),
    CheckStatus.BOUNCED: frozenset(),
    CheckStatus.RETURNED: frozenset(),
}


def can_transition(current: CheckStatus, requested: CheckStatus) -> bool:
    return requested in ALLOWED_TRANSITIONS[current]


def transition(check: Check, new_status: CheckStatus) -> Check:
    """Return a copy of ``check`` in ``new_status``, or raise CheckTransitionError."""
    if not can_transition(check.status, new_status):
        logger.debug("check_transition_rejected", extra={
            "check_id": str(check.id),
            "from_status": check.status.value,
            "to_status": new_status.value,
        })
        raise CheckTransitionError(str(check.id), check.status.value, new_status.value)
    return replace(check, status=new_status)


@dataclass(frozen=True)
class CheckPortfolioSummary:
    """Amounts per status for one currency."""

    currency: str
    total: Decimal = ZERO
    pending: Decimal = ZERO
    collected: Decimal = ZERO
    bounced: Decimal = ZERO
    returned: Decimal = ZERO
    count: int = 0

    def add(self, check: Check) -> CheckPortfolioSummary:
        bucket = check.status.value
        return replace(
            self,
            total=self.total + check.amount,
            count=self.count + 1,
            **{bucket: getattr(self, bucket) + check.amount},
        )


def summarize_checks(checks: Iterable[Check]) -> dict[str, CheckPortfolioSummary]:
    """Group checks by currency; amounts are never summed across currencies."""
    summaries: dict[str, CheckPortfolioSummary] = {}
    for check in checks:
        current = summaries.get(check.currency) or CheckPortfolioSummary(currency=check.currency)
        summaries[check.currency] = current.add(check)
    return summaries
