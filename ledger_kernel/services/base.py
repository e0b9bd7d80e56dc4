"""
BaseService -- abstract base for all kernel services.

Responsibility:
    Common constructor and session-handling contract for every ledger
    service.  Services receive a SQLAlchemy ``Session`` and a ``Clock``;
    they persist through ``session.flush()`` and never commit.

Architecture position:
    Kernel > Services -- imperative shell around the pure engines.

Invariants enforced:
    - Transaction boundaries: services flush within the caller's
      transaction and never commit or roll back the outer transaction.
      Multi-row writes that must be all-or-nothing (transfers,
      collections) run inside a SAVEPOINT of their own.
    - Time comes from the injected Clock, never from datetime.now().
"""

from abc import ABC

from sqlalchemy.orm import Session

from ledger_kernel.domain.clock import Clock, SystemClock
from ledger_kernel.selectors.ledger_selector import LedgerSelector


class BaseService(ABC):
    """
    Abstract base class for all kernel services.

    Non-goals:
        - Does NOT manage the outer transaction (commit/rollback).
    """

    def __init__(self, session: Session, clock: Clock | None = None):
        self.session = session
        self.clock = clock or SystemClock()
        self.selector = LedgerSelector(session)
