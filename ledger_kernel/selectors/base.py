"""
Module: ledger_kernel.selectors.base
Responsibility: Abstract base class for read-only query selectors.
Architecture position: Kernel > Selectors.  May import from db/ and models/.
    MUST NOT import from services/ or outer layers.

Invariants enforced:
    - Read-only access: selectors never add, delete, flush or commit.
    - Selectors return frozen domain records, never ORM rows.
    - The caller owns the session and its transaction scope.
"""

from abc import ABC
from uuid import UUID

from sqlalchemy.orm import Session

from ledger_kernel.domain.records import RecordId


def as_uuid(value: RecordId | None) -> UUID | None:
    """Normalize a record id for querying; malformed ids match nothing."""
    if value is None or isinstance(value, UUID):
        return value
    try:
        return UUID(str(value))
    except ValueError:
        return None


class BaseSelector(ABC):
    """Selectors accept a Session from the caller and only read through it."""

    def __init__(self, session: Session):
        self.session = session
