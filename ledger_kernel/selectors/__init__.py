"""Read-only selectors returning frozen domain records."""

from ledger_kernel.selectors.base import BaseSelector, as_uuid
from ledger_kernel.selectors.ledger_selector import LedgerSelector

__all__ = ["BaseSelector", "LedgerSelector", "as_uuid"]
