"""
ledger_services -- Package init and public API.

Responsibility:
    Orchestration that composes the pure engines (ledger_engines/) with a
    database session and configuration.  External consumers import from
    here.

Architecture position:
    Services -- top layer.

    Dependency direction:
        ledger_services/ -> ledger_engines/, ledger_kernel/, ledger_config/
        ledger_engines/  -> ledger_services/ (FORBIDDEN)
        ledger_kernel/   -> ledger_services/ (FORBIDDEN)
"""

from ledger_kernel.logging_config import get_logger

logger = get_logger("services")

from ledger_services.customer_ledger import CustomerLedgerService

__all__ = [
    "CustomerLedgerService",
]
