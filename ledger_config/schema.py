"""
Ledger configuration schema.

Frozen dataclasses the YAML configuration is parsed into.  The loader
builds them; everything else only reads them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal


@dataclass(frozen=True)
class DatabaseConfig:
    """Where the ledger tables live."""

    url: str = "sqlite://"
    echo: bool = False
    pool_size: int = 10


@dataclass(frozen=True)
class LoggingConfig:
    level: str = "INFO"


@dataclass(frozen=True)
class ReportConfig:
    # Days past due before an invoice is listed as overdue
    overdue_grace_days: int = 0


@dataclass(frozen=True)
class LedgerConfig:
    """
    Complete ledger configuration.

    ``checksum`` is the SHA-256 of the parsed source and identifies the
    exact configuration a process ran with.
    """

    base_currency: str
    supported_currencies: tuple[str, ...]
    settlement_tolerance: Decimal
    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    reports: ReportConfig = field(default_factory=ReportConfig)
    checksum: str = ""

    def supports(self, currency: str) -> bool:
        return currency.upper() in self.supported_currencies
