"""
ledger_config -- single public entrypoint for ledger configuration.

Responsibility:
    ``get_active_config()`` is the only way runtime code obtains
    configuration.  It loads the packaged defaults, or the file named by
    ``LEDGER_CONFIG_PATH``, and applies ``LEDGER_DATABASE_URL`` on top.

Architecture position:
    Configuration -- sits beside ledger_kernel.  The kernel never imports
    this package; ledger_services passes the values it needs into kernel
    services explicitly.

Audit relevance:
    Every load emits a ``LEDGER_CONFIG_TRACE`` log entry with the source
    path and checksum.
"""

from __future__ import annotations

import logging
import os
from dataclasses import replace
from pathlib import Path

from ledger_config.loader import compute_checksum, load_config, parse_config
from ledger_config.schema import DatabaseConfig, LedgerConfig, LoggingConfig, ReportConfig

_logger = logging.getLogger("ledger_kernel.config")

DEFAULT_CONFIG_PATH = Path(__file__).parent / "defaults" / "ledger.yaml"

CONFIG_PATH_ENV = "LEDGER_CONFIG_PATH"
DATABASE_URL_ENV = "LEDGER_DATABASE_URL"

_active: LedgerConfig | None = None


def get_active_config() -> LedgerConfig:
    """
    Return the process-wide configuration, loading it on first use.

    Raises:
        FileNotFoundError: LEDGER_CONFIG_PATH names a missing file.
        KeyError / ValueError: the file is incomplete or malformed.
    """
    global _active
    if _active is not None:
        return _active

    path = Path(os.environ.get(CONFIG_PATH_ENV) or DEFAULT_CONFIG_PATH)
    config = load_config(path)

    database_url = os.environ.get(DATABASE_URL_ENV)
    if database_url:
        config = replace(config, database=replace(config.database, url=database_url))

    _logger.info(
        "LEDGER_CONFIG_TRACE",
        extra={
            "trace_type": "LEDGER_CONFIG_TRACE",
            "config_path": str(path),
            "checksum": config.checksum,
            "base_currency": config.base_currency,
            "database_url_override": bool(database_url),
        },
    )
    _active = config
    return config


def reset_active_config() -> None:
    """Forget the cached configuration (tests)."""
    global _active
    _active = None


__all__ = [
    "CONFIG_PATH_ENV",
    "DATABASE_URL_ENV",
    "DEFAULT_CONFIG_PATH",
    "DatabaseConfig",
    "LedgerConfig",
    "LoggingConfig",
    "ReportConfig",
    "compute_checksum",
    "get_active_config",
    "load_config",
    "parse_config",
    "reset_active_config",
]
