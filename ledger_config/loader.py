"""
Configuration Loader (``ledger_config.loader``).

Responsibility
--------------
Load a YAML configuration file and parse it into the frozen
``ledger_config.schema`` dataclasses.

Invariants enforced
-------------------
* No silent defaults for required keys: ``base_currency``,
  ``supported_currencies`` and ``settlement_tolerance`` must be present.
* The base currency is always one of the supported currencies.
* ``compute_checksum`` is deterministic for identical content.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Missing required keys  -> ``KeyError``.
* Malformed values (unknown currency, float or negative tolerance)
  -> ``ValueError``.
"""

from __future__ import annotations

import hashlib
import json
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any

import yaml

from ledger_config.schema import DatabaseConfig, LedgerConfig, LoggingConfig, ReportConfig
from ledger_kernel.domain.currency import CurrencyRegistry


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    with open(path) as f:
        return yaml.safe_load(f) or {}


def compute_checksum(data: dict[str, Any]) -> str:
    """SHA-256 of the canonical JSON serialization of ``data``."""
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()


def parse_decimal(value: Any, name: str) -> Decimal:
    """
    Parse a decimal setting.

    YAML reads ``0.01`` as a float; write such values quoted ("0.01") so
    they reach the ledger exactly.
    """
    if isinstance(value, bool) or isinstance(value, float):
        raise ValueError(f"{name} must be a quoted decimal string, got {value!r}")
    try:
        return Decimal(str(value))
    except InvalidOperation as e:
        raise ValueError(f"{name} is not a decimal: {value!r}") from e


def parse_currency(value: Any) -> str:
    code = str(value).upper().strip()
    if not CurrencyRegistry.is_valid(code):
        raise ValueError(f"Unknown currency code: {value!r}")
    return code


def parse_config(data: dict[str, Any]) -> LedgerConfig:
    """
    Build a LedgerConfig from an already-parsed YAML mapping.

    Raises:
        KeyError: a required key is missing.
        ValueError: a value is malformed.
    """
    base_currency = parse_currency(data["base_currency"])
    supported = tuple(parse_currency(c) for c in data["supported_currencies"])
    if base_currency not in supported:
        raise ValueError(f"base_currency {base_currency} is not in supported_currencies")

    tolerance = parse_decimal(data["settlement_tolerance"], "settlement_tolerance")
    if tolerance < 0:
        raise ValueError("settlement_tolerance must not be negative")

    db = data.get("database") or {}
    log = data.get("logging") or {}
    reports = data.get("reports") or {}

    grace_days = int(reports.get("overdue_grace_days", 0))
    if grace_days < 0:
        raise ValueError("reports.overdue_grace_days must not be negative")

    return LedgerConfig(
        base_currency=base_currency,
        supported_currencies=supported,
        settlement_tolerance=tolerance,
        database=DatabaseConfig(
            url=str(db.get("url", "sqlite://")),
            echo=bool(db.get("echo", False)),
            pool_size=int(db.get("pool_size", 10)),
        ),
        logging=LoggingConfig(level=str(log.get("level", "INFO")).upper()),
        reports=ReportConfig(overdue_grace_days=grace_days),
        checksum=compute_checksum(data),
    )


def load_config(path: Path) -> LedgerConfig:
    """Load and parse one configuration file."""
    return parse_config(load_yaml_file(Path(path)))
