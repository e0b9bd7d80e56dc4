"""
Module: ledger_kernel.db.types
Responsibility: Column types and annotated aliases for monetary columns.
    Centralizes precision so every model stores amounts and rates the same way.
Architecture position: Kernel > DB.  May be imported by models/ and services/.
    MUST NOT import from models/, services/, selectors/ or outer layers.

Invariants enforced:
    - Amounts are Numeric(38, 9); exchange rates are Numeric(38, 18).
    - Values round-trip as exact Decimals on every backend.  SQLite has no
      native decimal type, so there the canonical string form is stored.
    - No floats anywhere in the ledger.
"""

from decimal import Decimal
from typing import Annotated

from sqlalchemy import Numeric, String
from sqlalchemy.types import TypeDecorator

MONEY_PRECISION = (38, 9)
RATE_PRECISION = (38, 18)


class ExactDecimal(TypeDecorator):
    """
    Decimal column that never passes through float.

    Contract:
        On PostgreSQL (and other backends with a real NUMERIC) this is a
        plain Numeric(precision, scale).  On SQLite the value is stored as
        its Decimal string and parsed back with Decimal().

    Guarantees:
        - process_result_value always returns Decimal or None.
        - cache_ok=True enables SQLAlchemy statement caching.
    """

    impl = Numeric
    cache_ok = True

    def __init__(self, precision: int = 38, scale: int = 9):
        super().__init__(precision=precision, scale=scale, asdecimal=True)
        self.precision = precision
        self.scale = scale

    def load_dialect_impl(self, dialect):
        if dialect.name == "sqlite":
            return dialect.type_descriptor(String(self.precision + 2))
        return dialect.type_descriptor(Numeric(self.precision, self.scale, asdecimal=True))

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if isinstance(value, float):
            raise TypeError("float values are not accepted for decimal columns")
        value = Decimal(value)
        if dialect.name == "sqlite":
            return format(value, "f")
        return value

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return Decimal(str(value)) if not isinstance(value, Decimal) else value


# Monetary amount: 38 digits, 9 decimal places
Amount = Annotated[Decimal, ExactDecimal(*MONEY_PRECISION)]

# Exchange rate: 38 digits, 18 decimal places
Rate = Annotated[Decimal, ExactDecimal(*RATE_PRECISION)]

# ISO 4217 currency code
CurrencyCode = Annotated[str, String(3)]

# Short identifier strings (check numbers, SKUs, status values)
ShortCode = Annotated[str, String(50)]

# Names and titles
Name = Annotated[str, String(255)]

# Free text
LongText = Annotated[str, String(4000)]
