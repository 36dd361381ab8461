"""
Module: inventory_kernel.db.types
Responsibility: Column types, annotated aliases and rounding helpers for
    ids, money and stock-quantity columns.  Centralizes precision so that
    every model, engine and service uses identical definitions.
Architecture position: Kernel > DB.  May be imported by models/, domain/,
    services/, selectors/ and the engines.  MUST NOT import from any of them.

Invariants enforced:
    - No floats anywhere.  Money and quantities use Decimal with explicit
      precision; rounding happens only at presentation time.
    - round_money() is the ONLY sanctioned rounding function for rupee
      amounts.

Failure modes:
    - decimal.InvalidOperation on a non-numeric string passed to to_decimal().
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Annotated
from uuid import UUID

from sqlalchemy import Numeric, String
from sqlalchemy.types import TypeDecorator


class UUIDString(TypeDecorator):
    """UUID stored as String(36) so SQLite and PostgreSQL share one schema."""

    impl = String(36)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        return str(value) if value is not None else None

    def process_result_value(self, value, dialect):
        return UUID(value) if value is not None else None


# Rupee amount: 38 digits total, 9 decimal places
Money = Annotated[Decimal, "money"]

# Stock quantity in a product's base unit (fractional after conversion)
StockQuantity = Annotated[Decimal, "stock_quantity"]

# Units of measure are short lowercase codes ("pcs", "boxes", ...)
UnitCode = Annotated[str, "unit_code"]

# Column type for each alias; registered in Base.type_annotation_map
COLUMN_TYPES = {
    Money: Numeric(38, 9),
    StockQuantity: Numeric(38, 9),
    UnitCode: String(20),
}


MONEY_DECIMAL_PLACES = 2

ZERO = Decimal("0")
HUNDRED = Decimal("100")


def to_decimal(value: Decimal | int | str) -> Decimal:
    """
    Coerce an int, str or Decimal to Decimal.

    Floats are rejected: ``Decimal(0.1)`` carries binary noise into stock
    figures, so callers must pass ``"0.1"`` instead.

    Raises:
        TypeError: If value is a float or bool.
        decimal.InvalidOperation: If a string is not numeric.
    """
    if isinstance(value, bool) or isinstance(value, float):
        raise TypeError(
            f"Expected Decimal, int or str, got {type(value).__name__}: {value!r}"
        )
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def round_money(
    value: Decimal,
    decimal_places: int = MONEY_DECIMAL_PLACES,
    rounding: str = ROUND_HALF_UP,
) -> Decimal:
    """
    Round a rupee amount (half up).

    ``decimal_places=0`` rounds to the whole rupee, as the invoice grand
    total does.
    """
    return value.quantize(Decimal(1).scaleb(-decimal_places), rounding=rounding)
