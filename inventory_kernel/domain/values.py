"""
Values -- Immutable, self-validating domain value objects.

Responsibility:
    Provides the unit-of-measure vocabulary for the stock ledger: the fixed
    ``Unit`` enumeration, the ``SubUnit`` descriptor (secondary unit plus
    conversion rate) and the ``Quantity`` value object pairing a Decimal
    with its unit.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.
    Imported by dtos, models and the engines.

Invariants enforced:
    - Quantities are Decimal, never float.
    - A SubUnit's conversion_rate is strictly positive.
    - Quantity arithmetic never mixes units silently.

Failure modes:
    - InvalidConversionRateError on a non-positive conversion rate.
    - ValueError on unknown unit codes or mixed-unit arithmetic.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from enum import Enum

from inventory_kernel.exceptions import InvalidConversionRateError


class Unit(str, Enum):
    """Measurement units a product can be stocked or sold in."""

    PCS = "pcs"
    BOXES = "boxes"
    BAGS = "bags"
    ROLLS = "rolls"
    FEET = "feet"
    METERS = "meters"
    KG = "kg"
    GRAMS = "grams"
    LITERS = "liters"
    SETS = "sets"

    @classmethod
    def parse(cls, value: Unit | str) -> Unit:
        """Accept a Unit or its code (case-insensitive)."""
        if isinstance(value, Unit):
            return value
        try:
            return cls(value.strip().lower())
        except ValueError:
            raise ValueError(f"Unknown unit of measure: {value!r}") from None


@dataclass(frozen=True, slots=True)
class SubUnit:
    """
    Secondary unit of a product.

    Contract:
        ``conversion_rate`` is the number of BASE units equivalent to one
        sub-unit (a product stocked in pcs with a "boxes" sub-unit of 12
        has conversion_rate == 12).

    Guarantees:
        - unit is a valid Unit.
        - conversion_rate is a positive Decimal.
    """

    unit: Unit
    conversion_rate: Decimal

    def __post_init__(self) -> None:
        object.__setattr__(self, "unit", Unit.parse(self.unit))
        rate = self.conversion_rate
        if not isinstance(rate, Decimal):
            try:
                rate = Decimal(str(rate))
            except (InvalidOperation, ValueError) as e:
                raise InvalidConversionRateError(str(self.conversion_rate)) from e
        if not rate.is_finite() or rate <= 0:
            raise InvalidConversionRateError(str(rate))
        object.__setattr__(self, "conversion_rate", rate)

    @classmethod
    def of(cls, unit: Unit | str, conversion_rate: Decimal | int | str) -> SubUnit:
        """Factory method for creating a SubUnit."""
        return cls(unit=Unit.parse(unit), conversion_rate=Decimal(str(conversion_rate)))


@dataclass(frozen=True, slots=True)
class Quantity:
    """
    Numeric quantity with unit value object.

    Contract:
        Pairs a Decimal value with its unit of measure.

    Guarantees:
        - Immutable and hashable.
        - value is always Decimal (never float).
        - Arithmetic operations enforce same-unit constraint.

    Non-goals:
        - Does NOT perform unit conversion (see inventory_engines.units).
    """

    value: Decimal
    unit: Unit

    def __post_init__(self) -> None:
        if not isinstance(self.value, Decimal):
            try:
                object.__setattr__(self, "value", Decimal(str(self.value)))
            except (InvalidOperation, ValueError) as e:
                raise ValueError(f"Invalid quantity value: {self.value}") from e
        object.__setattr__(self, "unit", Unit.parse(self.unit))

    @classmethod
    def of(cls, value: Decimal | str | int, unit: Unit | str) -> Quantity:
        """Factory method for creating Quantity."""
        if isinstance(value, (str, int)):
            value = Decimal(str(value))
        return cls(value=value, unit=Unit.parse(unit))

    @classmethod
    def zero(cls, unit: Unit | str) -> Quantity:
        return cls(value=Decimal("0"), unit=Unit.parse(unit))

    @property
    def is_negative(self) -> bool:
        return self.value < Decimal("0")

    def __add__(self, other: Quantity) -> Quantity:
        if not isinstance(other, Quantity):
            return NotImplemented
        if self.unit != other.unit:
            raise ValueError(
                f"Cannot add Quantity with different units: "
                f"{self.unit.value} and {other.unit.value}"
            )
        return Quantity(value=self.value + other.value, unit=self.unit)

    def __sub__(self, other: Quantity) -> Quantity:
        if not isinstance(other, Quantity):
            return NotImplemented
        if self.unit != other.unit:
            raise ValueError(
                f"Cannot subtract Quantity with different units: "
                f"{self.unit.value} and {other.unit.value}"
            )
        return Quantity(value=self.value - other.value, unit=self.unit)

    def __neg__(self) -> Quantity:
        return Quantity(value=-self.value, unit=self.unit)

    def __str__(self) -> str:
        return f"{self.value} {self.unit.value}"

    def __repr__(self) -> str:
        return f"Quantity({self.value!r}, {self.unit.value!r})"
