"""
Unit Engine - convert operator quantities into a product's base unit.

Every stock figure is kept in the product's base unit.  Operators may enter
a line in the product's sub-unit instead (boxes of a product stocked in
pcs); normalize() turns that into base units before anything else sees it.

Pure functions with no I/O.

Usage:
    from inventory_engines.units import normalize

    normalize(product, Decimal("2"), is_sub_unit=True)   # 24 for boxes of 12
"""

from __future__ import annotations

from decimal import Decimal

from inventory_kernel.db.types import to_decimal
from inventory_kernel.domain.dtos import ProductSnapshot
from inventory_kernel.domain.values import Quantity
from inventory_kernel.exceptions import UnsupportedUnitError


def normalize(
    product: ProductSnapshot,
    quantity: Decimal | int | str,
    is_sub_unit: bool = False,
) -> Decimal:
    """
    Express ``quantity`` in the product's base unit.

    Raises:
        UnsupportedUnitError: ``is_sub_unit`` is set but the product has no
            sub-unit.
    """
    quantity = to_decimal(quantity)
    if not is_sub_unit:
        return quantity
    if product.sub_unit is None:
        raise UnsupportedUnitError(str(product.id), base_unit=product.unit.value)
    return quantity * product.sub_unit.conversion_rate


def normalize_quantity(
    product: ProductSnapshot,
    quantity: Decimal | int | str,
    is_sub_unit: bool = False,
) -> Quantity:
    """normalize(), returned as a Quantity tagged with the base unit."""
    return Quantity(value=normalize(product, quantity, is_sub_unit), unit=product.unit)


def to_sub_units(product: ProductSnapshot, base_quantity: Decimal) -> Decimal:
    """
    Express a base-unit quantity in the product's sub-unit (for display).

    Raises:
        UnsupportedUnitError: the product has no sub-unit.
    """
    if product.sub_unit is None:
        raise UnsupportedUnitError(str(product.id), base_unit=product.unit.value)
    return to_decimal(base_quantity) / product.sub_unit.conversion_rate
