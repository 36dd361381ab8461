"""
Bill Totals Engine - payable amount of a bill.

    line value = unit_price * base_quantity * (1 - discount / 100)
    total      = sum(line values) + sum(add-on prices), rounded to paise

Catalog prices are per BASE unit, so a line billed in the product's sub-unit
is normalized first (2 boxes of 12 at Rs 10 per piece is Rs 240).  Add-ons
are flat charges and are never discounted.  Rounding happens once, on the
final total, which keeps the result independent of item and add-on order.

Pure functions with no I/O.

Usage:
    from inventory_engines.bill_totals import compute_bill_total

    total = compute_bill_total(items, add_ons, catalog.get_products(ids))
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from decimal import Decimal
from uuid import UUID

from inventory_engines.tracer import traced_engine
from inventory_engines.units import normalize
from inventory_kernel.db.types import HUNDRED, ZERO, round_money, to_decimal
from inventory_kernel.domain.dtos import AddOn, BillItemInput, ProductSnapshot
from inventory_kernel.exceptions import InvalidDiscountError, PriceNotFoundError


@dataclass(frozen=True)
class PricedLine:
    """A bill line with its price resolved and quantity in base units."""

    unit_price: Decimal
    quantity: Decimal
    discount_percentage: Decimal | None = None
    product_id: UUID | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "unit_price", to_decimal(self.unit_price))
        object.__setattr__(self, "quantity", to_decimal(self.quantity))
        if self.discount_percentage is not None:
            discount = to_decimal(self.discount_percentage)
            if discount < ZERO or discount > HUNDRED:
                raise InvalidDiscountError(str(self.product_id), str(discount))
            object.__setattr__(self, "discount_percentage", discount)

    @property
    def gross_value(self) -> Decimal:
        return self.unit_price * self.quantity

    @property
    def discount_amount(self) -> Decimal:
        if not self.discount_percentage:
            return ZERO
        return self.gross_value * self.discount_percentage / HUNDRED

    @property
    def value(self) -> Decimal:
        """Unrounded line value after discount."""
        return self.gross_value - self.discount_amount


@traced_engine("bill_totals", "1.0", fingerprint_fields=("priced_lines", "add_ons"))
def compute_total(
    priced_lines: Sequence[PricedLine],
    add_ons: Sequence[AddOn] = (),
) -> Decimal:
    """Sum of discounted line values plus add-on prices, rounded to paise."""
    lines_total = sum((line.value for line in priced_lines), ZERO)
    add_ons_total = sum((a.price for a in add_ons), ZERO)
    return round_money(lines_total + add_ons_total)


def price_items(
    items: Sequence[BillItemInput],
    catalog: Mapping[UUID, ProductSnapshot],
) -> list[PricedLine]:
    """
    Resolve each item's price and base quantity.

    A unit_price stored on the item (price snapshot taken at bill creation)
    wins over the live catalog price; otherwise the catalog's per-base-unit
    price applies.  The product must still resolve in both cases because
    the quantity has to be normalized against its units.

    Raises:
        PriceNotFoundError: the item's product is not in ``catalog``.
        UnsupportedUnitError: a sub-unit item for a product without one.
        InvalidDiscountError: discount outside 0..100.
    """
    priced: list[PricedLine] = []
    for item in items:
        product = catalog.get(item.product_id)
        if product is None:
            raise PriceNotFoundError(str(item.product_id))
        unit_price = item.unit_price if item.unit_price is not None else product.price
        priced.append(
            PricedLine(
                unit_price=unit_price,
                quantity=normalize(product, item.quantity, item.is_sub_unit),
                discount_percentage=item.discount_percentage,
                product_id=item.product_id,
            )
        )
    return priced


def compute_bill_total(
    items: Sequence[BillItemInput],
    add_ons: Sequence[AddOn],
    catalog: Mapping[UUID, ProductSnapshot],
) -> Decimal:
    """
    Payable amount of a bill priced against ``catalog``.

    Raises:
        PriceNotFoundError: an item's product cannot be resolved.
        UnsupportedUnitError: an item claims a sub-unit the product lacks.
    """
    return compute_total(price_items(items, catalog), add_ons)
