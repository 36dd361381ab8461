"""
DTOs -- Pure domain data transfer objects.

Responsibility:
    Defines the immutable data structures that flow between the selectors,
    the pure engines and the module services: catalog snapshots
    (ProductSnapshot, CategoryInfo), reference records (PartyInfo, UserInfo),
    movement input (MovementLine) and bill input (BillItemInput, AddOn,
    SupplyDetails).

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.
    from_model() class methods are boundary converters, only invoked from
    selectors and services (never from engine logic).

Invariants enforced:
    - Engines accept/return DTOs, never ORM entities.
    - Quantities, prices and discounts are Decimal, never float.
    - A line flagged ``is_sub_unit`` is only meaningful against a product
      whose snapshot carries a SubUnit (checked by the unit engine).

Failure modes:
    - ValueError / TypeError on malformed quantities or prices.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING
from uuid import UUID

from inventory_kernel.db.types import to_decimal
from inventory_kernel.domain.values import SubUnit, Unit

if TYPE_CHECKING:
    from inventory_kernel.models.catalog import Category as CategoryModel
    from inventory_kernel.models.catalog import Product as ProductModel
    from inventory_kernel.models.party import Party as PartyModel
    from inventory_kernel.models.user import User as UserModel


class MovementType(str, Enum):
    """
    Kind of stock movement.

    RECEIPT and ISSUE are deltas; CORRECTION sets stock to an absolute value.
    """

    RECEIPT = "receipt"
    ISSUE = "issue"
    CORRECTION = "correction"

    @classmethod
    def parse(cls, value: MovementType | str) -> MovementType:
        """Accept enum members, their values, or the portal's IN/OUT/ADJUSTMENT codes."""
        if isinstance(value, MovementType):
            return value
        normalized = value.strip().lower()
        legacy = {"in": cls.RECEIPT, "out": cls.ISSUE, "adjustment": cls.CORRECTION}
        if normalized in legacy:
            return legacy[normalized]
        try:
            return cls(normalized)
        except ValueError:
            raise ValueError(f"Unknown movement type: {value!r}") from None


class BillKind(str, Enum):
    """Invoices are final tax documents; proforma invoices are quotations."""

    INVOICE = "invoice"
    PROFORMA = "proforma"

    @property
    def number_prefix(self) -> str:
        return "INV" if self is BillKind.INVOICE else "PRO"


# =============================================================================
# Catalog and reference snapshots
# =============================================================================


@dataclass(frozen=True)
class ProductSnapshot:
    """
    Point-in-time view of a catalog product.

    Contract:
        ``current_stock`` is expressed in ``unit`` (the base unit).
        ``price`` is per base unit.
    """

    id: UUID
    name: str
    unit: Unit
    price: Decimal
    current_stock: Decimal
    sub_unit: SubUnit | None = None
    discount_percentage: Decimal | None = None
    category_id: UUID | None = None
    hsn_code: str | None = None
    gst_slab: int | None = None

    @property
    def has_sub_unit(self) -> bool:
        return self.sub_unit is not None

    @classmethod
    def from_model(cls, product: ProductModel) -> ProductSnapshot:
        sub_unit = None
        if product.sub_unit is not None and product.sub_unit_conversion_rate is not None:
            sub_unit = SubUnit(
                unit=Unit.parse(product.sub_unit),
                conversion_rate=product.sub_unit_conversion_rate,
            )
        return cls(
            id=product.id,
            name=product.name,
            unit=Unit.parse(product.unit),
            price=product.price,
            current_stock=product.current_stock,
            sub_unit=sub_unit,
            discount_percentage=product.discount_percentage,
            category_id=product.category_id,
            hsn_code=product.hsn_code,
            gst_slab=product.gst_slab,
        )


@dataclass(frozen=True)
class CategoryInfo:
    """Immutable DTO for a product category."""

    id: UUID
    title: str

    @classmethod
    def from_model(cls, category: CategoryModel) -> CategoryInfo:
        return cls(id=category.id, title=category.title)


@dataclass(frozen=True)
class PartyInfo:
    """Immutable DTO for a billing party (customer)."""

    id: UUID
    name: str
    address: str
    state: str
    state_code: str
    gst_number: str | None = None
    is_active: bool = True

    @classmethod
    def from_model(cls, party: PartyModel) -> PartyInfo:
        return cls(
            id=party.id,
            name=party.name,
            address=party.address,
            state=party.state,
            state_code=party.state_code,
            gst_number=party.gst_number,
            is_active=party.is_active,
        )


@dataclass(frozen=True)
class UserInfo:
    """Immutable DTO for a portal user (movement creator)."""

    id: UUID
    name: str
    email: str
    user_type: str

    @classmethod
    def from_model(cls, user: UserModel) -> UserInfo:
        return cls(id=user.id, name=user.name, email=user.email, user_type=user.user_type)


# =============================================================================
# Movement and bill input
# =============================================================================


@dataclass(frozen=True)
class MovementLine:
    """
    One line of a stock movement as entered by the operator.

    ``quantity`` is in the sub-unit when ``is_sub_unit`` is True, otherwise
    in the product's base unit.
    """

    product_id: UUID
    quantity: Decimal
    is_sub_unit: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "quantity", to_decimal(self.quantity))


@dataclass(frozen=True)
class BillItemInput:
    """
    One bill item as entered by the operator.

    ``unit_price`` is only set when a price snapshot was taken at creation;
    otherwise the live catalog price applies.
    """

    product_id: UUID
    quantity: Decimal
    discount_percentage: Decimal | None = None
    is_sub_unit: bool = False
    unit_price: Decimal | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "quantity", to_decimal(self.quantity))
        if self.discount_percentage is not None:
            object.__setattr__(
                self, "discount_percentage", to_decimal(self.discount_percentage)
            )
        if self.unit_price is not None:
            object.__setattr__(self, "unit_price", to_decimal(self.unit_price))


@dataclass(frozen=True)
class AddOn:
    """Flat extra charge on a bill (freight, packing...). Never discounted."""

    title: str
    price: Decimal

    def __post_init__(self) -> None:
        price = to_decimal(self.price)
        if price < 0:
            raise ValueError(f"Add-on price cannot be negative: {price}")
        if not self.title or not self.title.strip():
            raise ValueError("Add-on title is required")
        object.__setattr__(self, "price", price)


@dataclass(frozen=True)
class SupplyDetails:
    """Where and how the goods on a bill were dispatched."""

    supply_place: str
    transporter_name: str | None = None
    vehicle_number: str | None = None
    supply_date: date | None = None

    def __post_init__(self) -> None:
        if not self.supply_place or not self.supply_place.strip():
            raise ValueError("Supply place is required")
