"""
CatalogService -- category and product registration.

Responsibility:
    Creates and removes catalog records (categories, products) with the
    validation the ledger depends on: a known base unit, a complete and
    positive sub-unit definition, and a sane price and discount.

Architecture position:
    Kernel > Services -- imperative shell, flush-only.

Invariants enforced:
    - A product's opening stock is set at creation only; afterwards
      current_stock is written exclusively by the stock ledger.
    - sub_unit and its conversion rate are given together or not at all.

Failure modes:
    - ValueError on an unknown unit, a negative price or a half-specified
      sub-unit.
    - InvalidConversionRateError on a non-positive conversion rate.
    - InvalidDiscountError on a discount outside 0-100.
    - CategoryNotFoundError / ProductNotFoundError on unknown ids.
"""

from decimal import Decimal
from uuid import UUID

from inventory_kernel.db.types import HUNDRED, ZERO, to_decimal
from inventory_kernel.domain.dtos import CategoryInfo, ProductSnapshot
from inventory_kernel.domain.values import SubUnit, Unit
from inventory_kernel.exceptions import (
    CategoryNotFoundError,
    InvalidDiscountError,
    ProductNotFoundError,
)
from inventory_kernel.logging_config import get_logger
from inventory_kernel.models.catalog import Category, Product
from inventory_kernel.services.base import BaseService

logger = get_logger("services.catalog")


class CatalogService(BaseService[Product]):
    """Catalog writes.  Reads go through CatalogSelector."""

    def create_category(self, title: str) -> CategoryInfo:
        if not title or not title.strip():
            raise ValueError("Category title is required")
        category = Category(title=title.strip())
        self.session.add(category)
        self.session.flush()
        logger.info(
            "category_created",
            extra={"category_id": str(category.id), "title": category.title},
        )
        return CategoryInfo.from_model(category)

    def delete_category(self, category_id: UUID) -> None:
        """Remove a category.  Products keep their (now dangling) reference."""
        category = self.session.get(Category, category_id)
        if category is None:
            raise CategoryNotFoundError(str(category_id))
        self.session.delete(category)
        self.session.flush()
        logger.info("category_deleted", extra={"category_id": str(category_id)})

    def create_product(
        self,
        name: str,
        unit: Unit | str,
        price: Decimal | int | str,
        actor_id: UUID,
        *,
        hsn_code: str | None = None,
        gst_slab: int | None = None,
        category_id: UUID | None = None,
        discount_percentage: Decimal | int | str | None = None,
        opening_stock: Decimal | int | str = 0,
        sub_unit: Unit | str | None = None,
        sub_unit_conversion_rate: Decimal | int | str | None = None,
    ) -> ProductSnapshot:
        """
        Register a product.

        Args:
            unit: Base unit; current_stock and price are expressed in it.
            price: GST-inclusive price per base unit.
            sub_unit / sub_unit_conversion_rate: Optional secondary unit and
                the number of base units in one of it.
        """
        if not name or not name.strip():
            raise ValueError("Product name is required")
        base_unit = Unit.parse(unit)

        price = to_decimal(price)
        if price < ZERO:
            raise ValueError(f"Price cannot be negative: {price}")

        if discount_percentage is not None:
            discount_percentage = to_decimal(discount_percentage)
            if discount_percentage < ZERO or discount_percentage > HUNDRED:
                raise InvalidDiscountError(name, str(discount_percentage))

        if gst_slab is not None and not 0 <= gst_slab <= 100:
            raise ValueError(f"GST slab must be within 0..100, got {gst_slab}")

        if (sub_unit is None) != (sub_unit_conversion_rate is None):
            raise ValueError(
                "sub_unit and sub_unit_conversion_rate must be given together"
            )
        parsed_sub_unit = None
        if sub_unit is not None:
            parsed_sub_unit = SubUnit(
                unit=Unit.parse(sub_unit),
                conversion_rate=to_decimal(sub_unit_conversion_rate),
            )

        if category_id is not None and self.session.get(Category, category_id) is None:
            raise CategoryNotFoundError(str(category_id))

        product = Product(
            name=name.strip(),
            hsn_code=hsn_code,
            gst_slab=gst_slab,
            category_id=category_id,
            unit=base_unit.value,
            price=price,
            discount_percentage=discount_percentage,
            current_stock=to_decimal(opening_stock),
            sub_unit=parsed_sub_unit.unit.value if parsed_sub_unit else None,
            sub_unit_conversion_rate=(
                parsed_sub_unit.conversion_rate if parsed_sub_unit else None
            ),
            created_by_id=actor_id,
        )
        self.session.add(product)
        self.session.flush()

        logger.info(
            "product_created",
            extra={
                "product_id": str(product.id),
                "product_name": product.name,
                "unit": product.unit,
                "sub_unit": product.sub_unit,
            },
        )
        return ProductSnapshot.from_model(product)

    def delete_product(self, product_id: UUID) -> None:
        """
        Remove a product from the catalog.

        Bills and movements that reference it are untouched; their
        enriched views show the product as missing.
        """
        product = self.session.get(Product, product_id)
        if product is None:
            raise ProductNotFoundError(str(product_id))
        self.session.delete(product)
        self.session.flush()
        logger.info("product_deleted", extra={"product_id": str(product_id)})
