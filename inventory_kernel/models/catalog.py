"""
Module: inventory_kernel.models.catalog
Responsibility: ORM persistence for the product catalog: categories and
    products, including each product's base unit, optional sub-unit and
    running stock figure.
Architecture position: Kernel > Models.  May import from db/base.py and
    db/types.py only.  MUST NOT import from services/, selectors/, or outer
    layers.

Invariants enforced:
    - current_stock is denominated in the product's base unit and is only
      written by the stock ledger (atomic UPDATE expressions, never an
      ORM attribute assignment after creation).
    - sub_unit and sub_unit_conversion_rate are both set or both NULL
      (ck_product_sub_unit_pair); the rate is strictly positive.
    - price is per base unit.

Failure modes:
    - IntegrityError on a half-specified sub-unit or a non-positive rate.
    - IntegrityError on a duplicate category title.
"""

from decimal import Decimal
from uuid import UUID

from sqlalchemy import CheckConstraint, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from inventory_kernel.db.base import Base, TrackedBase
from inventory_kernel.db.types import Money, StockQuantity, UnitCode, UUIDString


class Category(Base):
    """Product grouping shown on invoices and stock sheets."""

    __tablename__ = "categories"

    title: Mapped[str] = mapped_column(
        String(200),
        nullable=False,
        unique=True,
    )

    def __repr__(self) -> str:
        return f"<Category {self.title}>"


class Product(TrackedBase):
    """
    Catalog product with its running stock.

    Contract:
        ``conversion_rate`` is the number of base units in one sub-unit.
        A product stocked in pcs and sold by the box of 12 has unit "pcs",
        sub_unit "boxes" and sub_unit_conversion_rate 12.

    Non-goals:
        - category_id is a soft reference; a category may be deleted while
          products still point at it (enrichment resolves it to None).
    """

    __tablename__ = "products"

    __table_args__ = (
        CheckConstraint(
            "(sub_unit IS NULL AND sub_unit_conversion_rate IS NULL) OR "
            "(sub_unit IS NOT NULL AND sub_unit_conversion_rate > 0)",
            name="ck_product_sub_unit_pair",
        ),
        Index("idx_product_name", "name"),
        Index("idx_product_category", "category_id"),
    )

    name: Mapped[str] = mapped_column(
        String(200),
        nullable=False,
    )

    hsn_code: Mapped[str | None] = mapped_column(
        String(20),
        nullable=True,
    )

    # GST rate in percent (5, 12, 18, 28)
    gst_slab: Mapped[int | None] = mapped_column(
        Integer,
        nullable=True,
    )

    category_id: Mapped[UUID | None] = mapped_column(
        UUIDString(),
        nullable=True,
    )

    unit: Mapped[UnitCode] = mapped_column(
        nullable=False,
    )

    price: Mapped[Money] = mapped_column(
        nullable=False,
    )

    discount_percentage: Mapped[Decimal | None] = mapped_column(
        nullable=True,
    )

    current_stock: Mapped[StockQuantity] = mapped_column(
        nullable=False,
        default=Decimal("0"),
    )

    sub_unit: Mapped[UnitCode | None] = mapped_column(
        nullable=True,
    )

    sub_unit_conversion_rate: Mapped[Decimal | None] = mapped_column(
        nullable=True,
    )

    @property
    def has_sub_unit(self) -> bool:
        return self.sub_unit is not None

    def __repr__(self) -> str:
        return f"<Product {self.name}: {self.current_stock} {self.unit}>"
