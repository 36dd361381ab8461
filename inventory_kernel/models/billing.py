"""
Module: inventory_kernel.models.billing
Responsibility: ORM persistence for bills (invoices and proforma invoices),
    their items and add-on charges.
Architecture position: Kernel > Models.  May import from db/base.py and
    db/types.py only.

Invariants enforced:
    - bill_number is unique (uq_bill_number) and allocated from a locked
      counter row, never derived from max(bill_number).
    - Bills, items and add-ons are immutable once written.
    - A product appears at most once per bill (uq_bill_item_product).
    - unit_price on an item is only set when prices are snapshotted at
      creation; NULL means "price from the live catalog".

Failure modes:
    - IntegrityError on a duplicate bill number or duplicate product.
    - ImmutabilityViolationError on any UPDATE or DELETE.
"""

from datetime import date
from decimal import Decimal
from uuid import UUID

from sqlalchemy import (
    Boolean,
    Date,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from inventory_kernel.db.base import Base, TrackedBase
from inventory_kernel.db.types import Money, StockQuantity, UUIDString


class Bill(TrackedBase):
    """
    Bill header.

    Contract:
        total_amount is the payable amount computed at creation (items after
        discount plus add-ons, rounded to paise).  bill_kind holds a
        BillKind value ("invoice", "proforma").
    """

    __tablename__ = "bills"

    __table_args__ = (
        UniqueConstraint("bill_number", name="uq_bill_number"),
        Index("idx_bill_kind_date", "bill_kind", "invoice_date"),
        Index("idx_bill_party", "party_id"),
    )

    bill_number: Mapped[str] = mapped_column(
        String(30),
        nullable=False,
    )

    bill_kind: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
    )

    # Soft reference: enrichment tolerates a deleted party
    party_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        nullable=False,
    )

    total_amount: Mapped[Money] = mapped_column(
        nullable=False,
    )

    invoice_date: Mapped[date] = mapped_column(
        Date,
        nullable=False,
    )

    supply_place: Mapped[str] = mapped_column(
        String(200),
        nullable=False,
    )

    transporter_name: Mapped[str | None] = mapped_column(
        String(200),
        nullable=True,
    )

    vehicle_number: Mapped[str | None] = mapped_column(
        String(30),
        nullable=True,
    )

    supply_date: Mapped[date | None] = mapped_column(
        Date,
        nullable=True,
    )

    items: Mapped[list["BillItem"]] = relationship(
        back_populates="bill",
        cascade="all, delete-orphan",
        order_by="BillItem.line_no",
        lazy="selectin",
    )

    add_ons: Mapped[list["BillAddOn"]] = relationship(
        back_populates="bill",
        cascade="all, delete-orphan",
        order_by="BillAddOn.line_no",
        lazy="selectin",
    )

    def __repr__(self) -> str:
        return f"<Bill {self.bill_number} total={self.total_amount}>"


class BillItem(Base):
    """One product line on a bill."""

    __tablename__ = "bill_items"

    __table_args__ = (
        UniqueConstraint("bill_id", "line_no", name="uq_bill_item_line_no"),
        UniqueConstraint("bill_id", "product_id", name="uq_bill_item_product"),
    )

    bill_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("bills.id"),
        nullable=False,
    )

    line_no: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
    )

    product_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        nullable=False,
    )

    quantity: Mapped[StockQuantity] = mapped_column(
        nullable=False,
    )

    discount_percentage: Mapped[Decimal | None] = mapped_column(
        nullable=True,
    )

    is_sub_unit: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
    )

    unit_price: Mapped[Decimal | None] = mapped_column(
        nullable=True,
    )

    bill: Mapped[Bill] = relationship(back_populates="items")


class BillAddOn(Base):
    """Flat charge added to a bill (freight, packing, loading)."""

    __tablename__ = "bill_add_ons"

    __table_args__ = (
        UniqueConstraint("bill_id", "line_no", name="uq_bill_add_on_line_no"),
    )

    bill_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("bills.id"),
        nullable=False,
    )

    line_no: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
    )

    title: Mapped[str] = mapped_column(
        String(200),
        nullable=False,
    )

    price: Mapped[Money] = mapped_column(
        nullable=False,
    )

    bill: Mapped[Bill] = relationship(back_populates="add_ons")
