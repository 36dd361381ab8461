"""
Module: inventory_kernel.models.stock
Responsibility: ORM persistence for stock movements -- the append-only
    record of every Receipt, Issue and Correction applied to the catalog.
Architecture position: Kernel > Models.  May import from db/base.py and
    db/types.py only.

Invariants enforced:
    - StockMovement and StockMovementLine rows are immutable from creation
      (ORM listeners in db/immutability.py).  Mistakes are fixed by a
      follow-up Correction movement, never by editing history.
    - Lines keep the operator's order (line_no), which is the order the
      ledger applied them in.
    - base_quantity records the normalized quantity actually applied; it is
      NULL for a line whose product could not be resolved (skipped).

Failure modes:
    - ImmutabilityViolationError on any UPDATE or DELETE.
"""

from decimal import Decimal
from uuid import UUID

from sqlalchemy import Boolean, ForeignKey, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from inventory_kernel.db.base import Base, TrackedBase
from inventory_kernel.db.types import StockQuantity, UUIDString


class StockMovement(TrackedBase):
    """
    Header of one stock movement.

    movement_type holds a MovementType value ("receipt", "issue",
    "correction").
    """

    __tablename__ = "stock_movements"

    __table_args__ = (
        Index("idx_movement_type", "movement_type"),
        Index("idx_movement_created_at", "created_at"),
    )

    movement_type: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
    )

    notes: Mapped[str | None] = mapped_column(
        String(4000),
        nullable=True,
    )

    lines: Mapped[list["StockMovementLine"]] = relationship(
        back_populates="movement",
        cascade="all, delete-orphan",
        order_by="StockMovementLine.line_no",
        lazy="selectin",
    )

    def __repr__(self) -> str:
        return f"<StockMovement {self.id} {self.movement_type}>"


class StockMovementLine(Base):
    """One product line of a stock movement."""

    __tablename__ = "stock_movement_lines"

    __table_args__ = (
        UniqueConstraint("movement_id", "line_no", name="uq_movement_line_no"),
        Index("idx_movement_line_product", "product_id"),
    )

    movement_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("stock_movements.id"),
        nullable=False,
    )

    line_no: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
    )

    # Soft reference: products may be deleted after the movement
    product_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        nullable=False,
    )

    quantity: Mapped[StockQuantity] = mapped_column(
        nullable=False,
    )

    is_sub_unit: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
    )

    base_quantity: Mapped[Decimal | None] = mapped_column(
        nullable=True,
    )

    movement: Mapped[StockMovement] = relationship(back_populates="lines")

    def __repr__(self) -> str:
        return f"<StockMovementLine {self.line_no}: {self.product_id} x {self.quantity}>"
