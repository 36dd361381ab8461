"""
Module: inventory_kernel.db.base
Responsibility: Declarative bases for the inventory ORM models: catalog,
    parties, users, stock movements, bills and sequence counters.
Architecture position: Kernel > DB.  Imports only db/types.py.  ALL model
    files import from here; this module MUST NOT import from models/,
    services/, selectors/, domain/, or outer layers.

Invariants enforced:
    - Every row has a uuid4 primary key stored as String(36).
    - Money, StockQuantity and bare Decimal columns are Numeric(38, 9);
      NEVER float for prices or stock figures.
    - Datetimes are timezone-aware.
    - TrackedBase rows always record their creator.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import ClassVar
from uuid import UUID, uuid4

from sqlalchemy import BigInteger, Date, DateTime, Numeric, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from inventory_kernel.db.types import COLUMN_TYPES, UUIDString


class Base(DeclarativeBase):
    """Declarative base: uuid4 ``id`` plus the shared annotation-to-column map."""

    type_annotation_map: ClassVar[dict] = {
        **COLUMN_TYPES,
        Decimal: Numeric(38, 9),
        datetime: DateTime(timezone=True),
        date: Date,
        UUID: UUIDString(),
        int: BigInteger,
    }

    id: Mapped[UUID] = mapped_column(
        UUIDString(),
        primary_key=True,
        default=uuid4,
    )


class TrackedBase(Base):
    """
    Base for records someone is accountable for (products, parties,
    movements, bills).

    created_at comes from the database unless the writer supplies it; the
    stock ledger and billing services stamp it from their Clock so tests can
    pin it.  updated_at / updated_by_id are audit metadata and may change
    even on append-only records.
    """

    __abstract__ = True

    created_at: Mapped[datetime] = mapped_column(
        server_default=func.now(),
        nullable=False,
    )

    updated_at: Mapped[datetime] = mapped_column(
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    created_by_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        nullable=False,
    )

    updated_by_id: Mapped[UUID | None] = mapped_column(
        UUIDString(),
        nullable=True,
    )
