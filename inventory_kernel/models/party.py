"""
Module: inventory_kernel.models.party
Responsibility: ORM persistence for billing parties (customers).  Parties
    are maintained by the portal's party screens; the kernel only reads
    them when creating and enriching bills.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - state_code is the two-digit GST state code; it decides whether an
      invoice is intra-state (CGST + SGST) or inter-state (IGST).
"""

from sqlalchemy import Boolean, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from inventory_kernel.db.base import TrackedBase


class Party(TrackedBase):
    """Customer a bill is raised against."""

    __tablename__ = "parties"

    __table_args__ = (Index("idx_party_name", "name"),)

    name: Mapped[str] = mapped_column(
        String(200),
        nullable=False,
    )

    address: Mapped[str] = mapped_column(
        String(1000),
        nullable=False,
    )

    gst_number: Mapped[str | None] = mapped_column(
        String(15),
        nullable=True,
    )

    state: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
    )

    state_code: Mapped[str] = mapped_column(
        String(2),
        nullable=False,
    )

    is_active: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True,
    )

    def __repr__(self) -> str:
        return f"<Party {self.name} ({self.state_code})>"
