"""
Module: inventory_kernel.models.user
Responsibility: ORM persistence for portal users.  The kernel reads users
    only to show who created a stock movement.
Architecture position: Kernel > Models.  May import from db/base.py only.
"""

from datetime import datetime

from sqlalchemy import DateTime, String, func
from sqlalchemy.orm import Mapped, mapped_column

from inventory_kernel.db.base import Base


class User(Base):
    """Portal user (admin or staff)."""

    __tablename__ = "users"

    email: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        unique=True,
    )

    name: Mapped[str] = mapped_column(
        String(200),
        nullable=False,
    )

    user_type: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default="staff",
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<User {self.email}>"
