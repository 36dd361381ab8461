"""
BaseSelector -- common base for the kernel's read side.

Selectors take the caller's Session, run queries and hand back frozen DTOs
(ProductSnapshot, PartyInfo, EnrichedBill, ...), never ORM instances.  They
never add, delete, flush or commit; the caller owns the transaction.

Selectors may import from db/, models/ and domain/, never from services/ or
the modules.
"""

from abc import ABC
from typing import Generic, TypeVar

from sqlalchemy.orm import Session

from inventory_kernel.db.base import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseSelector(ABC, Generic[ModelType]):
    """Read-only query object over one primary model."""

    def __init__(self, session: Session):
        self.session = session
