"""
BaseService -- common base for kernel write services.

Kernel services (CatalogService, StockWriter) stage changes with
``session.flush()`` inside the caller's transaction.  Commit and rollback
belong to the module services (StockLedgerService, BillingService), which
decide how much work one transaction covers; for the stock ledger that is a
single product.
"""

from abc import ABC
from typing import Generic, TypeVar

from sqlalchemy.orm import Session

from inventory_kernel.db.base import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseService(ABC, Generic[ModelType]):
    """
    Flush-only write service over one primary model.

    Reads that other services need go through ``inventory_kernel/selectors/``.
    """

    def __init__(self, session: Session):
        self.session = session
