"""
StockWriter -- atomic per-product stock updates.

Responsibility:
    Changes one product's stock figure as an atomic read-modify-write: the
    row is locked (``SELECT ... FOR UPDATE``) to read the previous figure,
    then changed by a single UPDATE whose new value is computed by the
    database (``current_stock = current_stock + :delta`` or
    ``current_stock = :value``).  Two concurrent movements on the same
    product therefore serialize on the row and never lose an update.

Architecture position:
    Kernel > Services -- imperative shell.  Called by the stock ledger
    module service, which commits after every product.

Invariants enforced:
    - Flush-only: never commits or rolls back.
    - The stored figure is never computed in Python from a stale read.

Failure modes:
    - ProductNotFoundError if the product disappeared after the snapshot.
    - SQLAlchemyError from the driver propagates unchanged.
"""

from dataclasses import dataclass
from decimal import Decimal
from uuid import UUID

from sqlalchemy import select, update

from inventory_kernel.exceptions import ProductNotFoundError
from inventory_kernel.logging_config import get_logger
from inventory_kernel.models.catalog import Product
from inventory_kernel.services.base import BaseService

logger = get_logger("services.stock_writer")


@dataclass(frozen=True)
class StockUpdate:
    """Before/after figures of one applied change."""

    product_id: UUID
    previous_stock: Decimal
    new_stock: Decimal


class StockWriter(BaseService[Product]):
    """Applies stock changes one product at a time."""

    def add_to_stock(self, product_id: UUID, delta: Decimal, actor_id: UUID) -> StockUpdate:
        """``current_stock += delta`` (negative delta for issues)."""
        return self._apply(product_id, Product.current_stock + delta, "add", delta, actor_id)

    def set_stock(self, product_id: UUID, value: Decimal, actor_id: UUID) -> StockUpdate:
        """``current_stock = value``."""
        return self._apply(product_id, value, "set", value, actor_id)

    def _current_stock(self, product_id: UUID, lock: bool) -> Decimal | None:
        stmt = select(Product.current_stock).where(Product.id == product_id)
        if lock:
            stmt = stmt.with_for_update()
        return self.session.execute(stmt).scalar_one_or_none()

    def _apply(self, product_id, new_value, operation, amount, actor_id) -> StockUpdate:
        previous = self._current_stock(product_id, lock=True)
        if previous is None:
            raise ProductNotFoundError(str(product_id))

        self.session.execute(
            update(Product)
            .where(Product.id == product_id)
            .values(current_stock=new_value, updated_by_id=actor_id)
            .execution_options(synchronize_session=False)
        )
        new_stock = self._current_stock(product_id, lock=False)

        logger.debug(
            "stock_updated",
            extra={
                "product_id": str(product_id),
                "operation": operation,
                "amount": str(amount),
                "previous_stock": str(previous),
                "new_stock": str(new_stock),
            },
        )
        return StockUpdate(
            product_id=product_id,
            previous_stock=previous,
            new_stock=new_stock,
        )
