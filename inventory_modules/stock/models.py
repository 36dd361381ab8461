"""
Stock Module Models.

Frozen results handed back to callers of the stock ledger service.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from uuid import UUID

from inventory_kernel.domain.dtos import MovementType


@dataclass(frozen=True)
class MovementResult:
    """
    Outcome of an applied movement.

    per_product_new_stock holds the stored figure of every product the
    movement changed, in first-appearance order.  Lines whose product could
    not be resolved are reported in skipped_product_ids instead.
    """

    movement_id: UUID
    movement_type: MovementType
    per_product_new_stock: dict[UUID, Decimal] = field(default_factory=dict)
    skipped_product_ids: tuple[UUID, ...] = ()

    @property
    def has_skipped_lines(self) -> bool:
        return bool(self.skipped_product_ids)
