"""
Stock Ledger Engine - turn a movement's lines into per-product stock effects.

A movement (Receipt, Issue or Correction) arrives as an ordered list of
operator lines.  This engine validates the lines, normalizes every quantity
into the product's base unit and coalesces the lines into exactly ONE effect
per product, so the persistence layer can apply each product with a single
atomic update:

    Receipt     ADD  +sum(base quantities)
    Issue       ADD  -sum(base quantities)
    Correction  SET  last base quantity for the product

Lines for the same product accumulate left to right; a later Correction line
overrides an earlier one.  Projected stock figures are computed from the
snapshot the caller passes in and are informational: the database applies
the effect to whatever the row holds at update time.

Pure functions with no I/O.

Usage:
    from inventory_engines.stock_ledger import plan_movement

    plan = plan_movement(
        MovementType.RECEIPT,
        [MovementLine(product_id=p.id, quantity=Decimal("2"), is_sub_unit=True)],
        {p.id: p},
    )
    plan.effects[0].amount      # Decimal("24") for boxes of 12
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from uuid import UUID

from inventory_engines.tracer import traced_engine
from inventory_engines.units import normalize
from inventory_kernel.db.types import ZERO
from inventory_kernel.domain.dtos import MovementLine, MovementType, ProductSnapshot
from inventory_kernel.exceptions import (
    EmptyMovementError,
    InsufficientStockError,
    InvalidMovementQuantityError,
    ProductNotFoundError,
)
from inventory_kernel.logging_config import get_logger

logger = get_logger("engines.stock_ledger")


class EffectKind(str, Enum):
    """How an effect changes the stored stock figure."""

    ADD = "add"  # current_stock = current_stock + amount
    SET = "set"  # current_stock = amount


@dataclass(frozen=True)
class NormalizedLine:
    """
    An operator line after unit normalization.

    base_quantity is None when the line's product is unknown and the line
    was skipped.
    """

    line_no: int
    product_id: UUID
    quantity: Decimal
    is_sub_unit: bool
    base_quantity: Decimal | None

    @property
    def skipped(self) -> bool:
        return self.base_quantity is None


@dataclass(frozen=True)
class StockEffect:
    """The single change a movement makes to one product."""

    product_id: UUID
    kind: EffectKind
    amount: Decimal
    snapshot_stock: Decimal

    @property
    def projected_stock(self) -> Decimal:
        return apply_effect(self.snapshot_stock, self)


@dataclass(frozen=True)
class MovementPlan:
    """Validated, normalized and coalesced movement."""

    movement_type: MovementType
    lines: tuple[NormalizedLine, ...]
    effects: tuple[StockEffect, ...]
    skipped_product_ids: tuple[UUID, ...]

    @property
    def product_ids(self) -> tuple[UUID, ...]:
        return tuple(e.product_id for e in self.effects)


def apply_effect(stock: Decimal, effect: StockEffect) -> Decimal:
    """Stock figure after applying ``effect`` to ``stock``."""
    if effect.kind is EffectKind.ADD:
        return stock + effect.amount
    return effect.amount


def compensating_effect(effect: StockEffect, previous_stock: Decimal) -> StockEffect:
    """
    Effect that undoes ``effect``.

    ADD effects are undone by the opposite delta, which is correct even if
    other movements touched the product in between.  SET effects can only be
    undone by restoring the value the row held before the SET.
    """
    if effect.kind is EffectKind.ADD:
        return StockEffect(
            product_id=effect.product_id,
            kind=EffectKind.ADD,
            amount=-effect.amount,
            snapshot_stock=apply_effect(previous_stock, effect),
        )
    return StockEffect(
        product_id=effect.product_id,
        kind=EffectKind.SET,
        amount=previous_stock,
        snapshot_stock=effect.amount,
    )


def _validate_quantity(movement_type: MovementType, line: MovementLine) -> None:
    if not line.quantity.is_finite():
        raise InvalidMovementQuantityError(
            str(line.product_id), str(line.quantity), movement_type.value
        )
    if movement_type is MovementType.CORRECTION:
        valid = line.quantity >= ZERO
    else:
        valid = line.quantity > ZERO
    if not valid:
        raise InvalidMovementQuantityError(
            str(line.product_id), str(line.quantity), movement_type.value
        )


@traced_engine(
    "stock_ledger",
    "1.0",
    fingerprint_fields=("movement_type", "lines", "strict", "allow_negative_stock"),
)
def plan_movement(
    movement_type: MovementType | str,
    lines: Sequence[MovementLine],
    products: Mapping[UUID, ProductSnapshot],
    *,
    strict: bool = False,
    allow_negative_stock: bool = True,
) -> MovementPlan:
    """
    Validate, normalize and coalesce a movement.

    Args:
        movement_type: Receipt, Issue or Correction.
        lines: Operator lines in entry order.
        products: Snapshot of the referenced products, keyed by id.
            Products missing from the mapping are unknown.
        strict: Reject the movement when any product is unknown instead of
            skipping those lines.
        allow_negative_stock: When False, an Issue that would take a
            product below zero (against the snapshot) is rejected.

    Raises:
        EmptyMovementError: no lines.
        InvalidMovementQuantityError: quantity <= 0 on a Receipt/Issue
            line, or < 0 on a Correction line.
        ProductNotFoundError: unknown product under ``strict``.
        UnsupportedUnitError: a sub-unit line for a product without one.
        InsufficientStockError: negative projected stock while disallowed.
    """
    movement_type = MovementType.parse(movement_type)
    if not lines:
        raise EmptyMovementError(movement_type.value)

    for line in lines:
        _validate_quantity(movement_type, line)

    if strict:
        for line in lines:
            if line.product_id not in products:
                raise ProductNotFoundError(str(line.product_id))

    normalized: list[NormalizedLine] = []
    skipped: list[UUID] = []
    # product_id -> running amount, insertion order = first appearance
    amounts: dict[UUID, Decimal] = {}

    for line_no, line in enumerate(lines, start=1):
        product = products.get(line.product_id)
        if product is None:
            logger.warning(
                "stock_line_skipped_unknown_product",
                extra={
                    "product_id": str(line.product_id),
                    "line_no": line_no,
                    "movement_type": movement_type.value,
                },
            )
            if line.product_id not in skipped:
                skipped.append(line.product_id)
            normalized.append(
                NormalizedLine(
                    line_no=line_no,
                    product_id=line.product_id,
                    quantity=line.quantity,
                    is_sub_unit=line.is_sub_unit,
                    base_quantity=None,
                )
            )
            continue

        base = normalize(product, line.quantity, line.is_sub_unit)
        normalized.append(
            NormalizedLine(
                line_no=line_no,
                product_id=line.product_id,
                quantity=line.quantity,
                is_sub_unit=line.is_sub_unit,
                base_quantity=base,
            )
        )

        if movement_type is MovementType.CORRECTION:
            amounts[line.product_id] = base
        elif movement_type is MovementType.RECEIPT:
            amounts[line.product_id] = amounts.get(line.product_id, ZERO) + base
        else:
            amounts[line.product_id] = amounts.get(line.product_id, ZERO) - base

    kind = EffectKind.SET if movement_type is MovementType.CORRECTION else EffectKind.ADD
    effects = tuple(
        StockEffect(
            product_id=product_id,
            kind=kind,
            amount=amount,
            snapshot_stock=products[product_id].current_stock,
        )
        for product_id, amount in amounts.items()
    )

    if not allow_negative_stock and movement_type is MovementType.ISSUE:
        for effect in effects:
            if effect.projected_stock < ZERO:
                raise InsufficientStockError(
                    str(effect.product_id),
                    str(effect.snapshot_stock),
                    str(-effect.amount),
                )

    return MovementPlan(
        movement_type=movement_type,
        lines=tuple(normalized),
        effects=effects,
        skipped_product_ids=tuple(skipped),
    )
