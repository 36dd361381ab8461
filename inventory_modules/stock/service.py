"""
Stock Ledger Module Service (``inventory_modules.stock.service``).

Responsibility
--------------
Orchestrates a stock movement end to end:

1. Snapshots every referenced product in ONE query (``CatalogSelector``).
2. Plans the movement with the pure engine (``plan_movement``): validation,
   unit normalization, missing-product policy, one effect per product.
3. Applies each effect through ``StockWriter`` (row lock + single atomic
   UPDATE) and commits it on its own.
4. Records the movement and its lines as an append-only row.

Invariants
----------
- Each public method owns its transaction boundary.
- No cross-product transaction.  A storage failure on product k leaves
  products before k applied and raises ``PersistenceError`` listing the
  applied and pending products.  With ``compensate_on_failure`` the applied
  products are restored first (reverse delta for Receipt/Issue, previous
  value for Correction).
- Validation and policy failures (unknown unit, strict missing product,
  insufficient stock) happen before any stock changes.

Failure Modes
-------------
- ``EmptyMovementError`` / ``InvalidMovementQuantityError`` on bad input.
- ``ProductNotFoundError`` under the strict missing-product policy.
- ``UnsupportedUnitError`` on a sub-unit line for a product without one.
- ``InsufficientStockError`` when negative stock is disallowed.
- ``PersistenceError`` on any storage failure.

Usage::

    service = StockLedgerService(session, policy=config.ledger, clock=clock)
    result = service.apply_movement(
        MovementType.RECEIPT,
        [MovementLine(product_id=pid, quantity=Decimal("2"), is_sub_unit=True)],
        created_by=user_id,
    )
    result.per_product_new_stock[pid]
"""

from __future__ import annotations

from collections.abc import Sequence
from uuid import UUID, uuid4

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from inventory_config.schema import LedgerPolicy
from inventory_engines.stock_ledger import (
    EffectKind,
    MovementPlan,
    StockEffect,
    compensating_effect,
    plan_movement,
)
from inventory_kernel.domain.clock import Clock, SystemClock
from inventory_kernel.domain.dtos import MovementLine, MovementType
from inventory_kernel.exceptions import PersistenceError, ProductNotFoundError
from inventory_kernel.logging_config import LogContext, get_logger
from inventory_kernel.models.stock import StockMovement, StockMovementLine
from inventory_kernel.selectors.catalog_selector import CatalogSelector
from inventory_kernel.services.stock_writer import StockUpdate, StockWriter
from inventory_modules.stock.models import MovementResult

logger = get_logger("modules.stock.service")


class StockLedgerService:
    """
    Applies Receipt, Issue and Correction movements.

    Contract
    --------
    ``apply_movement`` either raises before touching stock (validation and
    policy errors), raises ``PersistenceError`` after a partial application,
    or returns a ``MovementResult`` after every resolvable product has been
    updated and the movement recorded.

    Non-goals
    ---------
    - Multi-warehouse stock, batches or lots.
    - Conflict resolution beyond per-product atomic updates.
    """

    def __init__(
        self,
        session: Session,
        policy: LedgerPolicy | None = None,
        clock: Clock | None = None,
    ):
        self._session = session
        self._policy = policy or LedgerPolicy()
        self._clock = clock or SystemClock()
        self._catalog = CatalogSelector(session)
        self._writer = StockWriter(session)

    def apply_movement(
        self,
        movement_type: MovementType | str,
        lines: Sequence[MovementLine],
        created_by: UUID,
        notes: str | None = None,
    ) -> MovementResult:
        """
        Apply a movement to the catalog and record it.

        Postconditions:
            - Every resolvable product's stock reflects the movement.
            - A StockMovement row with all lines (skipped ones included,
              base_quantity NULL) is committed.

        Raises:
            PersistenceError: storage failure; see the class docstring for
                what has been applied.
        """
        movement_type = MovementType.parse(movement_type)
        movement_id = uuid4()

        with LogContext.bind(actor_id=created_by, movement_id=movement_id):
            plan = self._plan(movement_type, lines)

            applied, vanished = self._apply_effects(plan, created_by)
            skipped = plan.skipped_product_ids + tuple(vanished)

            self._record(movement_id, plan, created_by, notes, applied, vanished)

            logger.info(
                "stock_movement_applied",
                extra={
                    "movement_type": movement_type.value,
                    "line_count": len(plan.lines),
                    "product_count": len(applied),
                    "skipped_count": len(skipped),
                },
            )
            return MovementResult(
                movement_id=movement_id,
                movement_type=movement_type,
                per_product_new_stock={u.product_id: u.new_stock for _, u in applied},
                skipped_product_ids=skipped,
            )

    # =========================================================================
    # Steps
    # =========================================================================

    def _plan(self, movement_type: MovementType, lines: Sequence[MovementLine]) -> MovementPlan:
        product_ids = [line.product_id for line in lines]
        try:
            products = self._catalog.get_products(product_ids)
            # Release the read transaction before per-product commits
            self._session.commit()
        except SQLAlchemyError as e:
            self._session.rollback()
            raise PersistenceError(
                f"catalog snapshot failed: {e}",
                pending_product_ids=[str(pid) for pid in dict.fromkeys(product_ids)],
            ) from e

        return plan_movement(
            movement_type,
            lines,
            products,
            strict=self._policy.is_strict,
            allow_negative_stock=self._policy.allow_negative_stock,
        )

    def _apply_one(self, effect: StockEffect, actor_id: UUID) -> StockUpdate:
        if effect.kind is EffectKind.ADD:
            return self._writer.add_to_stock(effect.product_id, effect.amount, actor_id)
        return self._writer.set_stock(effect.product_id, effect.amount, actor_id)

    def _apply_effects(
        self, plan: MovementPlan, actor_id: UUID
    ) -> tuple[list[tuple[StockEffect, StockUpdate]], list[UUID]]:
        applied: list[tuple[StockEffect, StockUpdate]] = []
        vanished: list[UUID] = []

        for index, effect in enumerate(plan.effects):
            try:
                update = self._apply_one(effect, actor_id)
                self._session.commit()
            except ProductNotFoundError as e:
                # Deleted between snapshot and update
                self._session.rollback()
                if self._policy.is_strict:
                    raise self._failure(
                        "product deleted during movement", plan, applied, index, actor_id
                    ) from e
                logger.warning(
                    "stock_line_skipped_product_vanished",
                    extra={"product_id": str(effect.product_id)},
                )
                vanished.append(effect.product_id)
                continue
            except SQLAlchemyError as e:
                self._session.rollback()
                raise self._failure(str(e), plan, applied, index, actor_id) from e
            applied.append((effect, update))

        return applied, vanished

    def _record(
        self,
        movement_id: UUID,
        plan: MovementPlan,
        created_by: UUID,
        notes: str | None,
        applied: list[tuple[StockEffect, StockUpdate]],
        vanished: Sequence[UUID] = (),
    ) -> None:
        gone = set(vanished)
        now = self._clock.now()
        movement = StockMovement(
            id=movement_id,
            movement_type=plan.movement_type.value,
            notes=notes,
            created_by_id=created_by,
            created_at=now,
            updated_at=now,
            lines=[
                StockMovementLine(
                    line_no=line.line_no,
                    product_id=line.product_id,
                    quantity=line.quantity,
                    is_sub_unit=line.is_sub_unit,
                    base_quantity=(
                        None if line.product_id in gone else line.base_quantity
                    ),
                )
                for line in plan.lines
            ],
        )
        try:
            self._session.add(movement)
            self._session.commit()
        except SQLAlchemyError as e:
            self._session.rollback()
            raise self._failure(
                f"movement record failed: {e}", plan, applied, len(plan.effects), created_by
            ) from e

    # =========================================================================
    # Failure handling
    # =========================================================================

    def _failure(
        self,
        reason: str,
        plan: MovementPlan,
        applied: list[tuple[StockEffect, StockUpdate]],
        failed_index: int,
        actor_id: UUID,
    ) -> PersistenceError:
        """Log the partial application, compensate if enabled, build the error."""
        applied_ids = [str(u.product_id) for _, u in applied]
        pending_ids = [str(e.product_id) for e in plan.effects[failed_index:]]
        logger.error(
            "stock_movement_partially_applied",
            extra={
                "reason": reason,
                "applied_product_ids": applied_ids,
                "pending_product_ids": pending_ids,
            },
        )

        compensated = False
        if self._policy.compensate_on_failure and applied:
            compensated = self._compensate(applied, actor_id)

        return PersistenceError(
            reason,
            applied_product_ids=applied_ids,
            pending_product_ids=pending_ids,
            compensated=compensated,
        )

    def _compensate(
        self,
        applied: list[tuple[StockEffect, StockUpdate]],
        actor_id: UUID,
    ) -> bool:
        """
        Undo applied effects, most recent first.

        Returns:
            True if every product was restored.  A failure here is logged
            and reported through ``PersistenceError.compensated``.
        """
        for effect, update in reversed(applied):
            reverse = compensating_effect(effect, update.previous_stock)
            try:
                self._apply_one(reverse, actor_id)
                self._session.commit()
            except (SQLAlchemyError, ProductNotFoundError):
                self._session.rollback()
                logger.error(
                    "stock_compensation_failed",
                    extra={"product_id": str(effect.product_id)},
                    exc_info=True,
                )
                return False
            logger.info(
                "stock_effect_compensated",
                extra={
                    "product_id": str(effect.product_id),
                    "effect_kind": reverse.kind.value,
                    "amount": str(reverse.amount),
                },
            )
        return True
