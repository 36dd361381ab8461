"""
ORM-Level Immutability Enforcement.

===============================================================================
WHY THIS EXISTS
===============================================================================

Stock movements and bills are the audit trail of the business.  A wrong
movement is fixed by a follow-up Correction movement, and a wrong bill by a
new bill; neither is ever edited or removed in place.

SQLAlchemy fires events before UPDATE/DELETE operations reach the database.
We register listeners that intercept these events:

    session.flush()
         |
         v
    [before_update event] --> _reject_update() --> ImmutabilityViolationError
         |
         v
    [before_delete event] --> _reject_delete() --> ImmutabilityViolationError
         |
         v
    SQL sent to database (only if checks pass)

===============================================================================
PROTECTED ENTITIES
===============================================================================

Entity              | When Immutable            | Why
--------------------|---------------------------|--------------------------------
StockMovement       | ALWAYS (from creation)    | Ledger history
StockMovementLine   | ALWAYS (from creation)    | Lines are part of the movement
Bill                | ALWAYS (from creation)    | Issued document
BillItem            | ALWAYS (from creation)    | Items fixed at creation
BillAddOn           | ALWAYS (from creation)    | Charges fixed at creation

Product.current_stock is NOT protected here: it is the running balance the
ledger maintains through atomic UPDATE statements.

===============================================================================
USAGE
===============================================================================

    from inventory_kernel.db.immutability import register_immutability_listeners
    register_immutability_listeners()  # Called once at startup

To temporarily disable (TESTS ONLY - never in production):

    unregister_immutability_listeners()

===============================================================================
"""

from sqlalchemy import event

from inventory_kernel.exceptions import ImmutabilityViolationError
from inventory_kernel.logging_config import get_logger

logger = get_logger("db.immutability")

# Audit metadata may be touched without changing the record's content
_AUDIT_FIELDS = frozenset({"updated_at", "updated_by_id"})


def _changed_fields(target) -> set[str]:
    from sqlalchemy import inspect

    state = inspect(target)
    changed = set()
    for attr in state.mapper.column_attrs:
        history = state.attrs[attr.key].history
        if history.has_changes():
            changed.add(attr.key)
    return changed


def _reject_update(mapper, connection, target):
    """
    Prevent updates to append-only ledger and billing records.

    Flushes touching only audit metadata (or no columns at all) pass.
    """
    changed = _changed_fields(target)
    if changed <= _AUDIT_FIELDS:
        return

    entity_type = type(target).__name__
    logger.error(
        "immutability_violation_blocked",
        extra={
            "entity_type": entity_type,
            "entity_id": str(target.id),
            "operation": "UPDATE",
            "fields": sorted(changed),
        },
    )
    raise ImmutabilityViolationError(
        entity_type=entity_type,
        entity_id=str(target.id),
        reason=f"{entity_type} records are append-only and cannot be modified",
    )


def _reject_delete(mapper, connection, target):
    """Prevent deletion of append-only ledger and billing records."""
    entity_type = type(target).__name__
    logger.error(
        "immutability_violation_blocked",
        extra={
            "entity_type": entity_type,
            "entity_id": str(target.id),
            "operation": "DELETE",
        },
    )
    raise ImmutabilityViolationError(
        entity_type=entity_type,
        entity_id=str(target.id),
        reason=f"{entity_type} records cannot be deleted",
    )


def _protected_models() -> tuple:
    from inventory_kernel.models.billing import Bill, BillAddOn, BillItem
    from inventory_kernel.models.stock import StockMovement, StockMovementLine

    return (StockMovement, StockMovementLine, Bill, BillItem, BillAddOn)


def register_immutability_listeners():
    """
    Register all immutability enforcement event listeners.

    Call this after all models are imported but before any database
    operations begin.  Calling it twice is harmless.
    """
    for model in _protected_models():
        if not event.contains(model, "before_update", _reject_update):
            event.listen(model, "before_update", _reject_update)
        if not event.contains(model, "before_delete", _reject_delete):
            event.listen(model, "before_delete", _reject_delete)

    logger.debug("immutability_listeners_registered")


def _safe_remove_listener(target, event_name, listener_fn):
    """
    Safely remove an event listener, ignoring if not registered.
    """
    if event.contains(target, event_name, listener_fn):
        event.remove(target, event_name, listener_fn)


def unregister_immutability_listeners():
    """
    Remove immutability enforcement event listeners.

    WARNING: Only use this in tests where you need to intentionally
    violate immutability rules to verify detection.
    """
    for model in _protected_models():
        _safe_remove_listener(model, "before_update", _reject_update)
        _safe_remove_listener(model, "before_delete", _reject_delete)

    logger.debug("immutability_listeners_unregistered")
