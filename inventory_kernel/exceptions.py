"""
Typed Exception Hierarchy for the Inventory Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Stock and billing errors have to reach request handlers in a form they can
map to a response without parsing message strings:

  1. Every error has a TYPED exception class (catch by type, not message)
  2. Every exception has a CODE attribute (machine-readable, API-safe)
  3. Exceptions carry structured DATA (not just a message string)

Example:
    try:
        total = compute_bill_total(items, add_ons, catalog)
    except UnsupportedUnitError as e:
        api_response(status=422, code=e.code, product=e.product_id)
    except PriceNotFoundError as e:
        api_response(status=404, code=e.code, product=e.product_id)

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    InventoryKernelError (base)
    |
    +-- UnitError
    |   +-- UnsupportedUnitError
    |   +-- InvalidConversionRateError
    |
    +-- CatalogError
    |   +-- ProductNotFoundError
    |   |   +-- PriceNotFoundError
    |   +-- CategoryNotFoundError
    |   +-- PartyNotFoundError
    |
    +-- StockError
    |   +-- EmptyMovementError
    |   +-- InvalidMovementQuantityError
    |   +-- InsufficientStockError
    |
    +-- BillingError
    |   +-- EmptyBillError
    |   +-- DuplicateBillItemError
    |   +-- InvalidBillQuantityError
    |   +-- InvalidDiscountError
    |   +-- BillNotFoundError
    |
    +-- PersistenceError
    |
    +-- QueryError
    |   +-- InvalidDateRangeError
    |
    +-- ImmutabilityError
    |   +-- ImmutabilityViolationError
    |
    +-- RateLimitExceededError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category     | Code                        | When Raised
-------------|-----------------------------|-----------------------------------------
Unit         | UNSUPPORTED_UNIT            | Sub-unit quantity for product without one
             | INVALID_CONVERSION_RATE     | Sub-unit conversion rate <= 0
-------------|-----------------------------|-----------------------------------------
Catalog      | PRODUCT_NOT_FOUND           | Referenced product missing
             | PRICE_NOT_FOUND             | Product missing while pricing a bill
             | CATEGORY_NOT_FOUND          | Category id doesn't exist
             | PARTY_NOT_FOUND             | Party id doesn't exist
-------------|-----------------------------|-----------------------------------------
Stock        | EMPTY_MOVEMENT              | Movement has no lines
             | INVALID_MOVEMENT_QUANTITY   | Quantity out of range for movement type
             | INSUFFICIENT_STOCK          | Issue below zero when negatives disallowed
-------------|-----------------------------|-----------------------------------------
Billing      | EMPTY_BILL                  | Bill has no items
             | DUPLICATE_BILL_ITEM         | Same product twice in one bill
             | INVALID_BILL_QUANTITY       | Item quantity non-finite or not positive
             | INVALID_DISCOUNT            | Discount outside 0-100
             | BILL_NOT_FOUND              | Bill id or number doesn't exist
-------------|-----------------------------|-----------------------------------------
Persistence  | PERSISTENCE_ERROR           | Storage failure while applying stock
-------------|-----------------------------|-----------------------------------------
Query        | INVALID_DATE_RANGE          | end date before start date
-------------|-----------------------------|-----------------------------------------
Immutability | IMMUTABILITY_VIOLATION      | Update/delete of a movement or bill
-------------|-----------------------------|-----------------------------------------
Rate limit   | RATE_LIMIT_EXCEEDED         | Client exceeded its request window

===============================================================================
HANDLING PATTERNS
===============================================================================

1. CALLER-CORRECTABLE (4xx):
   UnitError, CatalogError, StockError, BillingError, QueryError.

2. TRANSIENT (retry the whole movement after reconciling):

    except PersistenceError as e:
        log.error("stock update failed", extra={
            "applied": e.applied_product_ids,
            "pending": e.pending_product_ids,
        })

   Products listed in ``applied_product_ids`` were NOT rolled back (unless
   compensation was enabled and succeeded, see ``compensated``).  Reconcile
   them by hand or with a follow-up Correction movement.

3. NEVER RETRY ImmutabilityViolationError -- it is a programming error.
"""


class InventoryKernelError(Exception):
    """
    Base exception for all inventory kernel errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "INVENTORY_KERNEL_ERROR"


# Unit-related exceptions


class UnitError(InventoryKernelError):
    """Base exception for unit-of-measure errors."""

    code: str = "UNIT_ERROR"


class UnsupportedUnitError(UnitError):
    """A quantity was flagged as sub-unit for a product without a sub-unit."""

    code: str = "UNSUPPORTED_UNIT"

    def __init__(self, product_id: str, base_unit: str | None = None):
        self.product_id = product_id
        self.base_unit = base_unit
        super().__init__(
            f"Product {product_id} has no sub-unit configured "
            f"(base unit: {base_unit})"
        )


class InvalidConversionRateError(UnitError):
    """Sub-unit conversion rate is zero, negative or not a number."""

    code: str = "INVALID_CONVERSION_RATE"

    def __init__(self, conversion_rate: str):
        self.conversion_rate = conversion_rate
        super().__init__(
            f"Sub-unit conversion rate must be positive, got {conversion_rate}"
        )


# Catalog-related exceptions


class CatalogError(InventoryKernelError):
    """Base exception for catalog lookups."""

    code: str = "CATALOG_ERROR"


class ProductNotFoundError(CatalogError):
    """Product with given ID was not found."""

    code: str = "PRODUCT_NOT_FOUND"

    def __init__(self, product_id: str):
        self.product_id = product_id
        super().__init__(f"Product not found: {product_id}")


class PriceNotFoundError(ProductNotFoundError):
    """Product could not be resolved while pricing a bill item."""

    code: str = "PRICE_NOT_FOUND"

    def __init__(self, product_id: str):
        super().__init__(product_id)
        self.args = (f"No price available for product: {product_id}",)


class CategoryNotFoundError(CatalogError):
    """Category with given ID was not found."""

    code: str = "CATEGORY_NOT_FOUND"

    def __init__(self, category_id: str):
        self.category_id = category_id
        super().__init__(f"Category not found: {category_id}")


class PartyNotFoundError(CatalogError):
    """Party with given ID was not found."""

    code: str = "PARTY_NOT_FOUND"

    def __init__(self, party_id: str):
        self.party_id = party_id
        super().__init__(f"Party not found: {party_id}")


# Stock-related exceptions


class StockError(InventoryKernelError):
    """Base exception for stock movement errors."""

    code: str = "STOCK_ERROR"


class EmptyMovementError(StockError):
    """A stock movement was submitted without lines."""

    code: str = "EMPTY_MOVEMENT"

    def __init__(self, movement_type: str):
        self.movement_type = movement_type
        super().__init__(f"{movement_type} movement requires at least one line")


class InvalidMovementQuantityError(StockError):
    """Line quantity is not allowed for the movement type."""

    code: str = "INVALID_MOVEMENT_QUANTITY"

    def __init__(self, product_id: str, quantity: str, movement_type: str):
        self.product_id = product_id
        self.quantity = quantity
        self.movement_type = movement_type
        super().__init__(
            f"Invalid quantity {quantity} for product {product_id} "
            f"in {movement_type} movement"
        )


class InsufficientStockError(StockError):
    """An issue would take stock below zero while negatives are disallowed."""

    code: str = "INSUFFICIENT_STOCK"

    def __init__(self, product_id: str, current_stock: str, requested: str):
        self.product_id = product_id
        self.current_stock = current_stock
        self.requested = requested
        super().__init__(
            f"Insufficient stock for product {product_id}: "
            f"current={current_stock}, requested={requested}"
        )


# Billing-related exceptions


class BillingError(InventoryKernelError):
    """Base exception for bill creation errors."""

    code: str = "BILLING_ERROR"


class EmptyBillError(BillingError):
    """A bill was submitted without items."""

    code: str = "EMPTY_BILL"

    def __init__(self):
        super().__init__("At least one item is required")


class DuplicateBillItemError(BillingError):
    """The same product appears more than once in a bill."""

    code: str = "DUPLICATE_BILL_ITEM"

    def __init__(self, product_ids: list[str]):
        self.product_ids = product_ids
        super().__init__(
            "Same product cannot be added multiple times in the same bill: "
            + ", ".join(product_ids)
        )


class InvalidBillQuantityError(BillingError):
    """Bill item quantity is not a finite positive number."""

    code: str = "INVALID_BILL_QUANTITY"

    def __init__(self, product_id: str, quantity: str):
        self.product_id = product_id
        self.quantity = quantity
        super().__init__(
            f"Quantity must be a finite positive number for product "
            f"{product_id}, got {quantity}"
        )


class InvalidDiscountError(BillingError):
    """Discount percentage outside 0-100."""

    code: str = "INVALID_DISCOUNT"

    def __init__(self, product_id: str, discount_percentage: str):
        self.product_id = product_id
        self.discount_percentage = discount_percentage
        super().__init__(
            f"Discount percentage must be between 0 and 100 for product "
            f"{product_id}, got {discount_percentage}"
        )


class BillNotFoundError(BillingError):
    """A bill id or number does not resolve."""

    code: str = "BILL_NOT_FOUND"

    def __init__(self, bill_ref: str):
        self.bill_ref = bill_ref
        super().__init__(f"Bill not found: {bill_ref}")


# Persistence


class PersistenceError(InventoryKernelError):
    """
    Storage failure while applying a ledger update.

    Transient from the caller's point of view.  Per-product updates that were
    already committed in the same batch are listed in ``applied_product_ids``
    and are NOT rolled back unless ``compensated`` is True.
    """

    code: str = "PERSISTENCE_ERROR"

    def __init__(
        self,
        reason: str,
        applied_product_ids: list[str] | None = None,
        pending_product_ids: list[str] | None = None,
        compensated: bool = False,
    ):
        self.reason = reason
        self.applied_product_ids = applied_product_ids or []
        self.pending_product_ids = pending_product_ids or []
        self.compensated = compensated
        super().__init__(
            f"Persistence failure: {reason} "
            f"(applied={len(self.applied_product_ids)}, "
            f"pending={len(self.pending_product_ids)}, "
            f"compensated={compensated})"
        )


# Query-related exceptions


class QueryError(InventoryKernelError):
    """Base exception for read-side query errors."""

    code: str = "QUERY_ERROR"


class InvalidDateRangeError(QueryError):
    """End date precedes start date."""

    code: str = "INVALID_DATE_RANGE"

    def __init__(self, start: str, end: str):
        self.start = start
        self.end = end
        super().__init__(
            f"End date must be newer than or equal to start date "
            f"(start={start}, end={end})"
        )


# Immutability-related exceptions


class ImmutabilityError(InventoryKernelError):
    """Base exception for immutability-related errors."""

    code: str = "IMMUTABILITY_ERROR"


class ImmutabilityViolationError(ImmutabilityError):
    """
    Attempted to modify or delete an immutable record.

    Stock movements and bills are append-only ledger entries; corrections
    are expressed as new movements.
    """

    code: str = "IMMUTABILITY_VIOLATION"

    def __init__(self, entity_type: str, entity_id: str, reason: str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        self.reason = reason
        super().__init__(
            f"Immutability violation on {entity_type} {entity_id}: {reason}"
        )


# Rate limiting


class RateLimitExceededError(InventoryKernelError):
    """Client exceeded the allowed number of requests in the window."""

    code: str = "RATE_LIMIT_EXCEEDED"

    def __init__(self, client_key: str, limit: int, window_seconds: int, retry_after: float):
        self.client_key = client_key
        self.limit = limit
        self.window_seconds = window_seconds
        self.retry_after = retry_after
        super().__init__(
            f"Rate limit exceeded for {client_key}: {limit} requests per "
            f"{window_seconds}s (retry after {retry_after:.1f}s)"
        )
