"""Domain models for the inventory kernel."""

from inventory_kernel.models.billing import Bill, BillAddOn, BillItem
from inventory_kernel.models.catalog import Category, Product
from inventory_kernel.models.party import Party
from inventory_kernel.models.sequence import SequenceCounter
from inventory_kernel.models.stock import StockMovement, StockMovementLine
from inventory_kernel.models.user import User

__all__ = [
    "Bill",
    "BillAddOn",
    "BillItem",
    "Category",
    "Product",
    "Party",
    "StockMovement",
    "StockMovementLine",
    "User",
    "SequenceCounter",
]
