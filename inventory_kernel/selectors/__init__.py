"""Selectors for the inventory kernel (read side)."""

from inventory_kernel.selectors.catalog_selector import CatalogSelector
from inventory_kernel.selectors.enrichment_selector import (
    EnrichedBill,
    EnrichedBillItem,
    EnrichedMovement,
    EnrichedMovementLine,
    EnrichmentSelector,
    Page,
    ProductDetails,
)
from inventory_kernel.selectors.reference_selector import ReferenceSelector

__all__ = [
    "CatalogSelector",
    "ReferenceSelector",
    "EnrichmentSelector",
    "EnrichedBill",
    "EnrichedBillItem",
    "EnrichedMovement",
    "EnrichedMovementLine",
    "Page",
    "ProductDetails",
]
