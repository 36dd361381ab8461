"""Kernel services (write side, flush-only)."""

from inventory_kernel.services.catalog_service import CatalogService
from inventory_kernel.services.sequence_service import SequenceService
from inventory_kernel.services.stock_writer import StockUpdate, StockWriter

__all__ = [
    "CatalogService",
    "SequenceService",
    "StockUpdate",
    "StockWriter",
]
