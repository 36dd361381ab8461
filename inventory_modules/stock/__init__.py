"""
Stock Module (``inventory_modules.stock``).

Responsibility
--------------
Applies stock movements to the catalog's running stock through the pure
stock ledger engine (``inventory_engines.stock_ledger``) and the kernel's
atomic StockWriter, and records each movement as an append-only row.

Invariants
----------
- One atomic update per product, committed per product.  There is no
  transaction spanning products; see ``StockLedgerService``.
"""

from inventory_modules.stock.models import MovementResult
from inventory_modules.stock.service import StockLedgerService

__all__ = ["MovementResult", "StockLedgerService"]
