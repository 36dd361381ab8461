"""
Inventory Modules.

Thin orchestration layers over the inventory kernel and engines.  Each
module owns its transaction boundary and composes kernel selectors,
kernel services and pure engines:

- Stock: apply Receipt / Issue / Correction movements to the catalog
- Billing: create invoices and proforma invoices, print tax breakups

Actual calculation lives in ``inventory_engines``; persistence primitives
live in ``inventory_kernel``.
"""
