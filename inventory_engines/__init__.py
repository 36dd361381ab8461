"""
Module: inventory_engines
Responsibility:
    Package entrypoint that re-exports the public symbols of the pure
    calculation engines.  This is the canonical import surface for higher
    layers (inventory_modules).

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import inventory_kernel domain types, db/types helpers and
    exceptions (and sibling engine modules).
    MUST NOT import inventory_modules or inventory_services.

Invariants enforced:
    - Purity: engines never read the clock or the database.
    - Decimal-only arithmetic: floats are rejected at the boundary.
    - Determinism: identical inputs always produce identical outputs.

Audit relevance:
    Engine invocations are traced via the ``@traced_engine`` decorator
    (see ``inventory_engines.tracer``), emitting INVENTORY_ENGINE_TRACE log
    records with engine name, version, input fingerprint and duration.
"""

from inventory_engines.amount_words import render_amount_in_words, render_rupees_in_words
from inventory_engines.bill_totals import (
    PricedLine,
    compute_bill_total,
    compute_total,
    price_items,
)
from inventory_engines.stock_ledger import (
    EffectKind,
    MovementPlan,
    NormalizedLine,
    StockEffect,
    apply_effect,
    compensating_effect,
    plan_movement,
)
from inventory_engines.tax_breakup import (
    ItemTax,
    TaxableLine,
    TaxBreakup,
    compute_tax_breakup,
    taxable_lines,
)
from inventory_engines.units import normalize, normalize_quantity, to_sub_units

__all__ = [
    "render_amount_in_words",
    "render_rupees_in_words",
    "PricedLine",
    "compute_bill_total",
    "compute_total",
    "price_items",
    "EffectKind",
    "MovementPlan",
    "NormalizedLine",
    "StockEffect",
    "apply_effect",
    "compensating_effect",
    "plan_movement",
    "ItemTax",
    "TaxableLine",
    "TaxBreakup",
    "compute_tax_breakup",
    "taxable_lines",
    "normalize",
    "normalize_quantity",
    "to_sub_units",
]
