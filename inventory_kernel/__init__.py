"""
Inventory Kernel

Stock ledger and bill computation core for a small trading business:
- Unit-of-measure normalization (base unit + sub-unit)
- Per-product atomic stock updates for Receipt, Issue and Correction
- Bill totals with per-item discounts and add-on charges
- Append-only movements and bills with read-only enrichment
"""

__version__ = "0.1.0"
