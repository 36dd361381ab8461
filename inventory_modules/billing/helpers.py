"""
Billing helpers -- pure functions for bill numbering.

Bill numbers read ``<PREFIX>-<FY>-<NNNN>``, for example ``INV-2024-25-0007``.
The financial year runs from 1 April to 31 March, and the counter restarts
each financial year, separately for invoices and proforma invoices.
"""

from datetime import date

from inventory_kernel.domain.dtos import BillKind

FINANCIAL_YEAR_START_MONTH = 4
SERIAL_WIDTH = 4


def financial_year(on: date) -> str:
    """
    Indian financial year label for a date.

    >>> financial_year(date(2024, 4, 1))
    '2024-25'
    >>> financial_year(date(2025, 3, 31))
    '2024-25'
    """
    start = on.year if on.month >= FINANCIAL_YEAR_START_MONTH else on.year - 1
    return f"{start}-{(start + 1) % 100:02d}"


def sequence_name(kind: BillKind, fiscal_year: str) -> str:
    """Name of the counter row that numbers ``kind`` bills in ``fiscal_year``."""
    return f"bill_number:{kind.value}:{fiscal_year}"


def format_bill_number(kind: BillKind, fiscal_year: str, serial: int) -> str:
    if serial < 1:
        raise ValueError(f"Bill serial must be positive, got {serial}")
    return f"{kind.number_prefix}-{fiscal_year}-{serial:0{SERIAL_WIDTH}d}"
