"""
Billing Module (``inventory_modules.billing``).

Responsibility
--------------
Creates invoices and proforma invoices priced through the bill totals
engine, numbers them per kind and financial year, and recomputes totals and
the GST breakup of stored bills for printing.
"""

from inventory_modules.billing.helpers import (
    financial_year,
    format_bill_number,
    sequence_name,
)
from inventory_modules.billing.models import BillResult
from inventory_modules.billing.service import BillingService

__all__ = [
    "BillResult",
    "BillingService",
    "financial_year",
    "format_bill_number",
    "sequence_name",
]
