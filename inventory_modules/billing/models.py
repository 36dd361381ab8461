"""
Billing Module Models.

Frozen results handed back to callers of the billing service.
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from uuid import UUID

from inventory_kernel.domain.dtos import BillKind
from inventory_modules.stock.models import MovementResult


@dataclass(frozen=True)
class BillResult:
    """
    A created bill.

    stock_issue is set only when the invoice issued its items from stock.
    """

    bill_id: UUID
    bill_number: str
    bill_kind: BillKind
    invoice_date: date
    total_amount: Decimal
    stock_issue: MovementResult | None = None
