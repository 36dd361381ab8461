"""
Billing Module Service (``inventory_modules.billing.service``).

Responsibility
--------------
Creates invoices and proforma invoices, and recomputes figures for existing
bills:

1. Validates the request (items present, no duplicate products, finite
   positive quantities, discounts within 0..100, party and every product
   resolvable).
2. Prices the items with the pure bill totals engine.
3. Allocates the bill number from a locked counter row (``SequenceService``).
4. Writes the bill, its items and add-ons as append-only rows.
5. Optionally issues an invoice's items from stock through the stock
   ledger (``BillingPolicy.issue_stock_on_invoice``).

Invariants
----------
- Each public method owns its transaction boundary: commit on success,
  rollback and re-raise on failure.
- Bill numbers are never derived from ``max(bill_number)``.
- With ``snapshot_unit_price`` the catalog price of each item is stored on
  the item, and later recomputation uses it instead of the live price.

Failure Modes
-------------
- ``EmptyBillError``, ``DuplicateBillItemError``, ``InvalidBillQuantityError``,
  ``InvalidDiscountError``.
- ``PartyNotFoundError`` / ``ProductNotFoundError`` for unknown references.
- ``UnsupportedUnitError`` for a sub-unit item of a product without one.
- ``BillNotFoundError`` when recomputing a bill that does not exist.
- The stock issue runs after the bill is committed; its failure
  (``PersistenceError``) propagates but the bill stands.

Usage::

    service = BillingService(session, policy=config.billing, clock=clock)
    result = service.create_bill(
        BillKind.INVOICE, party_id,
        [BillItemInput(product_id=pid, quantity=Decimal("3"))],
        created_by=user_id,
        supply=SupplyDetails(supply_place="Guwahati"),
    )
    result.bill_number      # "INV-2024-25-0001"
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Sequence
from dataclasses import replace
from datetime import date
from decimal import Decimal
from uuid import UUID, uuid4

from sqlalchemy.orm import Session

from inventory_config.schema import BillingPolicy, LedgerPolicy
from inventory_engines.bill_totals import compute_bill_total
from inventory_engines.tax_breakup import TaxBreakup, compute_tax_breakup, taxable_lines
from inventory_kernel.domain.clock import Clock, SystemClock
from inventory_kernel.domain.dtos import (
    AddOn,
    BillItemInput,
    BillKind,
    MovementLine,
    MovementType,
    ProductSnapshot,
    SupplyDetails,
)
from inventory_kernel.exceptions import (
    BillNotFoundError,
    DuplicateBillItemError,
    EmptyBillError,
    InvalidBillQuantityError,
    InvalidDiscountError,
    PartyNotFoundError,
    ProductNotFoundError,
)
from inventory_kernel.logging_config import LogContext, get_logger
from inventory_kernel.models.billing import Bill, BillAddOn, BillItem
from inventory_kernel.selectors.catalog_selector import CatalogSelector
from inventory_kernel.selectors.reference_selector import ReferenceSelector
from inventory_kernel.services.sequence_service import SequenceService
from inventory_modules.billing.helpers import (
    financial_year,
    format_bill_number,
    sequence_name,
)
from inventory_modules.billing.models import BillResult
from inventory_modules.stock.models import MovementResult
from inventory_modules.stock.service import StockLedgerService

logger = get_logger("modules.billing.service")

_HUNDRED = Decimal("100")


class BillingService:
    """
    Creates bills and recomputes their totals and tax breakup.

    Contract
    --------
    ``create_bill`` either raises without writing anything, or commits the
    bill and returns a ``BillResult``.  Read methods never write.

    Non-goals
    ---------
    - Editing or cancelling bills; bills are append-only.
    - Tax rules beyond the slab printed on each product.
    """

    def __init__(
        self,
        session: Session,
        policy: BillingPolicy | None = None,
        ledger_policy: LedgerPolicy | None = None,
        clock: Clock | None = None,
    ):
        self._session = session
        self._policy = policy or BillingPolicy()
        self._clock = clock or SystemClock()
        self._catalog = CatalogSelector(session)
        self._reference = ReferenceSelector(session)
        self._sequences = SequenceService(session)
        self._ledger = StockLedgerService(session, policy=ledger_policy, clock=self._clock)

    # =========================================================================
    # Creation
    # =========================================================================

    def create_bill(
        self,
        bill_kind: BillKind | str,
        party_id: UUID,
        items: Sequence[BillItemInput],
        created_by: UUID,
        *,
        supply: SupplyDetails,
        add_ons: Sequence[AddOn] = (),
        invoice_date: date | None = None,
    ) -> BillResult:
        """
        Validate, price, number and store a bill.

        Args:
            bill_kind: Invoice or proforma.
            party_id: The billed party; must exist.
            items: Ordered bill items; each product at most once.
            created_by: Acting user.
            supply: Place of supply and dispatch details.
            add_ons: Flat charges added after the items.
            invoice_date: Defaults to today's date on the service clock.
        """
        kind = BillKind(bill_kind)
        invoice_date = invoice_date or self._clock.today()
        _validate_items(items)

        try:
            with LogContext.bind(actor_id=created_by):
                if self._reference.get_party(party_id) is None:
                    raise PartyNotFoundError(str(party_id))

                catalog = self._resolve_products(items)
                if self._policy.snapshot_unit_price:
                    items = [
                        item
                        if item.unit_price is not None
                        else replace(item, unit_price=catalog[item.product_id].price)
                        for item in items
                    ]
                total = compute_bill_total(items, add_ons, catalog)

                fiscal_year = financial_year(invoice_date)
                serial = self._sequences.next_value(sequence_name(kind, fiscal_year))
                bill_number = format_bill_number(kind, fiscal_year, serial)

                bill = self._build_bill(
                    kind, bill_number, party_id, items, add_ons,
                    total, invoice_date, supply, created_by,
                )
                self._session.add(bill)
                self._session.commit()
        except Exception:
            self._session.rollback()
            raise

        with LogContext.bind(actor_id=created_by, bill_number=bill_number):
            logger.info(
                "bill_created",
                extra={
                    "bill_kind": kind.value,
                    "item_count": len(items),
                    "add_on_count": len(add_ons),
                    "total_amount": str(total),
                },
            )

            stock_issue: MovementResult | None = None
            if kind is BillKind.INVOICE and self._policy.issue_stock_on_invoice:
                stock_issue = self._ledger.apply_movement(
                    MovementType.ISSUE,
                    [
                        MovementLine(
                            product_id=item.product_id,
                            quantity=item.quantity,
                            is_sub_unit=item.is_sub_unit,
                        )
                        for item in items
                    ],
                    created_by=created_by,
                    notes=f"Issued against {bill_number}",
                )

        return BillResult(
            bill_id=bill.id,
            bill_number=bill_number,
            bill_kind=kind,
            invoice_date=invoice_date,
            total_amount=total,
            stock_issue=stock_issue,
        )

    # =========================================================================
    # Recomputation
    # =========================================================================

    def recompute_total(self, bill_id: UUID) -> Decimal:
        """
        Payable amount of a stored bill, priced now.

        Items without a stored unit price take the live catalog price, so
        the result can differ from ``Bill.total_amount`` after a price change.
        """
        bill = self._load_bill(bill_id)
        items, add_ons = _bill_inputs(bill)
        return compute_bill_total(items, add_ons, self._catalog.get_products(
            item.product_id for item in items
        ))

    def tax_breakup(self, bill_id: UUID) -> TaxBreakup:
        """GST breakup of a stored bill for printing."""
        bill = self._load_bill(bill_id)
        items, add_ons = _bill_inputs(bill)
        catalog = self._catalog.get_products(item.product_id for item in items)
        party = self._reference.get_party(bill.party_id)
        return compute_tax_breakup(
            taxable_lines(items, catalog),
            add_ons,
            party.state_code if party else None,
            home_state_code=self._policy.home_state_code,
            default_gst_slab=self._policy.default_gst_slab,
        )

    # =========================================================================
    # Internals
    # =========================================================================

    def _resolve_products(
        self, items: Sequence[BillItemInput]
    ) -> dict[UUID, ProductSnapshot]:
        catalog = self._catalog.get_products(item.product_id for item in items)
        for item in items:
            if item.product_id not in catalog:
                raise ProductNotFoundError(str(item.product_id))
        return catalog

    def _load_bill(self, bill_id: UUID) -> Bill:
        bill = self._session.get(Bill, bill_id)
        if bill is None:
            raise BillNotFoundError(str(bill_id))
        return bill

    def _build_bill(
        self,
        kind: BillKind,
        bill_number: str,
        party_id: UUID,
        items: Sequence[BillItemInput],
        add_ons: Sequence[AddOn],
        total: Decimal,
        invoice_date: date,
        supply: SupplyDetails,
        created_by: UUID,
    ) -> Bill:
        now = self._clock.now()
        return Bill(
            id=uuid4(),
            bill_number=bill_number,
            bill_kind=kind.value,
            party_id=party_id,
            total_amount=total,
            invoice_date=invoice_date,
            supply_place=supply.supply_place,
            transporter_name=supply.transporter_name,
            vehicle_number=supply.vehicle_number,
            supply_date=supply.supply_date,
            created_by_id=created_by,
            created_at=now,
            updated_at=now,
            items=[
                BillItem(
                    line_no=line_no,
                    product_id=item.product_id,
                    quantity=item.quantity,
                    discount_percentage=item.discount_percentage,
                    is_sub_unit=item.is_sub_unit,
                    unit_price=item.unit_price,
                )
                for line_no, item in enumerate(items, start=1)
            ],
            add_ons=[
                BillAddOn(line_no=line_no, title=add_on.title, price=add_on.price)
                for line_no, add_on in enumerate(add_ons, start=1)
            ],
        )


def _validate_items(items: Sequence[BillItemInput]) -> None:
    if not items:
        raise EmptyBillError()

    counts = Counter(item.product_id for item in items)
    duplicates = [str(pid) for pid, count in counts.items() if count > 1]
    if duplicates:
        raise DuplicateBillItemError(duplicates)

    for item in items:
        # NaN must be caught before any ordering comparison
        if not item.quantity.is_finite() or item.quantity <= 0:
            raise InvalidBillQuantityError(str(item.product_id), str(item.quantity))
        discount = item.discount_percentage
        if discount is not None and not (discount.is_finite() and 0 <= discount <= _HUNDRED):
            raise InvalidDiscountError(str(item.product_id), str(discount))


def _bill_inputs(bill: Bill) -> tuple[list[BillItemInput], list[AddOn]]:
    items = [
        BillItemInput(
            product_id=item.product_id,
            quantity=item.quantity,
            discount_percentage=item.discount_percentage,
            is_sub_unit=item.is_sub_unit,
            unit_price=item.unit_price,
        )
        for item in bill.items
    ]
    add_ons = [AddOn(title=a.title, price=a.price) for a in bill.add_ons]
    return items, add_ons
