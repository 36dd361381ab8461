"""
Module: inventory_kernel.selectors.enrichment_selector
Responsibility: Read models for bills and stock movements with their
    referenced party, product, category and user records embedded in place
    of raw ids, plus the filtered, paginated listings the portal pages show.
Architecture position: Kernel > Selectors.  Composes CatalogSelector and
    ReferenceSelector; never on the ledger's write path.

Invariants enforced:
    - Reads only.  Nothing here adds, flushes or commits.
    - A referenced record that no longer exists resolves to None in the read
      model; enrichment never raises for a missing join.  A bill that points
      at a deleted product must still be displayable.
    - Joined records are read without locks; a concurrently updated stock
      figure may be stale.
    - Listings resolve their joins with one batch query per referenced table
      per page, not one per row.

Failure modes:
    - InvalidDateRangeError when a listing's end bound precedes its start.
    - ValueError on a negative offset, a non-positive limit, or a limit
      above the configured max_page_size.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Generic, TypeVar
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from inventory_kernel.domain.dtos import (
    AddOn,
    BillKind,
    CategoryInfo,
    MovementType,
    PartyInfo,
    ProductSnapshot,
    SupplyDetails,
    UserInfo,
)
from inventory_kernel.domain.values import SubUnit, Unit
from inventory_kernel.exceptions import InvalidDateRangeError
from inventory_kernel.logging_config import get_logger
from inventory_kernel.models.billing import Bill
from inventory_kernel.models.party import Party
from inventory_kernel.models.stock import StockMovement
from inventory_kernel.selectors.base import BaseSelector
from inventory_kernel.selectors.catalog_selector import CatalogSelector
from inventory_kernel.selectors.reference_selector import ReferenceSelector

logger = get_logger("selectors.enrichment")

T = TypeVar("T")

DEFAULT_PAGE_SIZE = 50


# =============================================================================
# Read models
# =============================================================================


@dataclass(frozen=True)
class ProductDetails:
    """Product as embedded in a bill item or movement line."""

    id: UUID
    name: str
    unit: Unit
    price: Decimal
    current_stock: Decimal
    hsn_code: str | None
    gst_slab: int | None
    sub_unit: SubUnit | None
    category: CategoryInfo | None

    @classmethod
    def from_snapshot(
        cls, snapshot: ProductSnapshot, category: CategoryInfo | None
    ) -> ProductDetails:
        return cls(
            id=snapshot.id,
            name=snapshot.name,
            unit=snapshot.unit,
            price=snapshot.price,
            current_stock=snapshot.current_stock,
            hsn_code=snapshot.hsn_code,
            gst_slab=snapshot.gst_slab,
            sub_unit=snapshot.sub_unit,
            category=category,
        )


@dataclass(frozen=True)
class EnrichedBillItem:
    line_no: int
    product_id: UUID
    quantity: Decimal
    discount_percentage: Decimal | None
    is_sub_unit: bool
    unit_price: Decimal | None
    product: ProductDetails | None


@dataclass(frozen=True)
class EnrichedBill:
    """Bill with its party and item products resolved."""

    id: UUID
    bill_number: str
    bill_kind: BillKind
    invoice_date: date
    total_amount: Decimal
    party_id: UUID
    party: PartyInfo | None
    items: tuple[EnrichedBillItem, ...]
    add_ons: tuple[AddOn, ...]
    supply: SupplyDetails
    created_by_id: UUID
    created_at: datetime


@dataclass(frozen=True)
class EnrichedMovementLine:
    line_no: int
    product_id: UUID
    quantity: Decimal
    is_sub_unit: bool
    base_quantity: Decimal | None
    product: ProductDetails | None


@dataclass(frozen=True)
class EnrichedMovement:
    """Stock movement with its line products and creator resolved."""

    id: UUID
    movement_type: MovementType
    notes: str | None
    lines: tuple[EnrichedMovementLine, ...]
    created_by_id: UUID
    created_by: UserInfo | None
    created_at: datetime


@dataclass(frozen=True)
class Page(Generic[T]):
    """One page of a listing plus the total number of matching rows."""

    items: tuple[T, ...]
    total: int
    offset: int
    limit: int

    @property
    def has_more(self) -> bool:
        return self.offset + len(self.items) < self.total


# =============================================================================
# Selector
# =============================================================================


class EnrichmentSelector(BaseSelector[Bill]):
    """
    Builds enriched read models for bills and stock movements.

    Contract:
        enrich_bill() / enrich_stock_movement() accept ORM rows already
        loaded by the caller; get_*() and list_*() load them first.
    """

    def __init__(self, session: Session, max_page_size: int | None = None):
        super().__init__(session)
        self._max_page_size = max_page_size
        self._catalog = CatalogSelector(session)
        self._reference = ReferenceSelector(session)

    # -------------------------------------------------------------------------
    # Single records
    # -------------------------------------------------------------------------

    def enrich_bill(self, bill: Bill) -> EnrichedBill:
        return self._build_bill(
            bill,
            self._reference.get_party(bill.party_id),
            self._product_details(item.product_id for item in bill.items),
        )

    def enrich_stock_movement(self, movement: StockMovement) -> EnrichedMovement:
        return self._build_movement(
            movement,
            self._reference.get_user(movement.created_by_id),
            self._product_details(line.product_id for line in movement.lines),
        )

    def _build_bill(
        self,
        bill: Bill,
        party: PartyInfo | None,
        products: dict[UUID, ProductDetails],
    ) -> EnrichedBill:
        if party is None:
            logger.debug(
                "enrichment_party_missing",
                extra={"bill_number": bill.bill_number, "party_id": str(bill.party_id)},
            )

        items = tuple(
            EnrichedBillItem(
                line_no=item.line_no,
                product_id=item.product_id,
                quantity=item.quantity,
                discount_percentage=item.discount_percentage,
                is_sub_unit=item.is_sub_unit,
                unit_price=item.unit_price,
                product=products.get(item.product_id),
            )
            for item in bill.items
        )
        add_ons = tuple(AddOn(title=a.title, price=a.price) for a in bill.add_ons)

        return EnrichedBill(
            id=bill.id,
            bill_number=bill.bill_number,
            bill_kind=BillKind(bill.bill_kind),
            invoice_date=bill.invoice_date,
            total_amount=bill.total_amount,
            party_id=bill.party_id,
            party=party,
            items=items,
            add_ons=add_ons,
            supply=SupplyDetails(
                supply_place=bill.supply_place,
                transporter_name=bill.transporter_name,
                vehicle_number=bill.vehicle_number,
                supply_date=bill.supply_date,
            ),
            created_by_id=bill.created_by_id,
            created_at=bill.created_at,
        )

    def _build_movement(
        self,
        movement: StockMovement,
        created_by: UserInfo | None,
        products: dict[UUID, ProductDetails],
    ) -> EnrichedMovement:
        lines = tuple(
            EnrichedMovementLine(
                line_no=line.line_no,
                product_id=line.product_id,
                quantity=line.quantity,
                is_sub_unit=line.is_sub_unit,
                base_quantity=line.base_quantity,
                product=products.get(line.product_id),
            )
            for line in movement.lines
        )
        return EnrichedMovement(
            id=movement.id,
            movement_type=MovementType(movement.movement_type),
            notes=movement.notes,
            lines=lines,
            created_by_id=movement.created_by_id,
            created_by=created_by,
            created_at=movement.created_at,
        )

    def get_bill(self, bill_id: UUID) -> EnrichedBill | None:
        bill = self.session.get(Bill, bill_id)
        return self.enrich_bill(bill) if bill is not None else None

    def get_bill_by_number(self, bill_number: str) -> EnrichedBill | None:
        bill = self.session.scalars(
            select(Bill).where(Bill.bill_number == bill_number)
        ).one_or_none()
        return self.enrich_bill(bill) if bill is not None else None

    def get_stock_movement(self, movement_id: UUID) -> EnrichedMovement | None:
        movement = self.session.get(StockMovement, movement_id)
        return self.enrich_stock_movement(movement) if movement is not None else None

    # -------------------------------------------------------------------------
    # Listings
    # -------------------------------------------------------------------------

    def list_bills(
        self,
        bill_kind: BillKind,
        *,
        search: str | None = None,
        start_date: date | None = None,
        end_date: date | None = None,
        offset: int = 0,
        limit: int = DEFAULT_PAGE_SIZE,
    ) -> Page[EnrichedBill]:
        """
        Bills of one kind, newest invoice date first.

        Args:
            search: Case-insensitive substring of the party name.
            start_date / end_date: Inclusive invoice-date bounds.
        """
        _check_paging(offset, limit, self._max_page_size)
        if start_date is not None and end_date is not None and end_date < start_date:
            raise InvalidDateRangeError(str(start_date), str(end_date))

        stmt = select(Bill).where(Bill.bill_kind == BillKind(bill_kind).value)
        if search:
            pattern = "%" + _escape_like(search.strip()) + "%"
            stmt = stmt.join(Party, Party.id == Bill.party_id).where(
                Party.name.ilike(pattern, escape="\\")
            )
        if start_date is not None:
            stmt = stmt.where(Bill.invoice_date >= start_date)
        if end_date is not None:
            stmt = stmt.where(Bill.invoice_date <= end_date)

        total = self.session.scalar(
            select(func.count()).select_from(stmt.subquery())
        )
        rows = self.session.scalars(
            stmt.order_by(Bill.invoice_date.desc(), Bill.bill_number.desc())
            .offset(offset)
            .limit(limit)
        ).all()
        parties = self._reference.get_parties(row.party_id for row in rows)
        products = self._product_details(
            item.product_id for row in rows for item in row.items
        )
        return Page(
            items=tuple(
                self._build_bill(row, parties.get(row.party_id), products)
                for row in rows
            ),
            total=total or 0,
            offset=offset,
            limit=limit,
        )

    def list_stock_movements(
        self,
        movement_type: MovementType | str | None = None,
        *,
        start: datetime | None = None,
        end: datetime | None = None,
        offset: int = 0,
        limit: int = DEFAULT_PAGE_SIZE,
    ) -> Page[EnrichedMovement]:
        """Stock movements, newest first, optionally by type and created-at range."""
        _check_paging(offset, limit, self._max_page_size)
        if start is not None and end is not None and end < start:
            raise InvalidDateRangeError(str(start), str(end))

        stmt = select(StockMovement)
        if movement_type is not None:
            stmt = stmt.where(
                StockMovement.movement_type == MovementType.parse(movement_type).value
            )
        if start is not None:
            stmt = stmt.where(StockMovement.created_at >= start)
        if end is not None:
            stmt = stmt.where(StockMovement.created_at <= end)

        total = self.session.scalar(
            select(func.count()).select_from(stmt.subquery())
        )
        rows = self.session.scalars(
            stmt.order_by(StockMovement.created_at.desc()).offset(offset).limit(limit)
        ).all()
        users = self._reference.get_users(row.created_by_id for row in rows)
        products = self._product_details(
            line.product_id for row in rows for line in row.lines
        )
        return Page(
            items=tuple(
                self._build_movement(row, users.get(row.created_by_id), products)
                for row in rows
            ),
            total=total or 0,
            offset=offset,
            limit=limit,
        )

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _product_details(self, product_ids) -> dict[UUID, ProductDetails]:
        snapshots = self._catalog.get_products(product_ids)
        categories = self._catalog.get_categories(
            s.category_id for s in snapshots.values() if s.category_id is not None
        )
        return {
            pid: ProductDetails.from_snapshot(
                snap,
                categories.get(snap.category_id) if snap.category_id else None,
            )
            for pid, snap in snapshots.items()
        }


def _check_paging(offset: int, limit: int, max_page_size: int | None) -> None:
    if offset < 0:
        raise ValueError(f"offset must be >= 0, got {offset}")
    if limit <= 0:
        raise ValueError(f"limit must be > 0, got {limit}")
    if max_page_size is not None and limit > max_page_size:
        raise ValueError(f"limit must be <= {max_page_size}, got {limit}")


def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
