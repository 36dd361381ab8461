"""
Tax Breakup Engine - GST split printed on an invoice.

Catalog prices are GST-INCLUSIVE.  For each item:

    discounted value = unit_price * base_quantity - discount
    taxable value    = discounted value / (1 + slab / 100)
    GST              = discounted value - taxable value

Intra-state supply (party state code equals the seller's home state code)
splits GST into equal CGST and SGST halves; inter-state supply carries IGST.
Add-ons carry no GST.  The grand total is rounded to the whole rupee and the
round-off is reported alongside.

This is a presentation helper for printing, not a tax rule engine: slabs
come from the product record and there is no exemption or cess handling.

Pure functions with no I/O.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from decimal import Decimal
from uuid import UUID

from inventory_engines.amount_words import render_rupees_in_words
from inventory_engines.bill_totals import PricedLine, price_items
from inventory_engines.tracer import traced_engine
from inventory_kernel.db.types import HUNDRED, ZERO, round_money
from inventory_kernel.domain.dtos import AddOn, BillItemInput, ProductSnapshot

TWO = Decimal("2")


@dataclass(frozen=True)
class TaxableLine:
    """A priced line together with the tax attributes of its product."""

    line: PricedLine
    gst_slab: int | None = None
    hsn_code: str | None = None


@dataclass(frozen=True)
class ItemTax:
    """Tax split of one item, rounded to paise for printing."""

    product_id: UUID | None
    hsn_code: str | None
    gst_slab: int
    gross_value: Decimal
    discount_amount: Decimal
    taxable_value: Decimal
    cgst: Decimal
    sgst: Decimal
    igst: Decimal
    item_total: Decimal

    @property
    def total_tax(self) -> Decimal:
        return self.cgst + self.sgst + self.igst


@dataclass(frozen=True)
class TaxBreakup:
    """Invoice-level GST summary."""

    items: tuple[ItemTax, ...]
    inter_state: bool
    taxable_total: Decimal
    cgst_total: Decimal
    sgst_total: Decimal
    igst_total: Decimal
    add_ons_total: Decimal
    total_before_rounding: Decimal
    grand_total: Decimal
    rounding_difference: Decimal
    amount_in_words: str

    @property
    def gst_total(self) -> Decimal:
        return self.cgst_total + self.sgst_total + self.igst_total


def taxable_lines(
    items: Sequence[BillItemInput],
    catalog: Mapping[UUID, ProductSnapshot],
) -> list[TaxableLine]:
    """Price ``items`` against ``catalog`` and attach each product's slab and HSN."""
    priced = price_items(items, catalog)
    return [
        TaxableLine(
            line=line,
            gst_slab=catalog[item.product_id].gst_slab,
            hsn_code=catalog[item.product_id].hsn_code,
        )
        for item, line in zip(items, priced)
    ]


@traced_engine(
    "tax_breakup",
    "1.0",
    fingerprint_fields=("lines", "add_ons", "party_state_code", "home_state_code"),
)
def compute_tax_breakup(
    lines: Sequence[TaxableLine],
    add_ons: Sequence[AddOn],
    party_state_code: str | None,
    *,
    home_state_code: str = "18",
    default_gst_slab: int = 18,
) -> TaxBreakup:
    """
    Split each line's GST-inclusive value into taxable value and GST.

    Args:
        party_state_code: The billed party's state code.  An unknown party
            (None) is treated as inter-state.
        home_state_code: The seller's state code.
        default_gst_slab: Slab used for products without one.
    """
    inter_state = party_state_code != home_state_code

    items: list[ItemTax] = []
    taxable_sum = ZERO
    gst_sum = ZERO
    for entry in lines:
        slab = entry.gst_slab if entry.gst_slab is not None else default_gst_slab
        discounted = entry.line.value
        taxable = discounted / (1 + Decimal(slab) / HUNDRED)
        gst = discounted - taxable
        taxable_sum += taxable
        gst_sum += gst

        if inter_state:
            cgst = sgst = ZERO
            igst = round_money(gst)
        else:
            cgst = sgst = round_money(gst / TWO)
            igst = ZERO
        items.append(
            ItemTax(
                product_id=entry.line.product_id,
                hsn_code=entry.hsn_code,
                gst_slab=slab,
                gross_value=round_money(entry.line.gross_value),
                discount_amount=round_money(entry.line.discount_amount),
                taxable_value=round_money(taxable),
                cgst=cgst,
                sgst=sgst,
                igst=igst,
                item_total=round_money(discounted),
            )
        )

    add_ons_total = sum((a.price for a in add_ons), ZERO)
    total_before_rounding = round_money(taxable_sum + gst_sum + add_ons_total)
    grand_total = round_money(total_before_rounding, decimal_places=0)

    if inter_state:
        cgst_total = sgst_total = ZERO
        igst_total = round_money(gst_sum)
    else:
        cgst_total = sgst_total = round_money(gst_sum / TWO)
        igst_total = ZERO

    return TaxBreakup(
        items=tuple(items),
        inter_state=inter_state,
        taxable_total=round_money(taxable_sum),
        cgst_total=cgst_total,
        sgst_total=sgst_total,
        igst_total=igst_total,
        add_ons_total=round_money(add_ons_total),
        total_before_rounding=total_before_rounding,
        grand_total=grand_total,
        rounding_difference=grand_total - total_before_rounding,
        amount_in_words=render_rupees_in_words(grand_total),
    )
