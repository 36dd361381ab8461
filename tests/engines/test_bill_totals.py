"""
Tests for the Bill Totals Engine.

Covers:
- Line values with and without discount
- Add-ons are never discounted
- Rounding once, at the end
- Catalog pricing: sub-unit normalization, stored unit prices, missing products
- Order independence (Hypothesis)
"""

from decimal import Decimal
from uuid import uuid4

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from inventory_engines.bill_totals import (
    PricedLine,
    compute_bill_total,
    compute_total,
    price_items,
)
from inventory_kernel.domain.dtos import AddOn, BillItemInput, ProductSnapshot
from inventory_kernel.domain.values import SubUnit, Unit
from inventory_kernel.exceptions import (
    InvalidDiscountError,
    PriceNotFoundError,
    ProductNotFoundError,
    UnsupportedUnitError,
)


def _product(price: str, sub_unit: SubUnit | None = None) -> ProductSnapshot:
    return ProductSnapshot(
        id=uuid4(),
        name="Tiles",
        unit=Unit.PCS,
        price=Decimal(price),
        current_stock=Decimal("0"),
        sub_unit=sub_unit,
    )


class TestComputeTotal:
    """compute_total() over already priced lines."""

    def test_plain_lines(self):
        lines = [
            PricedLine(unit_price=Decimal("10"), quantity=Decimal("3")),
            PricedLine(unit_price=Decimal("2.50"), quantity=Decimal("4")),
        ]
        assert compute_total(lines) == Decimal("40.00")

    def test_discount_applied_per_line(self):
        lines = [
            PricedLine(
                unit_price=Decimal("100"),
                quantity=Decimal("2"),
                discount_percentage=Decimal("10"),
            )
        ]
        assert compute_total(lines) == Decimal("180.00")

    def test_add_ons_added_without_discount(self):
        lines = [
            PricedLine(
                unit_price=Decimal("100"),
                quantity=Decimal("1"),
                discount_percentage=Decimal("50"),
            )
        ]
        add_ons = [AddOn("Freight", Decimal("150")), AddOn("Loading", Decimal("25.50"))]
        assert compute_total(lines, add_ons) == Decimal("225.50")

    def test_rounded_once_at_the_end(self):
        # Three lines of 0.333... each: rounding per line would give 0.99
        lines = [
            PricedLine(
                unit_price=Decimal("1"),
                quantity=Decimal("1"),
                discount_percentage=Decimal("66.6666666666"),
            )
            for _ in range(3)
        ]
        assert compute_total(lines) == Decimal("1.00")

    def test_half_up_rounding(self):
        lines = [PricedLine(unit_price=Decimal("0.005"), quantity=Decimal("1"))]
        assert compute_total(lines) == Decimal("0.01")

    def test_empty_bill_totals_to_add_ons(self):
        assert compute_total([], [AddOn("Packing", Decimal("12"))]) == Decimal("12.00")

    def test_zero_discount_same_as_none(self):
        with_zero = PricedLine(Decimal("10"), Decimal("2"), Decimal("0"))
        without = PricedLine(Decimal("10"), Decimal("2"))
        assert with_zero.value == without.value

    @pytest.mark.parametrize("discount", ["-1", "100.01"])
    def test_discount_out_of_range_rejected(self, discount):
        with pytest.raises(InvalidDiscountError):
            PricedLine(Decimal("10"), Decimal("1"), Decimal(discount))

    def test_full_discount_allowed(self):
        line = PricedLine(Decimal("10"), Decimal("1"), Decimal("100"))
        assert line.value == Decimal("0")


class TestAddOn:

    def test_negative_price_rejected(self):
        with pytest.raises(ValueError, match="negative"):
            AddOn("Freight", Decimal("-1"))

    def test_title_required(self):
        with pytest.raises(ValueError, match="title"):
            AddOn("  ", Decimal("1"))


class TestComputeBillTotal:
    """compute_bill_total() against a catalog snapshot."""

    def test_base_unit_items(self):
        p = _product("10")
        items = [BillItemInput(product_id=p.id, quantity=Decimal("3"))]
        assert compute_bill_total(items, [], {p.id: p}) == Decimal("30.00")

    def test_sub_unit_item_priced_per_base_unit(self):
        p = _product("10", SubUnit.of("boxes", 12))
        items = [BillItemInput(product_id=p.id, quantity=Decimal("2"), is_sub_unit=True)]
        assert compute_bill_total(items, [], {p.id: p}) == Decimal("240.00")

    def test_sub_unit_claim_without_sub_unit_raises(self):
        p = _product("10")
        items = [BillItemInput(product_id=p.id, quantity=Decimal("2"), is_sub_unit=True)]
        with pytest.raises(UnsupportedUnitError):
            compute_bill_total(items, [], {p.id: p})

    def test_missing_product_raises_price_not_found(self):
        items = [BillItemInput(product_id=uuid4(), quantity=Decimal("1"))]
        with pytest.raises(PriceNotFoundError) as exc_info:
            compute_bill_total(items, [], {})
        assert isinstance(exc_info.value, ProductNotFoundError)
        assert exc_info.value.code == "PRICE_NOT_FOUND"

    def test_stored_unit_price_wins_over_catalog(self):
        p = _product("12")
        items = [
            BillItemInput(product_id=p.id, quantity=Decimal("5"), unit_price=Decimal("10"))
        ]
        assert compute_bill_total(items, [], {p.id: p}) == Decimal("50.00")

    def test_full_bill(self):
        cement = _product("350")
        tiles = _product("45", SubUnit.of("boxes", 10))
        items = [
            BillItemInput(cement.id, Decimal("10"), discount_percentage=Decimal("5")),
            BillItemInput(tiles.id, Decimal("3"), is_sub_unit=True),
        ]
        add_ons = [AddOn("Freight", Decimal("500"))]

        total = compute_bill_total(items, add_ons, {cement.id: cement, tiles.id: tiles})

        # 3325 + 1350 + 500
        assert total == Decimal("5175.00")

    def test_price_items_keeps_item_order(self):
        a, b = _product("1"), _product("2")
        priced = price_items(
            [BillItemInput(b.id, Decimal("1")), BillItemInput(a.id, Decimal("1"))],
            {a.id: a, b.id: b},
        )
        assert [line.product_id for line in priced] == [b.id, a.id]


money = st.decimals(min_value=Decimal("0"), max_value=Decimal("100000"), places=2)
discounts = st.one_of(
    st.none(), st.decimals(min_value=Decimal("0"), max_value=Decimal("100"), places=2)
)
priced_lines = st.builds(
    PricedLine,
    unit_price=money,
    quantity=st.decimals(min_value=Decimal("0.001"), max_value=Decimal("1000"), places=3),
    discount_percentage=discounts,
)
add_on_lists = st.lists(st.builds(AddOn, title=st.just("Freight"), price=money), max_size=5)


class TestTotalProperties:

    @given(lines=st.lists(priced_lines, max_size=15), add_ons=add_on_lists, data=st.data())
    @settings(max_examples=100, deadline=None)
    def test_total_independent_of_item_and_add_on_order(self, lines, add_ons, data):
        shuffled_lines = data.draw(st.permutations(lines))
        shuffled_add_ons = data.draw(st.permutations(add_ons))
        assert compute_total(lines, add_ons) == compute_total(shuffled_lines, shuffled_add_ons)

    @given(lines=st.lists(priced_lines, max_size=15), add_ons=add_on_lists)
    @settings(max_examples=100, deadline=None)
    def test_total_never_negative_and_at_most_undiscounted(self, lines, add_ons):
        total = compute_total(lines, add_ons)
        undiscounted = compute_total(
            [PricedLine(line.unit_price, line.quantity) for line in lines], add_ons
        )
        assert Decimal("0") <= total <= undiscounted
