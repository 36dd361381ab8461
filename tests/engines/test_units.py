"""
Tests for the unit engine and unit value objects.

Covers:
- Base-unit lines pass through unchanged
- Sub-unit lines scale by the conversion rate
- Sub-unit claims on products without one
- SubUnit / Unit validation
"""

from decimal import Decimal
from uuid import uuid4

import pytest

from inventory_engines.units import normalize, normalize_quantity, to_sub_units
from inventory_kernel.domain.dtos import ProductSnapshot
from inventory_kernel.domain.values import Quantity, SubUnit, Unit
from inventory_kernel.exceptions import InvalidConversionRateError, UnsupportedUnitError


def _product(sub_unit: SubUnit | None = None, unit: Unit = Unit.PCS) -> ProductSnapshot:
    return ProductSnapshot(
        id=uuid4(),
        name="Wall Tiles",
        unit=unit,
        price=Decimal("10"),
        current_stock=Decimal("0"),
        sub_unit=sub_unit,
    )


class TestNormalize:
    """normalize() into the product's base unit."""

    def test_base_unit_quantity_unchanged(self):
        product = _product(SubUnit.of("boxes", 12))
        assert normalize(product, Decimal("5")) == Decimal("5")

    def test_base_unit_quantity_unchanged_without_sub_unit(self):
        assert normalize(_product(), Decimal("7")) == Decimal("7")

    def test_sub_unit_scales_by_conversion_rate(self):
        product = _product(SubUnit.of("boxes", 12))
        assert normalize(product, Decimal("2"), is_sub_unit=True) == Decimal("24")

    def test_fractional_conversion_rate(self):
        product = _product(SubUnit.of("rolls", "2.5"), unit=Unit.METERS)
        assert normalize(product, Decimal("3"), is_sub_unit=True) == Decimal("7.5")

    def test_sub_unit_without_sub_unit_raises(self):
        product = _product()
        with pytest.raises(UnsupportedUnitError) as exc_info:
            normalize(product, Decimal("2"), is_sub_unit=True)
        assert exc_info.value.code == "UNSUPPORTED_UNIT"
        assert exc_info.value.product_id == str(product.id)

    def test_accepts_int_and_str(self):
        product = _product(SubUnit.of("boxes", 12))
        assert normalize(product, 3, is_sub_unit=True) == Decimal("36")
        assert normalize(product, "1.5", is_sub_unit=True) == Decimal("18")

    def test_rejects_float(self):
        with pytest.raises(TypeError):
            normalize(_product(), 1.5)

    def test_normalize_quantity_tags_base_unit(self):
        product = _product(SubUnit.of("bags", 50), unit=Unit.KG)
        qty = normalize_quantity(product, Decimal("2"), is_sub_unit=True)
        assert qty == Quantity(Decimal("100"), Unit.KG)


class TestToSubUnits:

    def test_converts_back_for_display(self):
        product = _product(SubUnit.of("boxes", 12))
        assert to_sub_units(product, Decimal("36")) == Decimal("3")

    def test_without_sub_unit_raises(self):
        with pytest.raises(UnsupportedUnitError):
            to_sub_units(_product(), Decimal("36"))


class TestSubUnit:
    """SubUnit validation."""

    @pytest.mark.parametrize("rate", ["0", "-1", "NaN", "abc"])
    def test_non_positive_or_invalid_rate_rejected(self, rate):
        with pytest.raises(InvalidConversionRateError):
            SubUnit(unit="boxes", conversion_rate=rate)

    def test_unit_code_parsed(self):
        assert SubUnit.of("BOXES", 12).unit is Unit.BOXES


class TestUnit:

    def test_parse_is_case_insensitive(self):
        assert Unit.parse(" Kg ") is Unit.KG

    def test_unknown_unit_rejected(self):
        with pytest.raises(ValueError, match="Unknown unit"):
            Unit.parse("furlongs")


class TestQuantity:

    def test_same_unit_arithmetic(self):
        total = Quantity.of("2", "pcs") + Quantity.of("3", "pcs")
        assert total == Quantity.of("5", "pcs")
        assert (-total).is_negative

    def test_mixed_units_rejected(self):
        with pytest.raises(ValueError, match="different units"):
            Quantity.of("2", "pcs") + Quantity.of("3", "kg")
