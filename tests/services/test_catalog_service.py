"""Tests for CatalogService writes and the snapshots they return."""

from decimal import Decimal
from uuid import uuid4

import pytest

from inventory_kernel.domain.values import Unit
from inventory_kernel.exceptions import (
    CategoryNotFoundError,
    InvalidConversionRateError,
    InvalidDiscountError,
    ProductNotFoundError,
)
from inventory_kernel.selectors.catalog_selector import CatalogSelector


class TestCreateProduct:

    def test_snapshot_fields(self, catalog_service, session, test_actor_id):
        product = catalog_service.create_product(
            "  Floor Tiles ",
            "pcs",
            "59.50",
            test_actor_id,
            hsn_code="6908",
            gst_slab=18,
            opening_stock="40",
            sub_unit="boxes",
            sub_unit_conversion_rate=4,
        )
        session.commit()

        assert product.name == "Floor Tiles"
        assert product.unit is Unit.PCS
        assert product.price == Decimal("59.50")
        assert product.current_stock == Decimal("40")
        assert product.has_sub_unit
        assert product.sub_unit.unit is Unit.BOXES
        assert product.sub_unit.conversion_rate == Decimal("4")
        assert CatalogSelector(session).get_product(product.id).name == "Floor Tiles"

    def test_unit_code_case_insensitive(self, make_product):
        assert make_product(unit=" PCS ").unit is Unit.PCS

    def test_unknown_unit_rejected(self, make_product):
        with pytest.raises(ValueError):
            make_product(unit="furlongs")

    def test_sub_unit_needs_rate(self, make_product):
        with pytest.raises(ValueError, match="together"):
            make_product(sub_unit="boxes")

    def test_non_positive_rate_rejected(self, make_product):
        with pytest.raises(InvalidConversionRateError):
            make_product(sub_unit="boxes", sub_unit_conversion_rate=0)

    def test_negative_price_rejected(self, make_product):
        with pytest.raises(ValueError, match="negative"):
            make_product(price="-1")

    def test_discount_out_of_range(self, make_product):
        with pytest.raises(InvalidDiscountError):
            make_product(discount_percentage="120")

    def test_gst_slab_out_of_range(self, make_product):
        with pytest.raises(ValueError, match="GST slab"):
            make_product(gst_slab=101)

    def test_unknown_category(self, make_product):
        with pytest.raises(CategoryNotFoundError):
            make_product(category_id=uuid4())

    def test_blank_name_rejected(self, catalog_service, test_actor_id):
        with pytest.raises(ValueError):
            catalog_service.create_product("  ", "pcs", "1", test_actor_id)

    def test_creation_logged(self, make_product, captured_logs):
        product = make_product("Cement", unit="bags")

        created = [r for r in captured_logs() if r["message"] == "product_created"]
        assert created[0]["product_id"] == str(product.id)
        assert created[0]["unit"] == "bags"


class TestDelete:

    def test_delete_product(self, catalog_service, make_product, session):
        product = make_product()
        catalog_service.delete_product(product.id)
        session.commit()

        assert CatalogSelector(session).get_product(product.id) is None

    def test_delete_unknown_product(self, catalog_service):
        with pytest.raises(ProductNotFoundError):
            catalog_service.delete_product(uuid4())

    def test_delete_category_keeps_products(self, catalog_service, make_product, session):
        category = catalog_service.create_category("Sanitary")
        session.commit()
        product = make_product(category_id=category.id)

        catalog_service.delete_category(category.id)
        session.commit()

        selector = CatalogSelector(session)
        assert selector.get_category(category.id) is None
        assert selector.get_product(product.id).category_id == category.id

    def test_delete_unknown_category(self, catalog_service):
        with pytest.raises(CategoryNotFoundError):
            catalog_service.delete_category(uuid4())

    def test_blank_category_title(self, catalog_service):
        with pytest.raises(ValueError):
            catalog_service.create_category("")
