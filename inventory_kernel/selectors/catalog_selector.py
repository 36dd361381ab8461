"""
Module: inventory_kernel.selectors.catalog_selector
Responsibility: Read access to the product catalog -- single and batch
    product snapshots, categories and the low-stock listing.
Architecture position: Kernel > Selectors.

Invariants enforced:
    - get_products() issues ONE query for the whole batch; the stock ledger
      relies on this to snapshot a movement's products consistently.
    - Product reads always refresh the identity map (populate_existing):
      stock is written by UPDATE statements that bypass loaded instances.
    - Missing records resolve to None (or are absent from the batch result),
      never an exception.
"""

from collections.abc import Iterable
from decimal import Decimal
from uuid import UUID

from sqlalchemy import select

from inventory_kernel.domain.dtos import CategoryInfo, ProductSnapshot
from inventory_kernel.models.catalog import Category, Product
from inventory_kernel.selectors.base import BaseSelector


class CatalogSelector(BaseSelector[Product]):
    """Catalog lookups returning ProductSnapshot / CategoryInfo DTOs."""

    def get_product(self, product_id: UUID) -> ProductSnapshot | None:
        product = self.session.get(Product, product_id, populate_existing=True)
        if product is None:
            return None
        return ProductSnapshot.from_model(product)

    def get_products(self, product_ids: Iterable[UUID]) -> dict[UUID, ProductSnapshot]:
        """
        Snapshot a batch of products in a single query.

        Returns:
            Mapping of product id to snapshot.  Unknown ids are simply absent.
        """
        ids = list(dict.fromkeys(product_ids))
        if not ids:
            return {}
        rows = self.session.scalars(
            select(Product)
            .where(Product.id.in_(ids))
            .execution_options(populate_existing=True)
        ).all()
        return {row.id: ProductSnapshot.from_model(row) for row in rows}

    def get_category(self, category_id: UUID) -> CategoryInfo | None:
        category = self.session.get(Category, category_id)
        if category is None:
            return None
        return CategoryInfo.from_model(category)

    def get_categories(self, category_ids: Iterable[UUID]) -> dict[UUID, CategoryInfo]:
        ids = list(dict.fromkeys(category_ids))
        if not ids:
            return {}
        rows = self.session.scalars(
            select(Category).where(Category.id.in_(ids))
        ).all()
        return {row.id: CategoryInfo.from_model(row) for row in rows}

    def low_stock_products(self, threshold: Decimal) -> list[ProductSnapshot]:
        """
        Products whose stock is between zero and ``threshold`` (inclusive),
        ordered by name.  Products already in negative stock are excluded.
        """
        rows = self.session.scalars(
            select(Product)
            .where(Product.current_stock >= 0)
            .where(Product.current_stock <= threshold)
            .order_by(Product.name)
            .execution_options(populate_existing=True)
        ).all()
        return [ProductSnapshot.from_model(row) for row in rows]
