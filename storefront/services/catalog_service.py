"""Catalog reads with a short-lived in-process cache."""
from __future__ import annotations

import time
from typing import Iterable, Mapping

from storefront.domain.catalog import (
    Category,
    Product,
    resolve_variant,
    variant_as_product,
)
from storefront.integrations.commerce_api import CommerceApiClient

CATALOG_CACHE_TTL = 60  # 1 minute - stock changes often


def filter_products(
    products: Iterable[Product],
    *,
    category_id: str | None = None,
    query: str | None = None,
) -> list[Product]:
    """Filter by category id and case-insensitive name/description search."""
    needle = (query or "").strip().lower()
    result = []
    for product in products:
        if category_id and product.category_id != category_id:
            continue
        if needle and needle not in product.name.lower() and needle not in product.description.lower():
            continue
        result.append(product)
    return result


class CatalogService:
    def __init__(self, client: CommerceApiClient, ttl: float = CATALOG_CACHE_TTL):
        self._client = client
        self._ttl = ttl
        self._products: dict[bool, tuple[float, list[Product]]] = {}
        self._categories: tuple[float, list[Category]] | None = None

    def invalidate(self) -> None:
        self._products.clear()
        self._categories = None

    def _fresh(self, stamp: float) -> bool:
        return time.monotonic() - stamp < self._ttl

    async def products(self, grouped: bool = False) -> list[Product]:
        cached = self._products.get(grouped)
        if cached and self._fresh(cached[0]):
            return cached[1]
        products = await self._client.get_products(grouped=grouped)
        # Empty means the backend failed or the store is empty; retry next call
        if products:
            self._products[grouped] = (time.monotonic(), products)
        return products

    async def categories(self) -> list[Category]:
        if self._categories and self._fresh(self._categories[0]):
            return self._categories[1]
        categories = await self._client.get_categories()
        if categories:
            self._categories = (time.monotonic(), categories)
        return categories

    async def find_purchasable(
        self,
        product_id: str,
        selection: Mapping[str, str] | None = None,
    ) -> Product | None:
        """Product to put in the cart; a group needs a selection naming one variant."""
        for product in await self.products(grouped=True):
            if product.id == product_id:
                if not product.is_group:
                    return product
                variant = resolve_variant(product.variants, selection or {})
                return variant_as_product(product, variant) if variant else None
            for variant in product.variants or ():
                if variant.id == product_id:
                    return variant_as_product(product, variant)
        return None
