from __future__ import annotations

import pytest

from storefront.core.constants import DEFAULT_CATEGORY_NAME, PLACEHOLDER_IMAGE
from storefront.domain.catalog import (
    Category,
    available_values,
    product_from_api,
    resolve_variant,
    variant_as_product,
)
from storefront.services.catalog_service import CatalogService, filter_products

SHIRT_GROUP = {
    "_id": "g1",
    "name": "Remera",
    "description": "Algodón",
    "isGroup": True,
    "variantCount": 3,
    "priceRange": {"min": 1000, "max": 1200},
    "attributes": ["talle", "color"],
    "attributeValues": {"talle": ["S", "M"], "color": ["rojo", "azul"]},
    "image": {"url": "/remera.png"},
    "categoryId": {"_id": "cat-1", "name": "Ropa"},
    "variants": [
        {"_id": "v1", "name": "Remera S roja", "price": 1000, "stock": 2,
         "variantAttributes": {"talle": "S", "color": "rojo"}},
        {"_id": "v2", "name": "Remera M roja", "price": 1100, "stock": 0,
         "variantAttributes": {"talle": "M", "color": "rojo"}},
        {"_id": "v3", "name": "Remera M azul", "price": 1200, "stock": 5,
         "image": {"thumbnails": {"medium": "/m-azul.png"}},
         "variantAttributes": {"talle": "M", "color": "azul"}},
    ],
}


def test_product_from_api_maps_backend_record() -> None:
    product = product_from_api(
        {
            "_id": "p1",
            "name": "Yerba",
            "storeDescription": "Yerba mate 1kg",
            "price": 2500,
            "stock": 7,
            "image": {"thumbnails": {"medium": "/yerba-m.png"}},
            "categoryId": {"_id": "cat-9", "name": "Almacén"},
        }
    )

    assert product.id == "p1"
    assert product.description == "Yerba mate 1kg"
    assert product.image == "/yerba-m.png"
    assert product.category == "Almacén"
    assert product.category_id == "cat-9"
    assert product.stock == 7
    assert product.is_available is True
    assert product.price_on_request is False


def test_product_from_api_defaults() -> None:
    product = product_from_api({"_id": "p2", "name": "Consultar"})

    assert product.image == PLACEHOLDER_IMAGE
    assert product.category == DEFAULT_CATEGORY_NAME
    assert product.price == 0
    assert product.price_on_request is True
    assert product.is_available is False


def test_product_from_api_clamps_negative_stock_and_price() -> None:
    product = product_from_api(
        {
            "_id": "p3",
            "name": "Sobrevendido",
            "price": -10,
            "stock": -2,
            "variants": [{"_id": "v", "name": "V", "stock": -1}],
        }
    )

    assert (product.price, product.stock) == (0, 0)
    assert product.variants[0].stock == 0
    assert product.is_available is False


def test_product_from_api_parses_variant_group() -> None:
    group = product_from_api(SHIRT_GROUP)

    assert group.is_group is True
    assert group.price_range is not None and group.price_range.max == 1200
    assert [variant.id for variant in group.variants] == ["v1", "v2", "v3"]
    assert group.variants[2].image == "/m-azul.png"
    assert group.is_available is True


def test_resolve_variant_requires_unique_match() -> None:
    variants = product_from_api(SHIRT_GROUP).variants

    assert resolve_variant(variants, {"talle": "S", "color": "rojo"}).id == "v1"
    assert resolve_variant(variants, {"talle": "S"}).id == "v1"
    assert resolve_variant(variants, {"talle": "M"}) is None
    assert resolve_variant(variants, {"talle": "XL"}) is None
    assert resolve_variant(None, {}) is None


def test_available_values_follow_other_selections() -> None:
    variants = product_from_api(SHIRT_GROUP).variants

    assert available_values(variants, "color", {"talle": "S"}) == ["rojo"]
    assert available_values(variants, "color", {"talle": "M", "color": "rojo"}) == ["rojo", "azul"]
    assert available_values(variants, "talle", {}) == ["S", "M"]


def test_variant_as_product_inherits_group_metadata() -> None:
    group = product_from_api(SHIRT_GROUP)

    product = variant_as_product(group, group.variants[0])

    assert product.id == "v1"
    assert product.is_group is False
    assert product.stock == 2
    assert product.image == "/remera.png"
    assert product.category == "Ropa"


def test_filter_products_by_category_and_query() -> None:
    products = [
        product_from_api({"_id": "1", "name": "Yerba", "categoryId": {"_id": "c1", "name": "A"}}),
        product_from_api({"_id": "2", "name": "Azúcar", "description": "Azúcar común",
                          "categoryId": {"_id": "c2", "name": "B"}}),
    ]

    assert [p.id for p in filter_products(products, category_id="c2")] == ["2"]
    assert [p.id for p in filter_products(products, query="  YERBA ")] == ["1"]
    assert [p.id for p in filter_products(products, query="común")] == ["2"]
    assert len(filter_products(products)) == 2


class FakeCatalogClient:
    def __init__(self) -> None:
        self.product_calls = 0
        self.grouped = [product_from_api(SHIRT_GROUP), product_from_api({"_id": "p1", "name": "Yerba", "stock": 1})]

    async def get_products(self, grouped: bool = False):
        self.product_calls += 1
        return list(self.grouped)

    async def get_categories(self):
        return [Category(id="cat-1", name="Ropa")]


@pytest.mark.asyncio
async def test_catalog_service_caches_products() -> None:
    client = FakeCatalogClient()
    catalog = CatalogService(client)

    await catalog.products(grouped=True)
    await catalog.products(grouped=True)
    assert client.product_calls == 1

    catalog.invalidate()
    await catalog.products(grouped=True)
    assert client.product_calls == 2


@pytest.mark.asyncio
async def test_find_purchasable_resolves_groups_and_variants() -> None:
    catalog = CatalogService(FakeCatalogClient())

    assert (await catalog.find_purchasable("p1")).id == "p1"
    assert (await catalog.find_purchasable("g1", {"talle": "M", "color": "azul"})).id == "v3"
    assert await catalog.find_purchasable("g1", {"talle": "M"}) is None
    assert (await catalog.find_purchasable("v1")).stock == 2
    assert await catalog.find_purchasable("missing") is None
