"""Catalog entities and variant resolution."""
from __future__ import annotations

from typing import Any, Iterable, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field

from storefront.core.constants import DEFAULT_CATEGORY_NAME, PLACEHOLDER_IMAGE


class _CatalogModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class Category(_CatalogModel):
    id: str = Field(..., alias="_id")
    name: str


class PriceRange(_CatalogModel):
    min: float
    max: float


class ProductVariant(_CatalogModel):
    """Concrete purchasable variant tagged with its attribute map."""

    id: str
    name: str
    price: float = Field(0, ge=0)
    stock: int = Field(0, ge=0)
    image: Optional[str] = None
    variant_attributes: dict[str, str] = Field(default_factory=dict, alias="variantAttributes")


class Product(_CatalogModel):
    """Storefront product, or a variant family when ``is_group`` is set."""

    id: str
    name: str
    description: str = ""
    price: float = Field(0, ge=0, description="0 means price on request")
    image: str = PLACEHOLDER_IMAGE
    category: str = DEFAULT_CATEGORY_NAME
    category_id: Optional[str] = Field(None, alias="categoryId")
    stock: int = Field(0, ge=0)

    is_group: bool = Field(False, alias="isGroup")
    variant_count: Optional[int] = Field(None, alias="variantCount")
    price_range: Optional[PriceRange] = Field(None, alias="priceRange")
    attributes: list[str] = Field(default_factory=list)
    attribute_values: dict[str, list[str]] = Field(default_factory=dict, alias="attributeValues")
    variants: Optional[list[ProductVariant]] = None

    @property
    def is_available(self) -> bool:
        if self.is_group and self.variants:
            return any(variant.stock > 0 for variant in self.variants)
        return self.stock > 0

    @property
    def price_on_request(self) -> bool:
        return not self.price


def _variant_image(raw: Any) -> Optional[str]:
    if isinstance(raw, str):
        return raw or None
    if isinstance(raw, Mapping):
        thumbnails = raw.get("thumbnails") or {}
        return raw.get("url") or thumbnails.get("medium")
    return None


def _non_negative(value: Any) -> float:
    # Oversold products come back with negative stock
    return max(float(value or 0), 0.0)


def product_from_api(record: Mapping[str, Any]) -> Product:
    """Convert a backend product record into a storefront ``Product``."""
    image = record.get("image") or {}
    category = record.get("categoryId") or {}
    if not isinstance(category, Mapping):
        category = {"_id": str(category)}

    variants = None
    raw_variants = record.get("variants")
    if raw_variants:
        variants = [
            ProductVariant(
                id=str(raw.get("_id") or raw.get("id")),
                name=raw.get("name") or record.get("name", ""),
                price=_non_negative(raw.get("price")),
                stock=int(_non_negative(raw.get("stock"))),
                image=_variant_image(raw.get("image")),
                variant_attributes=raw.get("variantAttributes") or {},
            )
            for raw in raw_variants
        ]

    return Product(
        id=str(record.get("_id") or record.get("id")),
        name=record.get("name", ""),
        description=record.get("description") or record.get("storeDescription") or "",
        price=_non_negative(record.get("price")),
        image=_variant_image(image) or PLACEHOLDER_IMAGE,
        category=category.get("name") or DEFAULT_CATEGORY_NAME,
        category_id=category.get("_id"),
        stock=int(_non_negative(record.get("stock"))),
        is_group=bool(record.get("isGroup", False)),
        variant_count=record.get("variantCount"),
        price_range=record.get("priceRange"),
        attributes=record.get("attributes") or [],
        attribute_values=record.get("attributeValues") or {},
        variants=variants,
    )


def _matches(variant: ProductVariant, selection: Mapping[str, str]) -> bool:
    attrs = variant.variant_attributes
    return all(attrs.get(name) == value for name, value in selection.items() if value)


def resolve_variant(
    variants: Iterable[ProductVariant] | None,
    selection: Mapping[str, str],
) -> ProductVariant | None:
    """Return the single variant matching ``selection``, else None."""
    candidates = [variant for variant in variants or () if _matches(variant, selection)]
    if len(candidates) != 1:
        return None
    return candidates[0]


def available_values(
    variants: Iterable[ProductVariant] | None,
    attribute: str,
    selection: Mapping[str, str],
) -> list[str]:
    """Values of ``attribute`` still reachable given the other selected attributes."""
    others = {name: value for name, value in selection.items() if name != attribute}
    values: list[str] = []
    for variant in variants or ():
        if not _matches(variant, others):
            continue
        value = variant.variant_attributes.get(attribute)
        if value is not None and value not in values:
            values.append(value)
    return values


def variant_as_product(group: Product, variant: ProductVariant) -> Product:
    """Purchasable product for ``variant``, inheriting group metadata."""
    return Product(
        id=variant.id,
        name=variant.name or group.name,
        description=group.description,
        price=variant.price,
        image=variant.image or group.image,
        category=group.category,
        category_id=group.category_id,
        stock=variant.stock,
    )
