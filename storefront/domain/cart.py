"""Cart line item entity."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from storefront.core.constants import DEFAULT_CATEGORY_NAME, PLACEHOLDER_IMAGE
from storefront.domain.catalog import Product


@dataclass
class LineItem:
    """Single product or variant held in the cart."""

    id: str
    name: str
    price: float
    stock: int
    quantity: int
    image: str = PLACEHOLDER_IMAGE
    category: str = DEFAULT_CATEGORY_NAME

    @property
    def subtotal(self) -> float:
        return self.price * self.quantity

    @classmethod
    def from_product(cls, product: Product, quantity: int = 1) -> LineItem:
        return cls(
            id=product.id,
            name=product.name,
            price=float(product.price),
            stock=int(product.stock),
            quantity=quantity,
            image=product.image,
            category=product.category,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "image": self.image,
            "category": self.category,
            "price": float(self.price),
            "stock": int(self.stock),
            "quantity": int(self.quantity),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> LineItem:
        return cls(
            id=str(data["id"]),
            name=str(data.get("name", "")),
            price=float(data.get("price") or 0),
            stock=int(data.get("stock") or 0),
            quantity=int(data.get("quantity") or 0),
            image=str(data.get("image") or PLACEHOLDER_IMAGE),
            category=str(data.get("category") or DEFAULT_CATEGORY_NAME),
        )
