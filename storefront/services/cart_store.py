"""Client-side cart with stock-aware mutations and local persistence."""
from __future__ import annotations

import copy
from typing import Any

from storefront.core.constants import CART_STORAGE_KEY
from storefront.core.exceptions import StorageException
from storefront.core.local_storage import LocalStorage
from storefront.core.order_math import calc_items_total, calc_quantity
from storefront.domain.cart import LineItem
from storefront.domain.catalog import Product
from storefront.logging_config import logger


class CartStore:
    """Sole owner of cart state.

    Every line item satisfies ``1 <= quantity <= stock``. Mutations that
    would break this are refused or clamped, never raised. The cart is
    written to storage after every mutation; a storage failure is logged
    and the in-memory cart stays authoritative.
    """

    def __init__(self, storage: LocalStorage, key: str = CART_STORAGE_KEY):
        self._storage = storage
        self._key = key
        self._items: dict[str, LineItem] = {}

    # ===================== PERSISTENCE =====================

    def load(self) -> CartStore:
        """Rehydrate from storage, dropping entries that break the stock rule."""
        try:
            raw_items = self._storage.get(self._key)
        except StorageException as exc:
            logger.warning("Cart rehydration failed, starting empty: %s", exc)
            raw_items = None

        self._items = {}
        for raw in raw_items if isinstance(raw_items, list) else []:
            try:
                item = LineItem.from_dict(raw)
            except (KeyError, TypeError, ValueError):
                logger.warning("Dropping malformed cart entry: %r", raw)
                continue
            if item.id in self._items:
                continue
            item.quantity = min(item.quantity, item.stock)
            if item.quantity <= 0:
                continue
            self._items[item.id] = item
        return self

    def _persist(self) -> None:
        try:
            if self._items:
                self._storage.set(self._key, [item.to_dict() for item in self._items.values()])
            else:
                self._storage.delete(self._key)
        except StorageException as exc:
            logger.warning("Cart persistence failed: %s", exc)

    # ===================== READS =====================

    @property
    def items(self) -> list[LineItem]:
        """Copies of the line items in insertion order."""
        return [copy.copy(item) for item in self._items.values()]

    def snapshot(self) -> tuple[LineItem, ...]:
        return tuple(self.items)

    def get_item_quantity(self, item_id: str) -> int:
        item = self._items.get(item_id)
        return item.quantity if item else 0

    @property
    def total_items(self) -> int:
        return calc_quantity(self._items.values())

    @property
    def total_price(self) -> float:
        return calc_items_total(self._items.values())

    @property
    def is_empty(self) -> bool:
        return not self._items

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, item_id: Any) -> bool:
        return item_id in self._items

    # ===================== MUTATIONS =====================

    def add_item(self, product: Product) -> bool:
        """Add one unit of ``product``; False when stock is exhausted."""
        if product.is_group:
            logger.info("Rejected add_item: %s is a variant group", product.id)
            return False

        current = self.get_item_quantity(product.id)
        if current >= product.stock:
            logger.info(
                "Rejected add_item: stock exhausted (id=%s, in_cart=%s, stock=%s)",
                product.id,
                current,
                product.stock,
            )
            return False

        existing = self._items.get(product.id)
        if existing:
            existing.quantity += 1
            existing.stock = int(product.stock)
            existing.price = float(product.price)
        else:
            self._items[product.id] = LineItem.from_product(product, quantity=1)

        self._persist()
        return True

    def remove_item(self, item_id: str) -> None:
        if self._items.pop(item_id, None) is not None:
            self._persist()

    def update_quantity(self, item_id: str, quantity: int, max_stock: int | None = None) -> None:
        """Set the quantity of ``item_id``, clamped to stock.

        ``max_stock`` is the freshest known stock and replaces the cached
        value. A resulting quantity of zero or less removes the item.
        """
        item = self._items.get(item_id)
        if item is None:
            return

        if max_stock is not None:
            item.stock = max(int(max_stock), 0)
        final_quantity = min(int(quantity), item.stock)

        if final_quantity <= 0:
            self.remove_item(item_id)
            return

        item.quantity = final_quantity
        self._persist()

    def clear_cart(self) -> None:
        self._items = {}
        self._persist()
