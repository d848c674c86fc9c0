"""Shared helpers for cart totals, shipping cost and price display."""
from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Iterable

from storefront.core.constants import PRICE_ON_REQUEST, SHIPPING_DELIVERY


def _get(item: Any, key: str, default: Any = None) -> Any:
    if isinstance(item, dict):
        return item.get(key, default)
    return getattr(item, key, default)


def calc_items_total(items: Iterable[Any]) -> float:
    """Sum of ``price * quantity`` over line items (dicts or objects)."""
    total = 0.0
    for item in items:
        price = _get(item, "price") or 0
        quantity = _get(item, "quantity") or 0
        total += float(price) * int(quantity)
    return total


def calc_quantity(items: Iterable[Any]) -> int:
    return sum(int(_get(item, "quantity") or 0) for item in items)


def calc_shipping_cost(
    items_total: float,
    *,
    method: str | None,
    delivery_cost: float = 0,
    free_above: float = 0,
) -> float:
    """Shipping charged for ``method`` given the cart subtotal.

    Only delivery costs money. A positive ``free_above`` threshold waives
    the flat delivery cost once the subtotal reaches it.
    """
    if method != SHIPPING_DELIVERY:
        return 0.0
    if free_above > 0 and items_total >= free_above:
        return 0.0
    return float(delivery_cost or 0)


def calc_total_price(items_total: float, shipping_cost: float) -> float:
    return float(items_total) + float(shipping_cost)


def _group_thousands(digits: str) -> str:
    groups = []
    while len(digits) > 3:
        groups.insert(0, digits[-3:])
        digits = digits[:-3]
    groups.insert(0, digits)
    return ".".join(groups)


def format_amount(amount: float | int | None) -> str:
    """Format a number with es-AR separators: ``1234.5 -> 1.234,5``."""
    value = Decimal(str(amount or 0)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    sign = "-" if value < 0 else ""
    integer, _, fraction = f"{abs(value):.2f}".partition(".")
    fraction = fraction.rstrip("0")
    text = _group_thousands(integer)
    if fraction:
        text = f"{text},{fraction}"
    return f"{sign}{text}"


def format_price(amount: float | int | None, currency_symbol: str = "$") -> str:
    """Display price; zero means the store quotes it on request."""
    if not amount:
        return PRICE_ON_REQUEST
    return f"{currency_symbol}{format_amount(amount)}"
