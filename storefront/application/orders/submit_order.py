"""Use case: validate a cart snapshot and submit it as one order."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence

from storefront.core.config import StoreConfig
from storefront.core.constants import (
    MSG_EMPTY_CART,
    MSG_ORDER_FAILED,
    MSG_ORDERS_DISABLED,
    MSG_REQUIRED_FIELD,
    MSG_SELECT_PAYMENT,
    MSG_SELECT_SHIPPING,
)
from storefront.core.exceptions import CommerceApiError, ValidationException
from storefront.core.order_math import (
    calc_items_total,
    calc_quantity,
    calc_shipping_cost,
    calc_total_price,
)
from storefront.domain.cart import LineItem
from storefront.domain.customer import CustomerIdentity
from storefront.domain.order import (
    FulfillmentSelection,
    OrderLine,
    OrderRequest,
    OrderResult,
)
from storefront.integrations.commerce_api import CommerceApiClient
from storefront.logging_config import logger


@dataclass(frozen=True)
class CheckoutTotals:
    """Display-only totals; the backend recomputes prices itself."""

    subtotal: float
    shipping_cost: float
    total: float
    total_items: int


@dataclass
class CheckoutResult:
    ok: bool
    error_key: str | None = None
    message: str | None = None
    errors: dict[str, str] = field(default_factory=dict)
    order: OrderResult | None = None
    order_mode: str | None = None
    totals: CheckoutTotals | None = None


def resolve_method(enabled: Sequence[str], selected: str | None) -> tuple[str | None, bool]:
    """Return ``(method, ok)`` for one fulfillment category.

    A single enabled option is chosen implicitly; with several, the
    customer must pick one of them.
    """
    if selected:
        return (selected, True) if selected in enabled else (None, False)
    if len(enabled) == 1:
        return enabled[0], True
    return None, not enabled


def compute_totals(
    items: Sequence[LineItem],
    config: StoreConfig,
    shipping_method: str | None,
) -> CheckoutTotals:
    delivery = config.settings.shipping.delivery
    subtotal = calc_items_total(items)
    shipping_cost = calc_shipping_cost(
        subtotal,
        method=shipping_method,
        delivery_cost=delivery.cost,
        free_above=delivery.free_above,
    )
    return CheckoutTotals(
        subtotal=subtotal,
        shipping_cost=shipping_cost,
        total=calc_total_price(subtotal, shipping_cost),
        total_items=calc_quantity(items),
    )


def validate_checkout(
    items: Sequence[LineItem],
    identity: CustomerIdentity,
    fulfillment: FulfillmentSelection,
    config: StoreConfig,
) -> tuple[dict[str, str], FulfillmentSelection]:
    """Field errors plus the fulfillment selection with implicit choices filled in."""
    errors: dict[str, str] = {}
    if not items:
        errors["cart"] = MSG_EMPTY_CART
    if not (identity.name or "").strip():
        errors["name"] = MSG_REQUIRED_FIELD
    if not (identity.phone or "").strip():
        errors["phone"] = MSG_REQUIRED_FIELD

    settings = config.settings
    shipping, shipping_ok = resolve_method(
        settings.shipping.enabled_methods(), fulfillment.shipping_method
    )
    if not shipping_ok:
        errors["shippingMethod"] = MSG_SELECT_SHIPPING
    payment, payment_ok = resolve_method(
        settings.payment.enabled_methods(), fulfillment.payment_method
    )
    if not payment_ok:
        errors["paymentMethod"] = MSG_SELECT_PAYMENT

    return errors, FulfillmentSelection(shipping_method=shipping, payment_method=payment)


def require_valid_checkout(
    items: Sequence[LineItem],
    identity: CustomerIdentity,
    fulfillment: FulfillmentSelection,
    config: StoreConfig,
) -> FulfillmentSelection:
    errors, selection = validate_checkout(items, identity, fulfillment, config)
    if errors:
        raise ValidationException(errors)
    return selection


def build_order_request(
    items: Sequence[LineItem],
    identity: CustomerIdentity,
    notes: str | None,
    fulfillment: FulfillmentSelection,
    config: StoreConfig,
) -> OrderRequest:
    settings = config.settings
    shipping = None
    if fulfillment.shipping_method:
        shipping = {
            "method": fulfillment.shipping_method,
            "label": settings.shipping.label_for(fulfillment.shipping_method),
        }
    payment = None
    if fulfillment.payment_method:
        payment = {
            "method": fulfillment.payment_method,
            "label": settings.payment.label_for(fulfillment.payment_method),
        }

    return OrderRequest(
        customer=identity.to_payload(),
        items=[OrderLine(product_id=item.id, quantity=item.quantity) for item in items],
        order_mode=settings.order_method,
        notes=(notes or "").strip() or None,
        shipping_method=shipping,
        payment_method=payment,
    )


async def submit_order(
    cart_snapshot: Sequence[LineItem],
    identity: CustomerIdentity,
    notes: str | None,
    fulfillment: FulfillmentSelection,
    *,
    client: CommerceApiClient,
    config: StoreConfig,
    token: str | None = None,
) -> CheckoutResult:
    """Submit exactly one order request; never raises.

    The cart itself is not touched here; the caller clears it only after
    an ``ok`` result.
    """
    mode = config.settings.order_method
    if not config.settings.allow_orders:
        return CheckoutResult(False, "orders_disabled", MSG_ORDERS_DISABLED, order_mode=mode)

    try:
        selection = require_valid_checkout(cart_snapshot, identity, fulfillment, config)
    except ValidationException as e:
        return CheckoutResult(
            False, "validation", next(iter(e.errors.values())), errors=e.errors, order_mode=mode
        )

    totals = compute_totals(cart_snapshot, config, selection.shipping_method)
    request = build_order_request(cart_snapshot, identity, notes, selection, config)
    bearer = token if identity.is_authenticated else None

    try:
        response = await client.create_order(request, token=bearer)
    except CommerceApiError as e:
        return CheckoutResult(
            False, "backend_error", e.message or MSG_ORDER_FAILED, order_mode=mode, totals=totals
        )
    except Exception as e:
        logger.exception("Unexpected error submitting order: %s", e)
        return CheckoutResult(False, "backend_error", MSG_ORDER_FAILED, order_mode=mode, totals=totals)

    if response.get("success") is not True:
        message = response.get("message") or MSG_ORDER_FAILED
        return CheckoutResult(False, "rejected", str(message), order_mode=mode, totals=totals)

    order = OrderResult.from_api(response.get("order") or {})
    logger.info("Order %s submitted (%s)", order.order_number, mode)
    return CheckoutResult(True, order=order, order_mode=mode, totals=totals)
