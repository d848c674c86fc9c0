from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import Field

from storefront.api.rate_limit import CHECKOUT_LIMIT, limiter
from storefront.application.orders.submit_order import resolve_method
from storefront.core.constants import PAYMENT_TRANSFER
from storefront.core.order_math import format_price
from storefront.domain.order import FulfillmentSelection

from .common import ApiModel, StorefrontContext, ensure_customer, get_context, get_session_id

router = APIRouter()

# CheckoutResult.error_key -> HTTP status
ERROR_STATUS = {
    "validation": 422,
    "in_flight": 409,
    "orders_disabled": 403,
    "rejected": 400,
    "backend_error": 502,
}


class QuoteRequest(ApiModel):
    shipping_method: str | None = Field(None, alias="shippingMethod")


class QuoteResponse(ApiModel):
    subtotal: float
    shipping_cost: float = Field(..., alias="shippingCost")
    total: float
    total_items: int = Field(..., alias="totalItems")
    total_label: str = Field(..., alias="totalLabel")


class CheckoutRequest(ApiModel):
    name: str = ""
    phone: str = ""
    email: str | None = None
    address: str | None = None
    notes: str | None = Field(None, max_length=2000)
    shipping_method: str | None = Field(None, alias="shippingMethod")
    payment_method: str | None = Field(None, alias="paymentMethod")


class CheckoutResponse(ApiModel):
    order_number: str = Field(..., alias="orderNumber")
    mode: str
    status: str | None = None
    message: str
    transfer_details: dict[str, str] | None = Field(None, alias="transferDetails")


@router.post("/checkout/quote", response_model=QuoteResponse)
async def quote(
    body: QuoteRequest,
    session_id: str = Depends(get_session_id),
    ctx: StorefrontContext = Depends(get_context),
):
    visitor = ctx.session(session_id)
    totals = visitor.composer.quote(body.shipping_method)
    return QuoteResponse(
        subtotal=totals.subtotal,
        shipping_cost=totals.shipping_cost,
        total=totals.total,
        total_items=totals.total_items,
        total_label=format_price(totals.total, ctx.config.settings.currency_symbol),
    )


@router.post("/checkout", response_model=CheckoutResponse, status_code=201)
@limiter.limit(CHECKOUT_LIMIT)
async def checkout(
    request: Request,
    body: CheckoutRequest,
    session_id: str = Depends(get_session_id),
    ctx: StorefrontContext = Depends(get_context),
):
    """Submit the visitor's cart as one order; the cart is emptied only on success."""
    visitor = ctx.session(session_id)
    await ensure_customer(visitor)

    result = await visitor.composer.submit(
        name=body.name,
        phone=body.phone,
        email=body.email,
        address=body.address,
        notes=body.notes,
        fulfillment=FulfillmentSelection(
            shipping_method=body.shipping_method,
            payment_method=body.payment_method,
        ),
    )

    if not result.ok or result.order is None or visitor.composer.success is None:
        status = ERROR_STATUS.get(result.error_key or "", 400)
        detail: dict[str, object] = {"message": result.message}
        if result.errors:
            detail["errors"] = result.errors
        raise HTTPException(status_code=status, detail=detail)

    payment = ctx.config.settings.payment
    payment_method, _ = resolve_method(payment.enabled_methods(), body.payment_method)
    return CheckoutResponse(
        order_number=result.order.order_number,
        mode=result.order_mode or ctx.config.settings.order_method,
        status=result.order.status,
        message=visitor.composer.success.message,
        transfer_details=payment.transfer.details() if payment_method == PAYMENT_TRANSFER else None,
    )
