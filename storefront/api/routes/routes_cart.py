from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from pydantic import Field

from .common import (
    ApiModel,
    CartResponse,
    StorefrontContext,
    cart_response,
    get_context,
    get_session_id,
    logger,
)

router = APIRouter()


class AddItemRequest(ApiModel):
    product_id: str = Field(..., alias="productId", min_length=1)
    selection: dict[str, str] = Field(
        default_factory=dict, description="Attribute choices for a variant group"
    )


class UpdateQuantityRequest(ApiModel):
    quantity: int


@router.get("/cart", response_model=CartResponse)
async def get_cart(
    session_id: str = Depends(get_session_id),
    ctx: StorefrontContext = Depends(get_context),
):
    visitor = ctx.session(session_id)
    return cart_response(visitor.cart, ctx.config.settings.currency_symbol)


@router.post("/cart/items", response_model=CartResponse)
async def add_item(
    body: AddItemRequest,
    session_id: str = Depends(get_session_id),
    ctx: StorefrontContext = Depends(get_context),
):
    """Add one unit using the catalog's current stock."""
    product = await ctx.catalog.find_purchasable(body.product_id, body.selection)
    if product is None:
        raise HTTPException(status_code=404, detail="Producto no encontrado")

    visitor = ctx.session(session_id)
    if not visitor.cart.add_item(product):
        raise HTTPException(status_code=409, detail="Sin stock disponible")

    logger.info("Session %s added %s", session_id[:8], product.id)
    return cart_response(visitor.cart, ctx.config.settings.currency_symbol)


@router.patch("/cart/items/{item_id}", response_model=CartResponse)
async def update_item(
    item_id: str,
    body: UpdateQuantityRequest,
    session_id: str = Depends(get_session_id),
    ctx: StorefrontContext = Depends(get_context),
):
    visitor = ctx.session(session_id)
    if item_id not in visitor.cart:
        raise HTTPException(status_code=404, detail="Producto no encontrado en el carrito")

    product = await ctx.catalog.find_purchasable(item_id)
    max_stock = product.stock if product is not None else None
    visitor.cart.update_quantity(item_id, body.quantity, max_stock)
    return cart_response(visitor.cart, ctx.config.settings.currency_symbol)


@router.delete("/cart/items/{item_id}", response_model=CartResponse)
async def remove_item(
    item_id: str,
    session_id: str = Depends(get_session_id),
    ctx: StorefrontContext = Depends(get_context),
):
    visitor = ctx.session(session_id)
    visitor.cart.remove_item(item_id)
    return cart_response(visitor.cart, ctx.config.settings.currency_symbol)


@router.delete("/cart", response_model=CartResponse)
async def clear_cart(
    session_id: str = Depends(get_session_id),
    ctx: StorefrontContext = Depends(get_context),
):
    visitor = ctx.session(session_id)
    visitor.cart.clear_cart()
    return cart_response(visitor.cart, ctx.config.settings.currency_symbol)
