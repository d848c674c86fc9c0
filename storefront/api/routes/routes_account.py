from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import Field

from storefront.api.rate_limit import AUTH_LIMIT, limiter
from storefront.core.constants import MSG_ORDER_NOT_FOUND
from storefront.core.exceptions import AuthenticationException
from storefront.domain.order import Order

from .common import (
    ApiModel,
    StorefrontContext,
    VisitorSession,
    dump,
    ensure_customer,
    get_context,
    get_session_id,
)

router = APIRouter(prefix="/account")


class LoginRequest(ApiModel):
    email: str = Field(..., min_length=3)
    password: str = Field(..., min_length=1)


class RegisterRequest(LoginRequest):
    name: str = Field(..., min_length=1)
    phone: str | None = None


class ProfileUpdateRequest(ApiModel):
    name: str | None = None
    phone: str | None = None
    address: str | None = None


def _order_payload(order: Order) -> dict:
    payload = dump(order)
    payload["statusLabel"] = order.status_label
    payload["wasModified"] = order.was_modified
    if not order.shows_transfer_details:
        payload["transferDetails"] = None
    return payload


async def _authenticated(session_id: str, ctx: StorefrontContext) -> VisitorSession:
    visitor = ctx.session(session_id)
    await ensure_customer(visitor)
    if not visitor.auth.is_authenticated:
        raise HTTPException(status_code=401, detail="No autenticado")
    return visitor


@router.post("/login")
@limiter.limit(AUTH_LIMIT)
async def login(
    request: Request,
    body: LoginRequest,
    session_id: str = Depends(get_session_id),
    ctx: StorefrontContext = Depends(get_context),
):
    visitor = ctx.session(session_id)
    try:
        customer = await visitor.auth.login(body.email, body.password)
    except AuthenticationException as e:
        raise HTTPException(status_code=401, detail=e.message) from e
    return {"customer": dump(customer)}


@router.post("/register", status_code=201)
@limiter.limit(AUTH_LIMIT)
async def register(
    request: Request,
    body: RegisterRequest,
    session_id: str = Depends(get_session_id),
    ctx: StorefrontContext = Depends(get_context),
):
    visitor = ctx.session(session_id)
    try:
        customer = await visitor.auth.register(
            email=body.email, password=body.password, name=body.name, phone=body.phone
        )
    except AuthenticationException as e:
        raise HTTPException(status_code=400, detail=e.message) from e
    return {"customer": dump(customer)}


@router.post("/logout")
async def logout(
    session_id: str = Depends(get_session_id),
    ctx: StorefrontContext = Depends(get_context),
):
    ctx.session(session_id).auth.logout()
    return {"ok": True}


@router.get("/me")
async def me(
    session_id: str = Depends(get_session_id),
    ctx: StorefrontContext = Depends(get_context),
):
    visitor = await _authenticated(session_id, ctx)
    return {"customer": dump(visitor.auth.customer)}


@router.put("/me")
async def update_me(
    body: ProfileUpdateRequest,
    session_id: str = Depends(get_session_id),
    ctx: StorefrontContext = Depends(get_context),
):
    visitor = await _authenticated(session_id, ctx)
    changes = body.model_dump(exclude_none=True)
    try:
        customer = await visitor.auth.update_profile(**changes)
    except AuthenticationException as e:
        raise HTTPException(status_code=400, detail=e.message) from e
    return {"customer": dump(customer)}


@router.get("/orders")
async def list_orders(
    session_id: str = Depends(get_session_id),
    ctx: StorefrontContext = Depends(get_context),
):
    visitor = await _authenticated(session_id, ctx)
    try:
        orders = await visitor.auth.list_orders()
    except AuthenticationException as e:
        raise HTTPException(status_code=401, detail=e.message) from e
    return {"orders": [_order_payload(order) for order in orders]}


@router.get("/orders/{order_number}")
async def get_order(
    order_number: str,
    session_id: str = Depends(get_session_id),
    ctx: StorefrontContext = Depends(get_context),
):
    visitor = await _authenticated(session_id, ctx)
    try:
        order = await visitor.auth.get_order(order_number)
    except AuthenticationException as e:
        raise HTTPException(status_code=401, detail=e.message) from e
    if order is None:
        raise HTTPException(status_code=404, detail=MSG_ORDER_NOT_FOUND)
    return {"order": _order_payload(order)}
