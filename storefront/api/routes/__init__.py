from __future__ import annotations

from fastapi import APIRouter

from . import routes_account, routes_cart, routes_catalog, routes_checkout
from .common import StorefrontContext, get_context, set_context

router = APIRouter(prefix="/api", tags=["storefront"])

router.include_router(routes_catalog.router)
router.include_router(routes_cart.router)
router.include_router(routes_checkout.router)
router.include_router(routes_account.router)

__all__ = ["StorefrontContext", "get_context", "router", "set_context"]
