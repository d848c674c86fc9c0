from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, Depends, Query

from storefront.core.contact import format_schedule, is_open_at, whatsapp_url
from storefront.services.catalog_service import filter_products

from .common import StorefrontContext, dump, get_context

router = APIRouter()


@router.get("/products")
async def list_products(
    grouped: bool = Query(False, description="Group variants into families"),
    category: str | None = Query(None, description="Category id"),
    q: str | None = Query(None, description="Search text"),
    ctx: StorefrontContext = Depends(get_context),
):
    products = await ctx.catalog.products(grouped=grouped)
    products = filter_products(products, category_id=category, query=q)
    return [dump(product) for product in products]


@router.get("/categories")
async def list_categories(ctx: StorefrontContext = Depends(get_context)):
    categories = await ctx.catalog.categories()
    return [{"id": category.id, "name": category.name} for category in categories]


@router.get("/store")
async def store_info(ctx: StorefrontContext = Depends(get_context)):
    """Public store data: contact links, business hours and order settings."""
    business = ctx.config.business
    settings = ctx.config.settings
    hours = ctx.config.business_hours
    return {
        "name": business.name,
        "phone": business.phone,
        "email": business.email,
        "address": business.address,
        "whatsappUrl": whatsapp_url(business.whatsapp),
        "isOpen": is_open_at(hours, datetime.now().astimezone()),
        "schedule": [{"day": day, "hours": text} for day, text in format_schedule(hours)],
        "orderMethod": settings.order_method,
        "allowOrders": settings.allow_orders,
        "currencySymbol": settings.currency_symbol,
        "shippingMethods": settings.shipping.enabled_methods(),
        "paymentMethods": settings.payment.enabled_methods(),
    }
