"""Domain package."""

from .cart import LineItem
from .catalog import Category, PriceRange, Product, ProductVariant
from .customer import AuthenticatedIdentity, Customer, CustomerIdentity, GuestIdentity
from .order import (
    FulfillmentSelection,
    Order,
    OrderLine,
    OrderRequest,
    OrderResult,
    OrderStatus,
)

__all__ = [
    # Catalog
    "Category",
    "PriceRange",
    "Product",
    "ProductVariant",
    # Cart
    "LineItem",
    # Customers
    "Customer",
    "CustomerIdentity",
    "GuestIdentity",
    "AuthenticatedIdentity",
    # Orders
    "FulfillmentSelection",
    "Order",
    "OrderLine",
    "OrderRequest",
    "OrderResult",
    "OrderStatus",
]
