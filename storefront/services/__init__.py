"""Business services owning storefront state."""

from .auth_session import AuthSession
from .cart_store import CartStore
from .catalog_service import CatalogService, filter_products

__all__ = [
    "AuthSession",
    "CartStore",
    "CatalogService",
    "filter_products",
]
