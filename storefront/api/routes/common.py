from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Any

from cachetools import TTLCache
from fastapi import Header, HTTPException
from pydantic import BaseModel, ConfigDict, Field

from storefront.application.orders.checkout_composer import CheckoutComposer
from storefront.core.config import Settings, StoreConfig
from storefront.core.local_storage import LocalStorage, create_storage
from storefront.core.order_math import format_price
from storefront.domain.cart import LineItem
from storefront.integrations.commerce_api import CommerceApiClient
from storefront.services.auth_session import AuthSession
from storefront.services.cart_store import CartStore
from storefront.services.catalog_service import CatalogService

logger = logging.getLogger(__name__)

SESSION_HEADER = "X-Session-Id"
MAX_SESSIONS = 10_000
SESSION_TTL_SECONDS = 3600  # idle visitors are rebuilt from storage

_SESSION_ID_RE = re.compile(r"^[A-Za-z0-9_-]{8,128}$")


# =============================================================================
# Visitor sessions
# =============================================================================


@dataclass
class VisitorSession:
    """Cart, customer session and checkout flow of one browser."""

    session_id: str
    cart: CartStore
    auth: AuthSession
    composer: CheckoutComposer


@dataclass
class StorefrontContext:
    config: StoreConfig
    client: CommerceApiClient
    storage: LocalStorage
    catalog: CatalogService
    _sessions: TTLCache[str, VisitorSession] = field(
        default_factory=lambda: TTLCache(maxsize=MAX_SESSIONS, ttl=SESSION_TTL_SECONDS)
    )

    @classmethod
    def from_settings(cls, settings: Settings) -> StorefrontContext:
        config = settings.store_config()
        client = CommerceApiClient.from_config(config, timeout=settings.http_timeout)
        storage = create_storage(settings.redis_url, settings.data_dir)
        return cls(config=config, client=client, storage=storage, catalog=CatalogService(client))

    def session(self, session_id: str) -> VisitorSession:
        """Session for ``session_id``; the cart is re-read from storage on every call."""
        visitor = self._sessions.get(session_id)
        if visitor is None:
            storage = self.storage.namespace(f"session:{session_id}")
            cart = CartStore(storage)
            auth = AuthSession(self.client, storage)
            composer = CheckoutComposer(cart, self.client, self.config, auth)
            visitor = VisitorSession(session_id, cart, auth, composer)
        # Re-inserting restarts the idle timer
        self._sessions[session_id] = visitor

        # Another worker may have written this cart; keep the in-flight snapshot untouched
        if not visitor.composer.is_submitting:
            visitor.cart.load()
        return visitor

    async def close(self) -> None:
        await self.client.close()


_context: StorefrontContext | None = None


def set_context(context: StorefrontContext | None) -> None:
    global _context
    _context = context


def get_context() -> StorefrontContext:
    if _context is None:
        raise HTTPException(status_code=503, detail="Storefront not configured")
    return _context


def get_session_id(x_session_id: str | None = Header(None, alias=SESSION_HEADER)) -> str:
    if not x_session_id or not _SESSION_ID_RE.match(x_session_id):
        raise HTTPException(status_code=400, detail=f"{SESSION_HEADER} header required")
    return x_session_id


# =============================================================================
# Pydantic Models
# =============================================================================


class ApiModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class CartLineResponse(ApiModel):
    id: str
    name: str
    image: str
    category: str
    price: float
    stock: int
    quantity: int
    subtotal: float
    price_label: str = Field(..., alias="priceLabel")


class CartResponse(ApiModel):
    items: list[CartLineResponse]
    total_items: int = Field(..., alias="totalItems")
    total_price: float = Field(..., alias="totalPrice")
    total_label: str = Field(..., alias="totalLabel")


def cart_response(cart: CartStore, currency_symbol: str) -> CartResponse:
    def line(item: LineItem) -> CartLineResponse:
        return CartLineResponse(
            id=item.id,
            name=item.name,
            image=item.image,
            category=item.category,
            price=item.price,
            stock=item.stock,
            quantity=item.quantity,
            subtotal=item.subtotal,
            price_label=format_price(item.price, currency_symbol),
        )

    return CartResponse(
        items=[line(item) for item in cart.items],
        total_items=cart.total_items,
        total_price=cart.total_price,
        total_label=format_price(cart.total_price, currency_symbol),
    )


def dump(model: BaseModel) -> dict[str, Any]:
    return model.model_dump(by_alias=True, mode="json")


async def ensure_customer(visitor: VisitorSession) -> None:
    """Resolve a stored token into a customer once per process."""
    if visitor.auth.token and not visitor.auth.is_authenticated:
        await visitor.auth.restore()
