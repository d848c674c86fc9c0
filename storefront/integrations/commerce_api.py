"""
HTTP client for the commerce backend's public store API.

All endpoints live under ``{api_url}/api/public/store/{store_id}``:

- ``GET  /products[?grouped=true]`` and ``GET /categories``
- ``POST /orders``
- ``POST /auth/login``, ``POST /auth/register``
- ``GET|PUT /auth/me``, ``GET /auth/orders[/{orderNumber}]``

Customer endpoints take ``Authorization: Bearer <token>``.

Example:
```python
async with CommerceApiClient(api_url, store_id) as client:
    products = await client.get_products(grouped=True)
```
"""
from __future__ import annotations

import asyncio
from typing import Any
from urllib.parse import quote

import aiohttp
from pydantic import ValidationError

from storefront.core.config import StoreConfig
from storefront.core.constants import FEATURED_PRODUCTS_LIMIT, MSG_ORDER_FAILED
from storefront.core.exceptions import CommerceApiError
from storefront.domain.catalog import Category, Product, product_from_api
from storefront.domain.customer import Customer
from storefront.domain.order import Order, OrderRequest
from storefront.logging_config import logger

DEFAULT_TIMEOUT = 15.0


def _record_id(record: Any) -> Any:
    if isinstance(record, dict):
        return record.get("_id") or record.get("id")
    return record


def _parse_customer(record: Any, message: str) -> Customer:
    """Validated profile; a malformed one is reported like a bad response."""
    try:
        return Customer.from_api(record)
    except (ValidationError, TypeError, ValueError) as e:
        raise CommerceApiError(200, message, record) from e


class CommerceApiClient:
    """Thin async wrapper around the public store endpoints."""

    def __init__(
        self,
        api_url: str,
        store_id: str,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        session: aiohttp.ClientSession | None = None,
    ):
        self.api_url = api_url.rstrip("/")
        self.store_id = store_id
        self._timeout = aiohttp.ClientTimeout(total=timeout)
        self._session = session
        self._owns_session = session is None

    @classmethod
    def from_config(cls, config: StoreConfig, *, timeout: float = DEFAULT_TIMEOUT) -> CommerceApiClient:
        return cls(config.api_url, config.store_id, timeout=timeout)

    async def __aenter__(self) -> CommerceApiClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self._timeout)
            self._owns_session = True
        return self._session

    async def close(self) -> None:
        if self._session and self._owns_session and not self._session.closed:
            await self._session.close()
        self._session = None

    def url(self, path: str) -> str:
        return f"{self.api_url}/api/public/store/{self.store_id}{path}"

    @staticmethod
    def _auth_headers(token: str | None) -> dict[str, str]:
        if not token:
            return {}
        return {"Authorization": f"Bearer {token}"}

    async def _request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: dict[str, str] | None = None,
        token: str | None = None,
        default_message: str = "Request failed",
    ) -> Any:
        """Perform one request; non-2xx and transport errors raise ``CommerceApiError``."""
        session = await self._get_session()
        headers = self._auth_headers(token)
        url = self.url(path)
        try:
            async with session.request(
                method, url, json=json, params=params, headers=headers
            ) as resp:
                try:
                    data = await resp.json(content_type=None)
                except ValueError:
                    data = None

                if resp.status >= 400:
                    message = default_message
                    if isinstance(data, dict) and data.get("message"):
                        message = str(data["message"])
                    logger.warning("%s %s -> %s: %s", method, url, resp.status, message)
                    raise CommerceApiError(resp.status, message, data)

                if data is None:
                    raise CommerceApiError(resp.status, default_message)
                return data
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.error("%s %s failed: %s", method, url, e)
            raise CommerceApiError(0, default_message) from e

    # ===================== CATALOG =====================

    async def get_products(self, grouped: bool = False) -> list[Product]:
        """Store catalog; an empty list when the backend cannot be reached."""
        params = {"grouped": "true"} if grouped else None
        try:
            data = await self._request(
                "GET", "/products", params=params, default_message="Failed to load products"
            )
            if not isinstance(data, list):
                raise CommerceApiError(200, "Unexpected products payload", data)
        except CommerceApiError as e:
            logger.error("Error fetching products: %s", e)
            return []

        products = []
        for record in data:
            try:
                products.append(product_from_api(record))
            except (ValidationError, TypeError, ValueError, AttributeError) as e:
                logger.warning("Skipping malformed product %r: %s", _record_id(record), e)
        return products

    async def get_featured_products(self, limit: int = FEATURED_PRODUCTS_LIMIT) -> list[Product]:
        products = await self.get_products()
        return products[:limit]

    async def get_categories(self) -> list[Category]:
        try:
            data = await self._request(
                "GET", "/categories", default_message="Failed to load categories"
            )
            if not isinstance(data, list):
                raise CommerceApiError(200, "Unexpected categories payload", data)
        except CommerceApiError as e:
            logger.error("Error fetching categories: %s", e)
            return []

        categories = []
        for record in data:
            try:
                categories.append(Category.model_validate(record))
            except ValidationError as e:
                logger.warning("Skipping malformed category %r: %s", _record_id(record), e)
        return categories

    # ===================== ORDERS =====================

    async def create_order(
        self,
        request: OrderRequest,
        *,
        token: str | None = None,
        default_message: str = MSG_ORDER_FAILED,
    ) -> dict[str, Any]:
        data = await self._request(
            "POST",
            "/orders",
            json=request.to_payload(),
            token=token,
            default_message=default_message,
        )
        if not isinstance(data, dict):
            raise CommerceApiError(200, default_message, data)
        return data

    # ===================== CUSTOMER AUTH =====================

    @staticmethod
    def _session_payload(data: Any, default_message: str) -> tuple[str, Customer]:
        if not isinstance(data, dict) or not data.get("token") or not data.get("customer"):
            raise CommerceApiError(200, default_message, data)
        return str(data["token"]), _parse_customer(data["customer"], default_message)

    async def login(self, email: str, password: str, *, default_message: str) -> tuple[str, Customer]:
        data = await self._request(
            "POST",
            "/auth/login",
            json={"email": email, "password": password},
            default_message=default_message,
        )
        return self._session_payload(data, default_message)

    async def register(
        self, payload: dict[str, Any], *, default_message: str
    ) -> tuple[str, Customer]:
        data = await self._request(
            "POST", "/auth/register", json=payload, default_message=default_message
        )
        return self._session_payload(data, default_message)

    async def get_me(self, token: str) -> Customer:
        data = await self._request("GET", "/auth/me", token=token, default_message="Unauthorized")
        if not isinstance(data, dict) or not data.get("customer"):
            raise CommerceApiError(200, "Unexpected profile payload", data)
        return _parse_customer(data["customer"], "Unexpected profile payload")

    async def update_me(
        self, token: str, changes: dict[str, Any], *, default_message: str
    ) -> Customer:
        data = await self._request(
            "PUT", "/auth/me", json=changes, token=token, default_message=default_message
        )
        if not isinstance(data, dict) or not data.get("customer"):
            raise CommerceApiError(200, default_message, data)
        return _parse_customer(data["customer"], default_message)

    async def get_orders(self, token: str) -> list[Order]:
        data = await self._request(
            "GET", "/auth/orders", token=token, default_message="Failed to load orders"
        )
        records = data.get("orders", []) if isinstance(data, dict) else data
        if not isinstance(records, list):
            raise CommerceApiError(200, "Unexpected orders payload", data)
        try:
            return [Order.model_validate(record) for record in records]
        except ValidationError as e:
            raise CommerceApiError(200, "Unexpected orders payload", data) from e

    async def get_order(self, token: str, order_number: str, *, default_message: str) -> Order:
        data = await self._request(
            "GET",
            f"/auth/orders/{quote(str(order_number), safe='')}",
            token=token,
            default_message=default_message,
        )
        if not isinstance(data, dict) or not data.get("order"):
            raise CommerceApiError(200, default_message, data)
        try:
            return Order.model_validate(data["order"])
        except ValidationError as e:
            raise CommerceApiError(200, default_message, data) from e
