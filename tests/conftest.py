"""Shared pytest fixtures: store config, storage doubles and a fake commerce backend."""
from __future__ import annotations

import asyncio
import copy
from dataclasses import dataclass, field
from typing import Any

import pytest
import pytest_asyncio
from aiohttp import web
from aiohttp.test_utils import TestServer

from storefront.core.config import StoreConfig, parse_store_config
from storefront.core.local_storage import MemoryStorage
from storefront.domain.catalog import Product
from storefront.integrations.commerce_api import CommerceApiClient

STORE_ID = "store-1"

BASE_CONFIG: dict[str, Any] = {
    "storeId": STORE_ID,
    "apiUrl": "http://backend.invalid",
    "business": {
        "name": "Almacén Demo",
        "phone": "+54 11 5555-0000",
        "whatsapp": "+54 9 11 5555-0000",
    },
    "settings": {
        "showStock": True,
        "allowOrders": True,
        "orderMethod": "direct",
        "showPrices": True,
        "currency": "ARS",
        "currencySymbol": "$",
    },
    "branding": {"logo": "/logo.png"},
}


def make_config(**settings: Any) -> StoreConfig:
    data = copy.deepcopy(BASE_CONFIG)
    data["settings"].update(settings)
    return parse_store_config(data)


def make_product(product_id: str = "a", *, price: float = 100, stock: int = 3, **extra: Any) -> Product:
    return Product(id=product_id, name=f"Producto {product_id}", price=price, stock=stock, **extra)


@pytest.fixture
def store_config() -> StoreConfig:
    return make_config()


@pytest.fixture
def storage() -> MemoryStorage:
    return MemoryStorage()


@dataclass
class FakeRedisClient:
    data: dict[str, str] = field(default_factory=dict)
    expiry: dict[str, int] = field(default_factory=dict)
    setex_calls: list[tuple[str, int]] = field(default_factory=list)
    fail: bool = False

    def ping(self) -> bool:
        return True

    def get(self, key: str):
        if self.fail:
            raise ConnectionError("redis down")
        return self.data.get(key)

    def setex(self, key: str, ttl: int, value: str) -> bool:
        if self.fail:
            raise ConnectionError("redis down")
        self.data[key] = value
        self.expiry[key] = ttl
        self.setex_calls.append((key, ttl))
        return True

    def delete(self, key: str) -> int:
        if self.fail:
            raise ConnectionError("redis down")
        existed = 1 if key in self.data else 0
        self.data.pop(key, None)
        self.expiry.pop(key, None)
        return existed


@pytest.fixture
def fake_redis(monkeypatch):
    import storefront.core.local_storage as local_storage_module

    client = FakeRedisClient()
    monkeypatch.setattr(local_storage_module.redis, "from_url", lambda *args, **kwargs: client)
    return client


class FakeCommerceBackend:
    """In-process stand-in for the commerce backend's public store API."""

    def __init__(self) -> None:
        self.products: list[dict[str, Any]] = []
        self.grouped_products: list[dict[str, Any]] = []
        self.categories: list[dict[str, Any]] = []
        self.order_requests: list[dict[str, Any]] = []
        self.order_headers: list[dict[str, str]] = []
        self.order_response: tuple[int, dict[str, Any]] = (
            201,
            {"success": True, "order": {"orderNumber": "1001", "status": "confirmed"}},
        )
        self.order_gate: asyncio.Event | None = None
        self.tokens: dict[str, dict[str, Any]] = {}
        self.passwords: dict[str, str] = {}
        self.orders_by_token: dict[str, list[dict[str, Any]]] = {}
        self.products_status = 200

    def _base(self) -> str:
        return f"/api/public/store/{STORE_ID}"

    def _customer_for(self, request: web.Request) -> dict[str, Any] | None:
        auth = request.headers.get("Authorization", "")
        if not auth.startswith("Bearer "):
            return None
        return self.tokens.get(auth[len("Bearer "):])

    async def get_products(self, request: web.Request) -> web.Response:
        if self.products_status != 200:
            return web.json_response({"message": "boom"}, status=self.products_status)
        if request.query.get("grouped") == "true":
            return web.json_response(self.grouped_products)
        return web.json_response(self.products)

    async def get_categories(self, request: web.Request) -> web.Response:
        return web.json_response(self.categories)

    async def create_order(self, request: web.Request) -> web.Response:
        self.order_requests.append(await request.json())
        self.order_headers.append(dict(request.headers))
        if self.order_gate is not None:
            await self.order_gate.wait()
        status, body = self.order_response
        return web.json_response(body, status=status)

    async def login(self, request: web.Request) -> web.Response:
        body = await request.json()
        for token, customer in self.tokens.items():
            if customer["email"] == body.get("email") and self.passwords.get(token) == body.get("password"):
                return web.json_response({"token": token, "customer": customer})
        return web.json_response({"message": "Credenciales inválidas"}, status=401)

    async def register(self, request: web.Request) -> web.Response:
        body = await request.json()
        token = f"token-{len(self.tokens) + 1}"
        customer = {
            "id": f"c{len(self.tokens) + 1}",
            "name": body["name"],
            "email": body["email"],
            "phone": body.get("phone"),
        }
        self.tokens[token] = customer
        self.passwords[token] = body["password"]
        return web.json_response({"token": token, "customer": customer}, status=201)

    async def me(self, request: web.Request) -> web.Response:
        customer = self._customer_for(request)
        if customer is None:
            return web.json_response({"message": "Token inválido"}, status=401)
        if request.method == "PUT":
            customer.update(await request.json())
        return web.json_response({"customer": customer})

    async def orders(self, request: web.Request) -> web.Response:
        customer = self._customer_for(request)
        if customer is None:
            return web.json_response({"message": "Token inválido"}, status=401)
        token = request.headers["Authorization"][len("Bearer "):]
        return web.json_response({"orders": self.orders_by_token.get(token, [])})

    async def order_detail(self, request: web.Request) -> web.Response:
        customer = self._customer_for(request)
        if customer is None:
            return web.json_response({"message": "Token inválido"}, status=401)
        token = request.headers["Authorization"][len("Bearer "):]
        for order in self.orders_by_token.get(token, []):
            if order["orderNumber"] == request.match_info["number"]:
                return web.json_response({"order": order})
        return web.json_response({"message": "Not found"}, status=404)

    def add_customer(self, token: str, password: str = "secret", **customer: Any) -> dict[str, Any]:
        record = {"id": "c-auth", "name": "Ana", "email": "ana@example.com", "phone": "1155550000"}
        record.update(customer)
        self.tokens[token] = record
        self.passwords[token] = password
        return record

    def app(self) -> web.Application:
        app = web.Application()
        base = self._base()
        app.router.add_get(f"{base}/products", self.get_products)
        app.router.add_get(f"{base}/categories", self.get_categories)
        app.router.add_post(f"{base}/orders", self.create_order)
        app.router.add_post(f"{base}/auth/login", self.login)
        app.router.add_post(f"{base}/auth/register", self.register)
        app.router.add_get(f"{base}/auth/me", self.me)
        app.router.add_put(f"{base}/auth/me", self.me)
        app.router.add_get(f"{base}/auth/orders", self.orders)
        app.router.add_get(f"{base}/auth/orders/{{number}}", self.order_detail)
        return app


@pytest.fixture
def backend() -> FakeCommerceBackend:
    return FakeCommerceBackend()


@pytest_asyncio.fixture
async def api_client(backend: FakeCommerceBackend):
    """CommerceApiClient pointed at a running fake backend."""
    async with TestServer(backend.app()) as server:
        client = CommerceApiClient(str(server.make_url("")).rstrip("/"), STORE_ID, timeout=5)
        try:
            yield client
        finally:
            await client.close()
