"""Customer session: token ownership, profile and order history."""
from __future__ import annotations

from typing import Any

from storefront.core.constants import (
    AUTH_TOKEN_STORAGE_KEY,
    MSG_LOGIN_FAILED,
    MSG_ORDER_NOT_FOUND,
    MSG_PROFILE_FAILED,
    MSG_REGISTER_FAILED,
)
from storefront.core.exceptions import AuthenticationException, CommerceApiError, StorageException
from storefront.core.local_storage import LocalStorage
from storefront.domain.customer import AuthenticatedIdentity, Customer
from storefront.domain.order import Order
from storefront.integrations.commerce_api import CommerceApiClient
from storefront.logging_config import logger


class AuthSession:
    """Holds the bearer token in local storage and the resolved customer."""

    def __init__(
        self,
        client: CommerceApiClient,
        storage: LocalStorage,
        key: str = AUTH_TOKEN_STORAGE_KEY,
    ):
        self._client = client
        self._storage = storage
        self._key = key
        self.customer: Customer | None = None

    @property
    def is_authenticated(self) -> bool:
        return self.customer is not None

    @property
    def token(self) -> str | None:
        try:
            token = self._storage.get(self._key)
        except StorageException as exc:
            logger.warning("Cannot read auth token: %s", exc)
            return None
        return token if isinstance(token, str) and token else None

    def _store_token(self, token: str) -> None:
        try:
            self._storage.set(self._key, token)
        except StorageException as exc:
            logger.warning("Cannot persist auth token: %s", exc)

    def _discard(self) -> None:
        self.customer = None
        try:
            self._storage.delete(self._key)
        except StorageException as exc:
            logger.warning("Cannot delete auth token: %s", exc)

    def _require_token(self) -> str:
        token = self.token
        if not token or not self.customer:
            raise AuthenticationException("No authenticated user")
        return token

    async def restore(self) -> Customer | None:
        """Resolve the stored token; an invalid token silently signs out."""
        token = self.token
        if not token:
            self.customer = None
            return None
        try:
            self.customer = await self._client.get_me(token)
        except CommerceApiError as exc:
            logger.info("Stored session rejected (%s): %s", exc.status, exc.message)
            self._discard()
        return self.customer

    async def login(self, email: str, password: str) -> Customer:
        try:
            token, customer = await self._client.login(
                email, password, default_message=MSG_LOGIN_FAILED
            )
        except CommerceApiError as exc:
            raise AuthenticationException(exc.message or MSG_LOGIN_FAILED) from exc
        self._store_token(token)
        self.customer = customer
        return customer

    async def register(
        self, *, email: str, password: str, name: str, phone: str | None = None
    ) -> Customer:
        payload: dict[str, Any] = {"email": email, "password": password, "name": name}
        if phone:
            payload["phone"] = phone
        try:
            token, customer = await self._client.register(
                payload, default_message=MSG_REGISTER_FAILED
            )
        except CommerceApiError as exc:
            raise AuthenticationException(exc.message or MSG_REGISTER_FAILED) from exc
        self._store_token(token)
        self.customer = customer
        return customer

    def logout(self) -> None:
        self._discard()

    async def update_profile(self, **changes: Any) -> Customer:
        token = self._require_token()
        try:
            self.customer = await self._client.update_me(
                token, changes, default_message=MSG_PROFILE_FAILED
            )
        except CommerceApiError as exc:
            if exc.status == 401:
                self._discard()
            raise AuthenticationException(exc.message or MSG_PROFILE_FAILED) from exc
        return self.customer

    async def list_orders(self) -> list[Order]:
        token = self._require_token()
        try:
            return await self._client.get_orders(token)
        except CommerceApiError as exc:
            if exc.status == 401:
                self._discard()
                raise AuthenticationException(exc.message) from exc
            logger.error("Error fetching orders: %s", exc.message)
            return []

    async def get_order(self, order_number: str) -> Order | None:
        token = self._require_token()
        try:
            return await self._client.get_order(
                token, order_number, default_message=MSG_ORDER_NOT_FOUND
            )
        except CommerceApiError as exc:
            if exc.status == 401:
                self._discard()
                raise AuthenticationException(exc.message) from exc
            logger.info("Order %s unavailable: %s", order_number, exc.message)
            return None

    def identity(self) -> AuthenticatedIdentity | None:
        if not self.customer:
            return None
        return AuthenticatedIdentity.from_customer(self.customer)
