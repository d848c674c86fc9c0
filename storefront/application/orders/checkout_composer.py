"""Checkout flow for one checkout view: in-flight guard and cart reconciliation."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from storefront.application.orders.submit_order import (
    CheckoutResult,
    CheckoutTotals,
    compute_totals,
    resolve_method,
    submit_order,
)
from storefront.core.config import StoreConfig
from storefront.core.constants import MSG_ALREADY_SUBMITTING
from storefront.domain.customer import AuthenticatedIdentity, CustomerIdentity, GuestIdentity
from storefront.domain.order import FulfillmentSelection
from storefront.domain.order_labels import success_message
from storefront.integrations.commerce_api import CommerceApiClient
from storefront.logging_config import logger
from storefront.services.auth_session import AuthSession
from storefront.services.cart_store import CartStore


class CheckoutState(str, Enum):
    EDITING = "editing"
    SUBMITTING = "submitting"
    SUCCESS = "success"
    FAILED = "failed"


@dataclass(frozen=True)
class OrderSuccess:
    order_number: str
    mode: str

    @property
    def message(self) -> str:
        return success_message(self.mode, self.order_number)


class CheckoutComposer:
    """Reads cart snapshots and submits them; clears the cart only on success.

    Side effects run in a fixed order: network call, then (on success) cart
    clear, then the success state. A response that arrives after
    ``detach()`` changes nothing.
    """

    def __init__(
        self,
        cart: CartStore,
        client: CommerceApiClient,
        config: StoreConfig,
        auth: AuthSession | None = None,
    ):
        self._cart = cart
        self._client = client
        self._config = config
        self._auth = auth
        self._in_flight = False
        self._active = True
        self.state = CheckoutState.EDITING
        self.success: OrderSuccess | None = None
        self.last_result: CheckoutResult | None = None

    @property
    def is_submitting(self) -> bool:
        return self._in_flight

    @property
    def is_active(self) -> bool:
        return self._active

    def detach(self) -> None:
        """The customer left the checkout view; late responses are ignored."""
        self._active = False

    def quote(self, shipping_method: str | None = None) -> CheckoutTotals:
        enabled = self._config.settings.shipping.enabled_methods()
        method, _ = resolve_method(enabled, shipping_method)
        return compute_totals(self._cart.snapshot(), self._config, method)

    def identity(
        self,
        *,
        name: str = "",
        phone: str = "",
        email: str | None = None,
        address: str | None = None,
    ) -> CustomerIdentity:
        """Profile data wins for signed-in customers; the form fills its gaps."""
        if self._auth is not None:
            profile = self._auth.identity()
            if profile is not None:
                return AuthenticatedIdentity(
                    name=profile.name or name,
                    phone=profile.phone or phone,
                    email=profile.email or email,
                    address=address or profile.address,
                    customer_id=profile.customer_id,
                )
        return GuestIdentity(name=name, phone=phone, email=email, address=address)

    async def submit(
        self,
        *,
        name: str = "",
        phone: str = "",
        email: str | None = None,
        address: str | None = None,
        notes: str | None = None,
        fulfillment: FulfillmentSelection | None = None,
    ) -> CheckoutResult:
        if self._in_flight:
            return CheckoutResult(False, "in_flight", MSG_ALREADY_SUBMITTING)

        identity = self.identity(name=name, phone=phone, email=email, address=address)
        snapshot = self._cart.snapshot()
        token = self._auth.token if self._auth is not None and identity.is_authenticated else None

        self._in_flight = True
        self.state = CheckoutState.SUBMITTING
        try:
            result = await submit_order(
                snapshot,
                identity,
                notes,
                fulfillment or FulfillmentSelection(),
                client=self._client,
                config=self._config,
                token=token,
            )
        finally:
            self._in_flight = False

        if not self._active:
            logger.info("Ignoring checkout response after the view was closed")
            return result

        self.last_result = result
        if result.ok and result.order is not None:
            self._cart.clear_cart()
            self.success = OrderSuccess(result.order.order_number, result.order_mode or "")
            self.state = CheckoutState.SUCCESS
        elif result.error_key == "validation":
            self.state = CheckoutState.EDITING
        else:
            self.state = CheckoutState.FAILED
        return result
