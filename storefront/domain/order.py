"""Order domain types: outbound request, submission result, order history."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from storefront.core.constants import ORDER_MODIFIED_THRESHOLD_SECONDS


class OrderStatus:
    """Order lifecycle statuses reported by the backend."""

    PENDING = "pending"
    PENDING_CONFIRMATION = "pending_confirmation"
    CONFIRMED = "confirmed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    ALL = (PENDING, PENDING_CONFIRMATION, CONFIRMED, COMPLETED, CANCELLED)

    @classmethod
    def normalize(cls, status: str | None) -> str:
        if not status:
            return cls.PENDING
        return str(status).strip().lower()


@dataclass(frozen=True)
class OrderLine:
    """``{productId, quantity}`` pair; price is never sent."""

    product_id: str
    quantity: int

    def to_payload(self) -> dict[str, Any]:
        return {"productId": self.product_id, "quantity": int(self.quantity)}


@dataclass(frozen=True)
class FulfillmentSelection:
    shipping_method: str | None = None
    payment_method: str | None = None


@dataclass
class OrderRequest:
    customer: dict[str, Any]
    items: list[OrderLine]
    order_mode: str
    notes: str | None = None
    shipping_method: dict[str, str] | None = None
    payment_method: dict[str, str] | None = None

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "customer": dict(self.customer),
            "items": [line.to_payload() for line in self.items],
            "orderMode": self.order_mode,
        }
        if self.notes:
            payload["notes"] = self.notes
        if self.shipping_method:
            payload["shippingMethod"] = dict(self.shipping_method)
        if self.payment_method:
            payload["paymentMethod"] = dict(self.payment_method)
        return payload


@dataclass
class OrderResult:
    order_number: str
    status: str | None = None
    raw: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_api(cls, order: dict[str, Any]) -> OrderResult:
        return cls(
            order_number=str(order.get("orderNumber", "")),
            status=order.get("status"),
            raw=dict(order),
        )


# =============================================================================
# Order history (authenticated customers)
# =============================================================================


class _OrderModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class OrderItem(_OrderModel):
    id: Optional[str] = None
    name: str = ""
    quantity: int = 0
    price: float = 0
    subtotal: Optional[float] = None
    image: Optional[str] = None


class MethodLabel(_OrderModel):
    method: str
    label: str = ""
    cost: Optional[float] = None


class TransferDetails(_OrderModel):
    bank_name: Optional[str] = Field(None, alias="bankName")
    cbu: Optional[str] = None
    alias: Optional[str] = None
    holder: Optional[str] = None


class Order(_OrderModel):
    id: Optional[str] = None
    order_number: str = Field(..., alias="orderNumber")
    items: list[OrderItem] = Field(default_factory=list)
    total: float = 0
    shipping_cost: float = Field(0, alias="shippingCost")
    shipping_method: Optional[MethodLabel] = Field(None, alias="shippingMethod")
    payment_method: Optional[MethodLabel] = Field(None, alias="paymentMethod")
    notes: Optional[str] = None
    status: str = OrderStatus.PENDING
    created_at: datetime = Field(..., alias="createdAt")
    updated_at: Optional[datetime] = Field(None, alias="updatedAt")
    transfer_details: Optional[TransferDetails] = Field(None, alias="transferDetails")

    @property
    def was_modified(self) -> bool:
        """True when the store edited the order after it was placed."""
        if self.updated_at is None:
            return False
        delta = (self.updated_at - self.created_at).total_seconds()
        return delta > ORDER_MODIFIED_THRESHOLD_SECONDS

    @property
    def status_label(self) -> str:
        from storefront.domain.order_labels import status_label

        return status_label(self.status)

    @property
    def shows_transfer_details(self) -> bool:
        return self.status == OrderStatus.CONFIRMED and self.transfer_details is not None
