"""Customer profile and checkout identities."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class Customer(BaseModel):
    """Authenticated store customer as returned by ``/auth/me``."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str
    name: str = ""
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    total_orders: Optional[int] = Field(None, alias="totalOrders")
    total_spent: Optional[float] = Field(None, alias="totalSpent")

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> Customer:
        payload = dict(data)
        if "id" not in payload and "_id" in payload:
            payload["id"] = payload["_id"]
        payload["id"] = str(payload.get("id", ""))
        return cls.model_validate(payload)


def _clean(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value or None


@dataclass(frozen=True)
class GuestIdentity:
    """Contact data typed into the checkout form for this order only."""

    name: str
    phone: str
    email: str | None = None
    address: str | None = None

    @property
    def is_authenticated(self) -> bool:
        return False

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "name": (self.name or "").strip(),
            "phone": (self.phone or "").strip(),
        }
        email = _clean(self.email)
        if email:
            payload["email"] = email
        address = _clean(self.address)
        if address:
            payload["address"] = address
        return payload


@dataclass(frozen=True)
class AuthenticatedIdentity(GuestIdentity):
    """Contact data pre-filled from the customer's profile; not editable."""

    customer_id: str = ""

    @property
    def is_authenticated(self) -> bool:
        return True

    @classmethod
    def from_customer(cls, customer: Customer) -> AuthenticatedIdentity:
        return cls(
            name=customer.name or "",
            phone=customer.phone or "",
            email=customer.email or None,
            address=customer.address,
            customer_id=customer.id,
        )


CustomerIdentity = Union[GuestIdentity, AuthenticatedIdentity]
