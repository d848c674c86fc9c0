"""Shared status label helpers for the order history views."""
from __future__ import annotations

from storefront.core.constants import ORDER_MODE_DIRECT
from storefront.domain.order import OrderStatus

UNKNOWN_STATUS_LABEL = "Desconocido"

STATUS_LABELS = {
    OrderStatus.PENDING: "Pendiente",
    OrderStatus.PENDING_CONFIRMATION: "Pendiente de confirmación",
    OrderStatus.CONFIRMED: "Confirmado",
    OrderStatus.COMPLETED: "Completado",
    OrderStatus.CANCELLED: "Cancelado",
}


def status_label(status: str | None) -> str:
    """Return the Spanish label for an order status."""
    return STATUS_LABELS.get(OrderStatus.normalize(status), UNKNOWN_STATUS_LABEL)


def success_message(order_mode: str, order_number: str) -> str:
    """Confirmation text shown after a successful submission."""
    if order_mode == ORDER_MODE_DIRECT:
        return f"¡Pedido confirmado! #{order_number}"
    return f"¡Consulta enviada! #{order_number}"
