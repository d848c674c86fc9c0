from datetime import datetime, timezone

import pytest

from storefront.domain.order import Order, OrderLine, OrderRequest, OrderResult, OrderStatus
from storefront.domain.order_labels import UNKNOWN_STATUS_LABEL, status_label, success_message


@pytest.mark.parametrize(
    "status, label",
    [
        ("pending", "Pendiente"),
        ("pending_confirmation", "Pendiente de confirmación"),
        (" CONFIRMED ", "Confirmado"),
        ("completed", "Completado"),
        ("cancelled", "Cancelado"),
        (None, "Pendiente"),
        ("lost", UNKNOWN_STATUS_LABEL),
    ],
)
def test_status_label(status, label) -> None:
    assert status_label(status) == label


def test_success_message_depends_on_mode() -> None:
    assert success_message("direct", "12") == "¡Pedido confirmado! #12"
    assert success_message("quote", "12") == "¡Consulta enviada! #12"


def test_order_request_payload_omits_empty_fields() -> None:
    request = OrderRequest(
        customer={"name": "Ana", "phone": "11"},
        items=[OrderLine("a", 2), OrderLine("b", 1)],
        order_mode="quote",
    )

    assert request.to_payload() == {
        "customer": {"name": "Ana", "phone": "11"},
        "items": [{"productId": "a", "quantity": 2}, {"productId": "b", "quantity": 1}],
        "orderMode": "quote",
    }


def test_order_result_from_api() -> None:
    result = OrderResult.from_api({"orderNumber": 1001, "status": "pending"})

    assert result.order_number == "1001"
    assert result.status == OrderStatus.PENDING


def test_order_modified_and_transfer_visibility() -> None:
    created = datetime(2024, 5, 1, 10, 0, tzinfo=timezone.utc)
    order = Order(
        order_number="9",
        status="pending_confirmation",
        created_at=created,
        updated_at=datetime(2024, 5, 1, 10, 0, 30, tzinfo=timezone.utc),
        transfer_details={"alias": "demo"},
    )

    assert order.was_modified is False
    assert order.shows_transfer_details is False
    assert order.model_copy(update={"status": "confirmed"}).shows_transfer_details is True
