from __future__ import annotations

import pytest

from storefront.core.constants import AUTH_TOKEN_STORAGE_KEY
from storefront.core.exceptions import AuthenticationException
from storefront.services.auth_session import AuthSession


@pytest.fixture
def auth(api_client, storage) -> AuthSession:
    return AuthSession(api_client, storage)


@pytest.mark.asyncio
async def test_restore_resolves_stored_token(auth, backend, storage) -> None:
    backend.add_customer("tok")
    storage.set(AUTH_TOKEN_STORAGE_KEY, "tok")

    customer = await auth.restore()

    assert customer.name == "Ana"
    assert auth.is_authenticated is True
    assert auth.identity().is_authenticated is True


@pytest.mark.asyncio
async def test_restore_discards_invalid_token_silently(auth, storage) -> None:
    storage.set(AUTH_TOKEN_STORAGE_KEY, "expired")

    assert await auth.restore() is None
    assert auth.is_authenticated is False
    assert storage.get(AUTH_TOKEN_STORAGE_KEY) is None
    assert auth.identity() is None


@pytest.mark.asyncio
async def test_restore_accepts_profile_without_email(auth, backend, storage) -> None:
    backend.add_customer("tok", email=None)
    storage.set(AUTH_TOKEN_STORAGE_KEY, "tok")

    customer = await auth.restore()

    assert customer.email is None
    assert auth.identity().to_payload() == {"name": "Ana", "phone": "1155550000"}


@pytest.mark.asyncio
async def test_restore_discards_unreadable_profile_silently(auth, backend, storage) -> None:
    backend.add_customer("tok", totalOrders="muchos")
    storage.set(AUTH_TOKEN_STORAGE_KEY, "tok")

    assert await auth.restore() is None
    assert auth.is_authenticated is False
    assert storage.get(AUTH_TOKEN_STORAGE_KEY) is None


@pytest.mark.asyncio
async def test_login_with_unreadable_profile_is_authentication_error(auth, backend, storage) -> None:
    backend.add_customer("tok", password="pw", totalSpent={"ars": 1})

    with pytest.raises(AuthenticationException):
        await auth.login("ana@example.com", "pw")

    assert storage.get(AUTH_TOKEN_STORAGE_KEY) is None


@pytest.mark.asyncio
async def test_restore_without_token(auth) -> None:
    assert await auth.restore() is None


@pytest.mark.asyncio
async def test_login_stores_token(auth, backend, storage) -> None:
    backend.add_customer("tok", password="pw")

    customer = await auth.login("ana@example.com", "pw")

    assert customer.email == "ana@example.com"
    assert storage.get(AUTH_TOKEN_STORAGE_KEY) == "tok"


@pytest.mark.asyncio
async def test_login_failure_surfaces_server_message(auth, backend, storage) -> None:
    backend.add_customer("tok", password="pw")

    with pytest.raises(AuthenticationException) as exc_info:
        await auth.login("ana@example.com", "wrong")

    assert exc_info.value.message == "Credenciales inválidas"
    assert storage.get(AUTH_TOKEN_STORAGE_KEY) is None


@pytest.mark.asyncio
async def test_register_then_logout(auth, storage) -> None:
    customer = await auth.register(email="b@example.com", password="pw", name="Beto", phone="11")

    assert customer.name == "Beto"
    assert auth.token

    auth.logout()

    assert auth.is_authenticated is False
    assert auth.token is None


@pytest.mark.asyncio
async def test_update_profile(auth, backend) -> None:
    backend.add_customer("tok", password="pw")
    await auth.login("ana@example.com", "pw")

    customer = await auth.update_profile(address="Calle 9")

    assert customer.address == "Calle 9"
    assert auth.customer.address == "Calle 9"


@pytest.mark.asyncio
async def test_update_profile_requires_session(auth) -> None:
    with pytest.raises(AuthenticationException):
        await auth.update_profile(name="x")


@pytest.mark.asyncio
async def test_order_history(auth, backend) -> None:
    backend.add_customer("tok", password="pw")
    backend.orders_by_token["tok"] = [
        {
            "orderNumber": "42",
            "status": "confirmed",
            "total": 1500,
            "createdAt": "2024-05-01T10:00:00Z",
            "updatedAt": "2024-05-01T10:05:00Z",
            "transferDetails": {"alias": "demo.alias"},
        }
    ]
    await auth.login("ana@example.com", "pw")

    [order] = await auth.list_orders()
    detail = await auth.get_order("42")

    assert order.was_modified is True
    assert order.shows_transfer_details is True
    assert detail.status_label == "Confirmado"
    assert await auth.get_order("404") is None


@pytest.mark.asyncio
async def test_revoked_token_signs_out_on_history(auth, backend, storage) -> None:
    backend.add_customer("tok", password="pw")
    await auth.login("ana@example.com", "pw")
    backend.tokens.clear()

    with pytest.raises(AuthenticationException):
        await auth.list_orders()

    assert auth.is_authenticated is False
    assert storage.get(AUTH_TOKEN_STORAGE_KEY) is None
