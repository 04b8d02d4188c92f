import pytest
from httpx import AsyncClient

from api_helpers import PASSWORD, bearer, login, register

NEW_PASSWORD = "BrandNewPass456!"


@pytest.mark.asyncio
async def test_password_reset_flow(client: AsyncClient, email_sender):
    registered = await register(client)
    other = await login(client)

    requested = await client.post("/auth/forgot-password", json={"email": "alice@example.com"})
    assert requested.status_code == 200
    assert requested.json()["status"] == "sent"
    token = email_sender.last_token("password_reset", "alice@example.com")

    reset = await client.post(
        "/auth/reset-password", json={"token": token, "new_password": NEW_PASSWORD}
    )
    assert reset.status_code == 200
    assert reset.json()["status"] == "success"

    # every session is signed out
    for data in (registered, other):
        refresh = await client.post("/auth/refresh", json={"refresh_token": data["refresh_token"]})
        assert refresh.status_code == 401

    old = await client.post(
        "/auth/login", json={"identifier": "alice@example.com", "password": PASSWORD}
    )
    assert old.status_code == 401

    new = await client.post(
        "/auth/login", json={"identifier": "alice@example.com", "password": NEW_PASSWORD}
    )
    assert new.status_code == 200


@pytest.mark.asyncio
async def test_reset_token_is_single_use(client: AsyncClient, email_sender):
    await register(client)
    await client.post("/auth/forgot-password", json={"email": "alice@example.com"})
    token = email_sender.last_token("password_reset", "alice@example.com")

    first = await client.post(
        "/auth/reset-password", json={"token": token, "new_password": NEW_PASSWORD}
    )
    second = await client.post(
        "/auth/reset-password", json={"token": token, "new_password": "AnotherPass789!"}
    )

    assert first.status_code == 200
    assert second.status_code == 409
    assert second.json()["error"]["code"] == "TOKEN_ALREADY_USED"


@pytest.mark.asyncio
async def test_new_request_invalidates_earlier_token(client: AsyncClient, email_sender):
    await register(client)
    await client.post("/auth/forgot-password", json={"email": "alice@example.com"})
    earlier = email_sender.last_token("password_reset", "alice@example.com")
    await client.post("/auth/forgot-password", json={"email": "alice@example.com"})

    response = await client.post(
        "/auth/reset-password", json={"token": earlier, "new_password": NEW_PASSWORD}
    )

    assert response.status_code == 409
    assert response.json()["error"]["code"] == "TOKEN_ALREADY_USED"


@pytest.mark.asyncio
async def test_forgot_password_unknown_email(client: AsyncClient, email_sender):
    response = await client.post("/auth/forgot-password", json={"email": "ghost@example.com"})

    assert response.status_code == 200
    assert response.json()["status"] == "sent"
    assert email_sender.sent == []


@pytest.mark.asyncio
async def test_reset_with_unknown_token(client: AsyncClient):
    response = await client.post(
        "/auth/reset-password", json={"token": "made-up", "new_password": NEW_PASSWORD}
    )

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "INVALID_TOKEN"


@pytest.mark.asyncio
async def test_change_password_keeps_current_session(client: AsyncClient, email_sender):
    registered = await register(client)
    other = await login(client)

    response = await client.post(
        "/auth/change-password",
        json={"current_password": PASSWORD, "new_password": NEW_PASSWORD},
        headers=bearer(registered["access_token"]),
    )

    assert response.status_code == 200
    assert response.json()["revoked_count"] == 1

    kept = await client.post(
        "/auth/refresh", json={"refresh_token": registered["refresh_token"]}
    )
    assert kept.status_code == 200
    dropped = await client.post("/auth/refresh", json={"refresh_token": other["refresh_token"]})
    assert dropped.status_code == 401

    assert any(kind == "password_changed" for kind, _, _ in email_sender.sent)


@pytest.mark.asyncio
async def test_change_password_wrong_current(client: AsyncClient):
    registered = await register(client)

    response = await client.post(
        "/auth/change-password",
        json={"current_password": "WrongPass123!", "new_password": NEW_PASSWORD},
        headers=bearer(registered["access_token"]),
    )

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "INVALID_CREDENTIALS"


@pytest.mark.asyncio
async def test_overlong_new_password_is_rejected(client: AsyncClient, email_sender):
    registered = await register(client)
    await client.post("/auth/forgot-password", json={"email": "alice@example.com"})
    token = email_sender.last_token("password_reset", "alice@example.com")

    reset = await client.post(
        "/auth/reset-password", json={"token": token, "new_password": "a" * 73}
    )
    changed = await client.post(
        "/auth/change-password",
        json={"current_password": PASSWORD, "new_password": "a" * 73},
        headers=bearer(registered["access_token"]),
    )

    assert reset.status_code == changed.status_code == 400
    assert reset.json()["error"]["code"] == "INVALID_PASSWORD"
    assert changed.json()["error"]["code"] == "INVALID_PASSWORD"
