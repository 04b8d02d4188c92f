from datetime import timedelta

import pytest
from httpx import AsyncClient
from sqlmodel import select

from src.domain.base import utcnow
from src.domain.entities import User
from api_helpers import bearer, register


@pytest.mark.asyncio
async def test_verify_email(client: AsyncClient, email_sender):
    registered = await register(client)
    token = email_sender.last_token("verification", "alice@example.com")

    response = await client.post("/auth/verify-email", json={"token": token})

    assert response.status_code == 200
    assert response.json()["status"] == "verified"

    me = await client.get("/me", headers=bearer(registered["access_token"]))
    assert me.json()["email_verified"] is True


@pytest.mark.asyncio
async def test_verify_email_from_link(client: AsyncClient, email_sender):
    await register(client)
    token = email_sender.last_token("verification", "alice@example.com")

    response = await client.get(f"/auth/verify-email/{token}")

    assert response.status_code == 200


@pytest.mark.asyncio
async def test_invalid_verification_token(client: AsyncClient):
    response = await client.post("/auth/verify-email", json={"token": "made-up"})

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "INVALID_TOKEN"


@pytest.mark.asyncio
async def test_expired_verification_token(client: AsyncClient, email_sender, db_session):
    await register(client)
    token = email_sender.last_token("verification", "alice@example.com")
    user = (await db_session.exec(select(User).where(User.email == "alice@example.com"))).one()
    user.email_verification_expires_at = utcnow() - timedelta(hours=1)
    db_session.add(user)
    await db_session.commit()

    response = await client.post("/auth/verify-email", json={"token": token})

    assert response.status_code == 410
    assert response.json()["error"]["code"] == "TOKEN_EXPIRED"


@pytest.mark.asyncio
async def test_resend_verification_issues_new_token(client: AsyncClient, email_sender):
    await register(client)
    first = email_sender.last_token("verification", "alice@example.com")

    response = await client.post("/auth/resend-verification", json={"email": "alice@example.com"})

    assert response.status_code == 200
    assert response.json()["status"] == "sent"
    second = email_sender.last_token("verification", "alice@example.com")
    assert second != first

    stale = await client.post("/auth/verify-email", json={"token": first})
    assert stale.status_code == 400
    fresh = await client.post("/auth/verify-email", json={"token": second})
    assert fresh.status_code == 200
