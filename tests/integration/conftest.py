from datetime import timedelta
from typing import Dict, List, Tuple

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

from src.libs.result import Error, Result, Return
from src.depends import (
    get_email_sender,
    get_google_identity_verifier,
    get_revoked_session_cache,
    get_session,
    get_unit_of_work,
)
from src.adapter.services.revoked_session_cache import InMemoryRevokedSessionCache
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.app.services.email_sender import EmailSender
from src.app.services.google_identity import GoogleIdentity, GoogleIdentityVerifier


class RecordingEmailSender(EmailSender):
    """Keeps every outgoing email so tests can pull tokens out of them"""

    def __init__(self):
        self.sent: List[Tuple[str, str, Dict]] = []

    async def send_verification_email(self, to: str, user_name: str, token: str) -> None:
        self.sent.append(("verification", to, {"token": token}))

    async def send_password_reset_email(self, to: str, user_name: str, token: str) -> None:
        self.sent.append(("password_reset", to, {"token": token}))

    async def send_password_changed_email(self, to: str, user_name: str) -> None:
        self.sent.append(("password_changed", to, {}))

    def last_token(self, kind: str, to: str) -> str:
        for sent_kind, sent_to, payload in reversed(self.sent):
            if sent_kind == kind and sent_to == to:
                return payload["token"]
        raise AssertionError(f"no {kind} email sent to {to}")


class FakeGoogleIdentityVerifier(GoogleIdentityVerifier):
    """ID tokens are whatever the test registered"""

    def __init__(self):
        self.identities: Dict[str, GoogleIdentity] = {}

    async def verify(self, id_token: str) -> Result[GoogleIdentity]:
        identity = self.identities.get(id_token)
        if identity is None:
            return Return.err(
                Error("INVALID_GOOGLE_TOKEN", "Google sign-in could not be verified")
            )
        return Return.ok(identity)


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine("sqlite+aiosqlite:///./test.db")
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(engine):
    Session = sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with Session() as session:
        yield session


@pytest_asyncio.fixture
def revoked_cache():
    return InMemoryRevokedSessionCache(timedelta(minutes=15))


@pytest_asyncio.fixture
def email_sender():
    return RecordingEmailSender()


@pytest_asyncio.fixture
def google_verifier():
    return FakeGoogleIdentityVerifier()


@pytest_asyncio.fixture
async def client(db_session, revoked_cache, email_sender, google_verifier):
    from src.api.app import create_app
    from config import ApplicationConfig

    app = create_app(ApplicationConfig)

    async def override_get_unit_of_work():
        yield SqlAlchemyUnitOfWork(db_session)

    async def override_get_session():
        yield db_session

    app.dependency_overrides[get_unit_of_work] = override_get_unit_of_work
    app.dependency_overrides[get_session] = override_get_session
    app.dependency_overrides[get_revoked_session_cache] = lambda: revoked_cache
    app.dependency_overrides[get_email_sender] = lambda: email_sender
    app.dependency_overrides[get_google_identity_verifier] = lambda: google_verifier

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
