from typing import Optional

from fastapi import Depends, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession
from config import ApplicationConfig
from src.libs.result import Error
from src.adapter.services.google_identity_verifier import HttpxGoogleIdentityVerifier
from src.adapter.services.logging_email_sender import LoggingEmailSender
from src.adapter.services.revoked_session_cache import (
    InMemoryRevokedSessionCache,
    RedisRevokedSessionCache,
)
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.api.error import ClientError
from src.api.utils.cookies import ACCESS_TOKEN_COOKIE
from src.app.services.email_sender import EmailSender
from src.app.services.google_identity import GoogleIdentityVerifier
from src.app.services.revoked_session_cache import RevokedSessionCache
from src.app.services.session_manager import SessionManager
from src.app.services.token_codec import (
    AccessTokenClaims,
    TokenCodec,
    parse_access_ttl,
    parse_refresh_lifetime,
)
from src.app.services.unit_of_work import UnitOfWork

engine = create_async_engine(ApplicationConfig.DB_URI, echo=False, future=True)

AsyncSessionLocal = sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
)

security = HTTPBearer(auto_error=False)

ACCESS_TOKEN_TTL = parse_access_ttl(ApplicationConfig.JWT_EXPIRES_IN)
REFRESH_TOKEN_LIFETIME = parse_refresh_lifetime(ApplicationConfig.REFRESH_TOKEN_EXPIRES_IN)

token_codec = TokenCodec(
    ApplicationConfig.JWT_SECRET, ACCESS_TOKEN_TTL, algorithm=ApplicationConfig.JWT_ALGORITHM
)

_revoked_session_cache: Optional[RevokedSessionCache] = None


async def get_session() -> AsyncSession:
    async with AsyncSessionLocal() as session:
        yield session


async def get_unit_of_work():
    async with AsyncSessionLocal() as session:
        yield SqlAlchemyUnitOfWork(session)


def get_token_codec() -> TokenCodec:
    return token_codec


def get_revoked_session_cache() -> RevokedSessionCache:
    """Process-wide denylist, built on first use from CACHE_BACKEND"""
    global _revoked_session_cache
    if _revoked_session_cache is None:
        if ApplicationConfig.CACHE_BACKEND == "memory":
            _revoked_session_cache = InMemoryRevokedSessionCache(ACCESS_TOKEN_TTL)
        else:
            _revoked_session_cache = RedisRevokedSessionCache.from_url(
                ApplicationConfig.REDIS_URL, ACCESS_TOKEN_TTL
            )
    return _revoked_session_cache


async def close_revoked_session_cache() -> None:
    global _revoked_session_cache
    if isinstance(_revoked_session_cache, RedisRevokedSessionCache):
        await _revoked_session_cache.close()
    _revoked_session_cache = None


def get_session_manager(
    uow: UnitOfWork = Depends(get_unit_of_work),
    codec: TokenCodec = Depends(get_token_codec),
    revoked_cache: RevokedSessionCache = Depends(get_revoked_session_cache),
) -> SessionManager:
    # Shares the request's unit of work with the use case that receives it
    return SessionManager(
        uow,
        codec,
        REFRESH_TOKEN_LIFETIME,
        revoked_cache=revoked_cache,
        store_timeout=ApplicationConfig.STORE_TIMEOUT_SECONDS,
    )


def get_email_sender() -> EmailSender:
    return LoggingEmailSender(ApplicationConfig.FRONTEND_URL)


def get_google_identity_verifier() -> GoogleIdentityVerifier:
    return HttpxGoogleIdentityVerifier(
        ApplicationConfig.GOOGLE_CLIENT_ID, ApplicationConfig.GOOGLE_TOKENINFO_URL
    )


def _unauthorized(message: str = "Invalid or expired token") -> ClientError:
    return ClientError(
        Error("UNAUTHORIZED", message), status_code=status.HTTP_401_UNAUTHORIZED
    )


async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    codec: TokenCodec = Depends(get_token_codec),
    revoked_cache: RevokedSessionCache = Depends(get_revoked_session_cache),
) -> AccessTokenClaims:
    """
    Dependency to extract and verify the access token.

    Mobile clients send it as a bearer token; web clients carry it in the
    access_token cookie. Tokens of revoked sessions are refused even
    before they expire.

    Raises:
        ClientError: 401 if the token is missing, invalid, expired or revoked
    """
    if credentials is not None:
        token = credentials.credentials
    else:
        token = request.cookies.get(ACCESS_TOKEN_COOKIE)

    if not token:
        raise _unauthorized("Authentication required")

    result = codec.validate_access_token(token)
    if result.is_err():
        raise _unauthorized()

    claims = result.value
    if claims.session_id and await revoked_cache.contains(claims.session_id):
        raise _unauthorized("Session has been revoked")

    return claims
