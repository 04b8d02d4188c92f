"""
Session Manager

The session state machine. A session is ACTIVE until it is either revoked
(explicit, terminal) or passes expires_at (detected lazily on access,
terminal). Nothing leaves REVOKED or EXPIRED.

The manager works inside the caller's unit of work and never commits;
use cases own the transaction boundary.
"""

import logging
from datetime import datetime, timedelta
from enum import Enum
from typing import Awaitable, List, Optional, TypeVar
from uuid import UUID

from pydantic import BaseModel

from src.libs.result import Error, Result, Return
from src.app.services.errors import DEFAULT_STORE_TIMEOUT, guard_store_call
from src.app.services.revoked_session_cache import RevokedSessionCache
from src.app.services.token_codec import TokenCodec
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow
from src.domain.entities import Session, SessionState

logger = logging.getLogger(__name__)

T = TypeVar("T")

INVALID_REFRESH_TOKEN_MESSAGE = "Invalid refresh token. Please log in again."

# Internal failure kinds; all of them mean "log in again" to the client
SESSION_NOT_FOUND = "SESSION_NOT_FOUND"
SESSION_REVOKED = "SESSION_REVOKED"
SESSION_EXPIRED = "SESSION_EXPIRED"
MALFORMED_REFRESH_TOKEN = "MALFORMED_REFRESH_TOKEN"

SESSION_FAILURE_CODES = frozenset(
    {SESSION_NOT_FOUND, SESSION_REVOKED, SESSION_EXPIRED, MALFORMED_REFRESH_TOKEN}
)


class RevokeKind(str, Enum):
    token = "token"
    session_id = "session_id"


class RevokeTarget(BaseModel):
    """What to revoke, stated by the caller rather than guessed from the string"""

    kind: RevokeKind
    value: str

    @classmethod
    def by_token(cls, refresh_token: str) -> "RevokeTarget":
        return cls(kind=RevokeKind.token, value=refresh_token)

    @classmethod
    def by_session_id(cls, session_id: str) -> "RevokeTarget":
        return cls(kind=RevokeKind.session_id, value=session_id)


class IssuedSession(BaseModel):
    session_id: str
    refresh_token: str
    expires_at: datetime


class SessionIdentity(BaseModel):
    """Who a valid refresh token belongs to"""

    user_id: UUID
    email: str
    role: str
    session_id: str
    version: int


def _session_failure(code: str, reason: str) -> Error:
    return Error(code, INVALID_REFRESH_TOKEN_MESSAGE, reason=reason)


class SessionManager:
    def __init__(
        self,
        uow: UnitOfWork,
        codec: TokenCodec,
        refresh_lifetime: timedelta,
        revoked_cache: Optional[RevokedSessionCache] = None,
        store_timeout: float = DEFAULT_STORE_TIMEOUT,
    ):
        self.uow = uow
        self.codec = codec
        self.refresh_lifetime = refresh_lifetime
        self.revoked_cache = revoked_cache
        self.store_timeout = store_timeout

    async def create_session(
        self,
        user_id: UUID,
        user_agent: Optional[str] = None,
        ip_address: Optional[str] = None,
    ) -> IssuedSession:
        """Persist a new session and mint its first refresh token"""
        session = await self._store(
            "create",
            self.uow.sessions.create(
                user_id,
                self.refresh_lifetime,
                user_agent=user_agent,
                ip_address=ip_address,
            ),
        )
        logger.info("Session created for user %s", user_id)
        return IssuedSession(
            session_id=session.session_id,
            refresh_token=self.codec.mint_refresh_token(session.session_id, session.version),
            expires_at=session.expires_at,
        )

    async def verify_and_consume(self, refresh_token: str) -> Result[SessionIdentity]:
        """
        Resolve a refresh token to the identity of a live session.

        Failures carry one of the four session failure codes and always the
        same client-facing message. An expired session is deleted on the way out.
        """
        decoded = self.codec.decode_refresh_token(refresh_token)
        if decoded.is_err():
            logger.info("Refresh rejected: %s", decoded.error.reason)
            return Return.err(_session_failure(MALFORMED_REFRESH_TOKEN, decoded.error.reason))
        payload = decoded.value

        session = await self._store(
            "lookup", self.uow.sessions.get_by_session_id(payload.session_id)
        )
        if session is None:
            return self._reject(SESSION_NOT_FOUND, payload.session_id, "unknown session")

        now = utcnow()
        state = session.state(now)
        if state == SessionState.revoked:
            return self._reject(SESSION_REVOKED, session.session_id, "session revoked")
        if state == SessionState.expired:
            await self._store("delete", self.uow.sessions.delete(session.session_id))
            return self._reject(SESSION_EXPIRED, session.session_id, "session expired")
        if payload.version != session.version:
            return self._reject(
                SESSION_REVOKED,
                session.session_id,
                f"stale refresh token (version {payload.version}, current {session.version})",
            )

        user = await self._store("user lookup", self.uow.users.get_by_id(session.user_id))
        if user is None:
            return self._reject(SESSION_NOT_FOUND, session.session_id, "owner no longer exists")

        await self._store("touch", self.uow.sessions.touch(session.session_id))

        return Return.ok(
            SessionIdentity(
                user_id=user.id,
                email=user.email,
                role=user.role.value,
                session_id=session.session_id,
                version=session.version,
            )
        )

    async def rotate(self, session_id: str, expected_version: int) -> Result[str]:
        """
        Issue the next refresh token for a session, extending its expiry.

        The session keeps its identity; its version moves forward so the
        previous token stops being exchangeable. Loses cleanly if another
        rotation or a revocation got there first.
        """
        new_version = await self._store(
            "rotate",
            self.uow.sessions.touch_and_extend(
                session_id, expected_version, self.refresh_lifetime
            ),
        )
        if new_version is None:
            return self._reject(
                SESSION_REVOKED, session_id, "rotation lost to a concurrent update"
            )
        return Return.ok(self.codec.mint_refresh_token(session_id, new_version))

    async def revoke(self, target: RevokeTarget) -> bool:
        """Revoke one session. Returns True if a live session was revoked."""
        if target.kind == RevokeKind.token:
            decoded = self.codec.decode_refresh_token(target.value)
            if decoded.is_err():
                logger.info("Revoke skipped: %s", decoded.error.reason)
                return False
            session_id = decoded.value.session_id
        else:
            session_id = target.value

        revoked = await self._store("revoke", self.uow.sessions.revoke(session_id))
        if revoked:
            await self._denylist([session_id])
            logger.info("Session %s revoked", session_id)
        return revoked

    async def revoke_all_for_user(self, user_id: UUID) -> int:
        revoked = await self._store(
            "revoke all", self.uow.sessions.revoke_all_for_user(user_id)
        )
        await self._denylist(revoked)
        logger.info("Revoked %d session(s) for user %s", len(revoked), user_id)
        return len(revoked)

    async def revoke_selected(self, user_id: UUID, session_ids: List[str]) -> int:
        revoked = await self._store(
            "revoke selected", self.uow.sessions.revoke_many(user_id, session_ids)
        )
        await self._denylist(revoked)
        return len(revoked)

    async def revoke_others(self, user_id: UUID, keep_session_id: str) -> int:
        revoked = await self._store(
            "revoke others", self.uow.sessions.revoke_all_except(user_id, keep_session_id)
        )
        await self._denylist(revoked)
        return len(revoked)

    async def list_active(self, user_id: UUID) -> List[Session]:
        return await self._store("list", self.uow.sessions.get_active_by_user_id(user_id))

    async def get_owned_session(self, user_id: UUID, session_id: str) -> Optional[Session]:
        """The session, or None when it is missing or belongs to someone else"""
        session = await self._store("lookup", self.uow.sessions.get_by_session_id(session_id))
        if session is None or session.user_id != user_id:
            return None
        return session

    async def cleanup_expired(self) -> int:
        """Sweep expired rows. Revoked rows stay for auditing until they expire."""
        count = await self._store("cleanup", self.uow.sessions.delete_expired())
        logger.info("Deleted %d expired session(s)", count)
        return count

    def _reject(self, code: str, session_id: str, reason: str) -> Result:
        logger.info("Refresh rejected for session %s: %s (%s)", session_id, code, reason)
        return Return.err(_session_failure(code, reason))

    async def _denylist(self, session_ids: List[str]) -> None:
        if self.revoked_cache is not None and session_ids:
            await self.revoked_cache.add(session_ids)

    async def _store(self, operation: str, call: Awaitable[T]) -> T:
        return await guard_store_call(operation, call, timeout=self.store_timeout)
