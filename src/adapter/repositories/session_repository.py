from datetime import timedelta
from typing import List, Optional
from uuid import UUID

from sqlalchemy import delete
from sqlmodel import select, update
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.repositories.session_repository import ISessionRepository
from src.domain.base import utcnow
from src.domain.entities import Session


class SessionRepository(ISessionRepository):
    """Session repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(
        self,
        user_id: UUID,
        lifetime: timedelta,
        user_agent: Optional[str] = None,
        ip_address: Optional[str] = None,
    ) -> Session:
        """Create a new session"""
        now = utcnow()
        session_obj = Session(
            user_id=user_id,
            user_agent=user_agent,
            ip_address=ip_address,
            created_at=now,
            last_used_at=now,
            expires_at=now + lifetime,
        )
        self.session.add(session_obj)
        await self.session.flush()
        await self.session.refresh(session_obj)
        return session_obj

    async def get_by_session_id(self, session_id: str) -> Optional[Session]:
        """Get session by public session_id"""
        stmt = select(Session).where(Session.session_id == session_id)
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def get_active_by_user_id(self, user_id: UUID) -> List[Session]:
        """Get all live sessions for a user"""
        stmt = (
            select(Session)
            .where(
                Session.user_id == user_id,
                Session.is_revoked == False,
                Session.expires_at >= utcnow(),
            )
            .order_by(Session.created_at.desc())
        )
        result = await self.session.exec(stmt)
        return list(result.all())

    async def touch(self, session_id: str) -> None:
        """Record a successful use of the session"""
        stmt = (
            update(Session)
            .where(Session.session_id == session_id)
            .values(last_used_at=utcnow())
            .execution_options(synchronize_session="fetch")
        )
        await self.session.execute(stmt)
        await self.session.flush()

    async def touch_and_extend(
        self, session_id: str, expected_version: int, lifetime: timedelta
    ) -> Optional[int]:
        """
        Compare-and-swap on version.

        The WHERE clause carries the expected version, so when two refreshes
        race on the same token only the first UPDATE matches a row.
        """
        now = utcnow()
        stmt = (
            update(Session)
            .where(
                Session.session_id == session_id,
                Session.version == expected_version,
                Session.is_revoked == False,
            )
            .values(
                last_used_at=now,
                expires_at=now + lifetime,
                version=Session.version + 1,
            )
            .execution_options(synchronize_session="fetch")
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        if result.rowcount != 1:
            return None
        return expected_version + 1

    async def revoke(self, session_id: str) -> bool:
        """Revoke a specific session by session_id"""
        stmt = (
            update(Session)
            .where(Session.session_id == session_id, Session.is_revoked == False)
            .values(is_revoked=True, revoked_at=utcnow())
            .execution_options(synchronize_session="fetch")
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount > 0

    async def revoke_all_for_user(self, user_id: UUID) -> List[str]:
        """Revoke all live sessions for a user"""
        return await self._revoke_where(
            Session.user_id == user_id,
        )

    async def revoke_many(self, user_id: UUID, session_ids: List[str]) -> List[str]:
        """Revoke the listed sessions, ignoring ids that belong to someone else"""
        if not session_ids:
            return []
        return await self._revoke_where(
            Session.user_id == user_id,
            Session.session_id.in_(session_ids),
        )

    async def revoke_all_except(self, user_id: UUID, keep_session_id: str) -> List[str]:
        """Revoke all sessions for a user except the specified session"""
        return await self._revoke_where(
            Session.user_id == user_id,
            Session.session_id != keep_session_id,
        )

    async def delete(self, session_id: str) -> None:
        """Hard-delete one session"""
        stmt = (
            delete(Session)
            .where(Session.session_id == session_id)
            .execution_options(synchronize_session="fetch")
        )
        await self.session.execute(stmt)
        await self.session.flush()

    async def delete_expired(self) -> int:
        """Sweep sessions past their expiry"""
        stmt = (
            delete(Session)
            .where(Session.expires_at < utcnow())
            .execution_options(synchronize_session="fetch")
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount

    async def _revoke_where(self, *conditions) -> List[str]:
        stmt = select(Session.session_id).where(Session.is_revoked == False, *conditions)
        result = await self.session.exec(stmt)
        session_ids = list(result.all())
        if not session_ids:
            return []

        stmt = (
            update(Session)
            .where(Session.session_id.in_(session_ids), Session.is_revoked == False)
            .values(is_revoked=True, revoked_at=utcnow())
            .execution_options(synchronize_session="fetch")
        )
        await self.session.execute(stmt)
        await self.session.flush()
        return session_ids
