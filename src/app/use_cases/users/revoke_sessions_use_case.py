"""
Session Management Use Cases

Lets a user see where they are signed in and sign devices out.
"""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel

from src.libs.result import Error, Result, Return
from src.app.services.session_manager import RevokeTarget, SessionManager
from src.app.services.unit_of_work import UnitOfWork


class SessionInfo(BaseModel):
    session_id: str
    user_agent: Optional[str] = None
    ip_address: Optional[str] = None
    created_at: datetime
    last_used_at: datetime
    expires_at: datetime
    current: bool = False


class RevokeSessionsResponse(BaseModel):
    revoked_count: int


class ListSessionsUseCase:
    def __init__(self, uow: UnitOfWork, sessions: SessionManager):
        self.uow = uow
        self.sessions = sessions

    async def execute(
        self, user_id: UUID, current_session_id: Optional[str] = None
    ) -> Result[List[SessionInfo]]:
        async with self.uow:
            active = await self.sessions.list_active(user_id)

            return Return.ok(
                [
                    SessionInfo(
                        session_id=s.session_id,
                        user_agent=s.user_agent,
                        ip_address=s.ip_address,
                        created_at=s.created_at,
                        last_used_at=s.last_used_at,
                        expires_at=s.expires_at,
                        current=s.session_id == current_session_id,
                    )
                    for s in active
                ]
            )


class RevokeSessionsUseCase:
    """
    Use case for revoking the caller's own sessions.

    Business Rules:
    - Users can only revoke their own sessions
    - Three revocation modes: specific, selected set, all-except-current
    - Revocation is soft; rows stay until they expire
    """

    def __init__(self, uow: UnitOfWork, sessions: SessionManager):
        self.uow = uow
        self.sessions = sessions

    async def revoke_specific_session(
        self, session_id: str, requesting_user_id: UUID
    ) -> Result[RevokeSessionsResponse]:
        async with self.uow:
            # Someone else's session looks the same as a missing one
            session = await self.sessions.get_owned_session(requesting_user_id, session_id)
            if session is None:
                return Return.err(Error("SESSION_NOT_FOUND", "Session not found"))

            if session.is_revoked:
                return Return.err(Error("SESSION_ALREADY_REVOKED", "Session already revoked"))

            revoked = await self.sessions.revoke(RevokeTarget.by_session_id(session_id))
            await self.uow.commit()

        return Return.ok(RevokeSessionsResponse(revoked_count=1 if revoked else 0))

    async def revoke_selected_sessions(
        self, session_ids: List[str], requesting_user_id: UUID
    ) -> Result[RevokeSessionsResponse]:
        if not session_ids:
            return Return.err(Error("VALIDATION_ERROR", "No sessions selected"))

        async with self.uow:
            count = await self.sessions.revoke_selected(requesting_user_id, session_ids)
            await self.uow.commit()

        return Return.ok(RevokeSessionsResponse(revoked_count=count))

    async def revoke_all_except_current(
        self, current_session_id: Optional[str], requesting_user_id: UUID
    ) -> Result[RevokeSessionsResponse]:
        """Sign out every other device. Needs a token that names its session."""
        if not current_session_id:
            return Return.err(
                Error("SESSION_NOT_FOUND", "Current session could not be determined")
            )

        async with self.uow:
            current_session = await self.sessions.get_owned_session(
                requesting_user_id, current_session_id
            )
            if current_session is None:
                return Return.err(Error("SESSION_NOT_FOUND", "Current session not found"))

            count = await self.sessions.revoke_others(requesting_user_id, current_session_id)
            await self.uow.commit()

        return Return.ok(RevokeSessionsResponse(revoked_count=count))
