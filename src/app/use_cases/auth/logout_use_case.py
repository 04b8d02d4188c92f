"""
Logout Use Cases

Logout revokes the session behind a refresh token. It never fails: the
client is signed out locally whatever happens on the server.
"""

import logging
from typing import Optional
from uuid import UUID

from src.libs.result import Result, Return
from src.app.services.errors import StoreUnavailableError
from src.app.services.session_manager import RevokeTarget, SessionManager
from src.app.services.unit_of_work import UnitOfWork
from .dtos import LogoutResponse

logger = logging.getLogger(__name__)


class LogoutUseCase:
    def __init__(self, uow: UnitOfWork, sessions: SessionManager):
        self.uow = uow
        self.sessions = sessions

    async def execute(self, refresh_token: Optional[str]) -> Result[LogoutResponse]:
        revoked = False
        if refresh_token:
            try:
                async with self.uow:
                    revoked = await self.sessions.revoke(RevokeTarget.by_token(refresh_token))
                    await self.uow.commit()
            except StoreUnavailableError as e:
                logger.warning("Logout could not reach the session store: %s", e)

        return Return.ok(
            LogoutResponse(
                status="logged_out",
                message="Logged out successfully",
                revoked_count=1 if revoked else 0,
            )
        )


class LogoutAllUseCase:
    """Revoke every session of the authenticated user, this one included"""

    def __init__(self, uow: UnitOfWork, sessions: SessionManager):
        self.uow = uow
        self.sessions = sessions

    async def execute(self, user_id: UUID) -> Result[LogoutResponse]:
        async with self.uow:
            count = await self.sessions.revoke_all_for_user(user_id)
            await self.uow.commit()

        return Return.ok(
            LogoutResponse(
                status="logged_out",
                message="Logged out from all devices",
                revoked_count=count,
            )
        )
