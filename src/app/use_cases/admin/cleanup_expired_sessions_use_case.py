"""
Use Case: Cleanup Expired Sessions

Maintenance endpoint, typically hit by a scheduler. Hard-deletes sessions
whose expiry has passed; revoked-but-unexpired rows are kept.
"""

from pydantic import BaseModel

from src.libs.result import Result, Return
from src.app.services.session_manager import SessionManager
from src.app.services.unit_of_work import UnitOfWork


class CleanupExpiredSessionsResponse(BaseModel):
    """Response DTO for CleanupExpiredSessionsUseCase"""

    status: str
    sessions_deleted: int


class CleanupExpiredSessionsUseCase:
    def __init__(self, uow: UnitOfWork, sessions: SessionManager):
        self.uow = uow
        self.sessions = sessions

    async def execute(self) -> Result[CleanupExpiredSessionsResponse]:
        async with self.uow:
            deleted = await self.sessions.cleanup_expired()
            await self.uow.commit()

        return Return.ok(
            CleanupExpiredSessionsResponse(status="completed", sessions_deleted=deleted)
        )
