"""
Load Context Use Case

Loads the current user from access-token claims.
"""

from uuid import UUID

from src.libs.result import Error, Result, Return
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.auth.dtos import UserInfo
from src.app.use_cases.auth.session_issuer import to_user_info


class LoadContextUseCase:
    """
    Use case for loading the current user.

    Business Rules:
    - Access token provides user_id
    - User must still exist
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(self, user_id: UUID) -> Result[UserInfo]:
        async with self.uow:
            user = await self.uow.users.get_by_id(user_id)
            if user is None:
                return Return.err(Error("USER_NOT_FOUND", "User not found"))

            return Return.ok(to_user_info(user))
