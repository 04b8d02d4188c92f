"""
Change Password Use Case

Lets a signed-in user replace their password. Every other session is
signed out; the one making the request stays.
"""

from typing import Optional
from uuid import UUID

from src.libs.result import Error, Result, Return
from src.app.services.credential_verifier import (
    check_password,
    hash_password,
    validate_password,
)
from src.app.services.email_sender import EmailSender
from src.app.services.session_manager import SessionManager
from src.app.services.unit_of_work import UnitOfWork
from .dtos import ChangePasswordResponse


class ChangePasswordUseCase:
    def __init__(self, uow: UnitOfWork, sessions: SessionManager, email_sender: EmailSender):
        self.uow = uow
        self.sessions = sessions
        self.email_sender = email_sender

    async def execute(
        self,
        user_id: UUID,
        current_password: str,
        new_password: str,
        current_session_id: Optional[str] = None,
    ) -> Result[ChangePasswordResponse]:
        password_validation = validate_password(new_password)
        if password_validation.is_err():
            return Return.err(password_validation.error)

        async with self.uow:
            user = await self.uow.users.get_by_id(user_id)
            if user is None:
                return Return.err(Error("USER_NOT_FOUND", "User not found"))

            # Google-only accounts have no current password to confirm
            if not user.password_hash or not check_password(current_password, user.password_hash):
                return Return.err(
                    Error("INVALID_CREDENTIALS", "Current password is incorrect")
                )

            await self.uow.users.update_password(user.id, hash_password(new_password))

            if current_session_id:
                revoked_count = await self.sessions.revoke_others(user.id, current_session_id)
            else:
                revoked_count = await self.sessions.revoke_all_for_user(user.id)

            await self.uow.commit()

        await self.email_sender.send_password_changed_email(user.email, user.user_name)

        return Return.ok(
            ChangePasswordResponse(
                status="success",
                message="Password changed successfully",
                revoked_count=revoked_count,
            )
        )
