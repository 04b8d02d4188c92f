"""
Request Password Reset Use Case

Handles generating and sending password reset tokens.
"""

import hashlib
import secrets
from datetime import timedelta

from src.libs.result import Result, Return
from src.app.services.email_sender import EmailSender
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow
from src.domain.entities import PasswordResetToken
from .dtos import RequestPasswordResetResponse

PASSWORD_RESET_TTL = timedelta(hours=1)
SENT_MESSAGE = "If the email exists, a password reset link has been sent"


class RequestPasswordResetUseCase:
    """
    Use case for requesting password reset.

    Business Rules:
    - Generate cryptographically secure 32-byte token
    - Hash token with SHA-256 before storing
    - Token expires in 1 hour
    - Earlier unused tokens of the user are invalidated
    - No email enumeration (same response for valid/invalid emails)
    """

    def __init__(self, uow: UnitOfWork, email_sender: EmailSender):
        self.uow = uow
        self.email_sender = email_sender

    async def execute(self, email: str) -> Result[RequestPasswordResetResponse]:
        async with self.uow:
            user = await self.uow.users.get_by_email(email.strip().lower())

            if user is None:
                return Return.ok(
                    RequestPasswordResetResponse(status="sent", message=SENT_MESSAGE)
                )

            reset_token = secrets.token_urlsafe(32)
            token_hash = hashlib.sha256(reset_token.encode()).hexdigest()

            await self.uow.password_reset_tokens.invalidate_for_user(user.id)
            await self.uow.password_reset_tokens.create(
                PasswordResetToken(
                    user_id=user.id,
                    token_hash=token_hash,
                    used=False,
                    expires_at=utcnow() + PASSWORD_RESET_TTL,
                )
            )

            await self.uow.commit()

        # The plain token goes out by email; only its hash is stored
        await self.email_sender.send_password_reset_email(user.email, user.user_name, reset_token)

        return Return.ok(RequestPasswordResetResponse(status="sent", message=SENT_MESSAGE))
