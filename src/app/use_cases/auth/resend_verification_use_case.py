"""
Resend Verification Email Use Case

Handles resending email verification tokens to users.
"""

import secrets

from src.libs.result import Result, Return
from src.app.services.email_sender import EmailSender
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow
from .dtos import ResendVerificationResponse
from .register_use_case import EMAIL_VERIFICATION_TTL

SENT_MESSAGE = "If the email exists, a verification link has been sent"


class ResendVerificationUseCase:
    """
    Use case for resending email verification.

    Business Rules:
    - If email is not verified, generate new token and extend expiry
    - If email is already verified, return success (no email sent)
    - New token replaces old token (invalidates previous)
    - Token expiry reset to 24 hours from now
    - Returns same response for valid/invalid emails (no enumeration)
    """

    def __init__(self, uow: UnitOfWork, email_sender: EmailSender):
        self.uow = uow
        self.email_sender = email_sender

    async def execute(self, email: str) -> Result[ResendVerificationResponse]:
        async with self.uow:
            user = await self.uow.users.get_by_email(email.strip().lower())

            if user is None:
                return Return.ok(ResendVerificationResponse(status="sent", message=SENT_MESSAGE))

            if user.email_verified:
                return Return.ok(
                    ResendVerificationResponse(
                        status="already_verified", message="Email is already verified"
                    )
                )

            new_verification_token = secrets.token_urlsafe(32)
            user.email_verification_token = new_verification_token
            user.email_verification_expires_at = utcnow() + EMAIL_VERIFICATION_TTL

            await self.uow.users.update(user)
            await self.uow.commit()

        await self.email_sender.send_verification_email(
            user.email, user.user_name, new_verification_token
        )

        return Return.ok(ResendVerificationResponse(status="sent", message=SENT_MESSAGE))
