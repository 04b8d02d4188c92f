"""
Verify Email Use Case

Handles email verification via secure token.
"""

from src.libs.result import Error, Result, Return
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow
from .dtos import VerifyEmailResponse


class VerifyEmailUseCase:
    """
    Use case for email verification.

    Business Rules:
    - Token must match user's email_verification_token
    - Token must not be expired (24 hours from issue)
    - Sets email_verified = True
    - Clears verification token (single-use)
    - Already verified users return success
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(self, token: str) -> Result[VerifyEmailResponse]:
        """
        Execute email verification use case.

        Args:
            token: Verification token from email link

        Returns:
            Result with verification status, or Error

        Errors:
            - INVALID_TOKEN: Token not found or user not found
            - TOKEN_EXPIRED: Token has expired (>24 hours)
        """
        async with self.uow:
            user = await self.uow.users.get_by_verification_token(token)

            if user is None:
                return Return.err(
                    Error("INVALID_TOKEN", "Invalid or non-existent verification token")
                )

            if user.email_verified:
                return Return.ok(
                    VerifyEmailResponse(status="verified", message="Email is already verified")
                )

            if user.email_verification_expires_at is None:
                return Return.err(
                    Error("INVALID_TOKEN", "Verification token data is invalid")
                )

            now = utcnow()
            if now > user.email_verification_expires_at:
                return Return.err(
                    Error(
                        "TOKEN_EXPIRED",
                        "Verification token has expired. Please request a new verification email.",
                    )
                )

            user.email_verified = True
            user.email_verified_at = now
            user.email_verification_token = None
            user.email_verification_expires_at = None

            await self.uow.users.update(user)
            await self.uow.commit()

            return Return.ok(
                VerifyEmailResponse(status="verified", message="Email successfully verified")
            )
