"""
Confirm Password Reset Use Case

Handles password reset confirmation with secure token validation.
"""

import hashlib
import logging

from src.libs.result import Error, Result, Return
from src.app.services.credential_verifier import hash_password, validate_password
from src.app.services.session_manager import SessionManager
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow
from .dtos import ConfirmPasswordResetResponse

logger = logging.getLogger(__name__)


class ConfirmPasswordResetUseCase:
    """
    Use case for confirming password reset.

    Business Rules:
    - Token is validated by hashing and comparing with stored hash
    - Token must not be expired (1 hour window)
    - Token must not already be used
    - New password must meet complexity requirements (min 8 chars)
    - Password is hashed with bcrypt (cost factor 12)
    - All user sessions are revoked
    - Token is marked as used after successful reset
    """

    def __init__(self, uow: UnitOfWork, sessions: SessionManager):
        self.uow = uow
        self.sessions = sessions

    async def execute(self, token: str, new_password: str) -> Result[ConfirmPasswordResetResponse]:
        """
        Errors:
            - INVALID_PASSWORD: Password does not meet complexity requirements
            - INVALID_TOKEN: Token not found or invalid
            - TOKEN_EXPIRED: Token has expired
            - TOKEN_ALREADY_USED: Token has already been used
        """
        password_validation = validate_password(new_password)
        if password_validation.is_err():
            return Return.err(password_validation.error)

        token_hash = hashlib.sha256(token.encode()).hexdigest()

        async with self.uow:
            reset_token = await self.uow.password_reset_tokens.get_by_token_hash(token_hash)

            if reset_token is None:
                return Return.err(
                    Error("INVALID_TOKEN", "Invalid or expired password reset token")
                )

            if reset_token.expires_at < utcnow():
                return Return.err(Error("TOKEN_EXPIRED", "Password reset token has expired"))

            if reset_token.used:
                return Return.err(
                    Error("TOKEN_ALREADY_USED", "Password reset token has already been used")
                )

            user = await self.uow.users.get_by_id(reset_token.user_id)
            if user is None:
                return Return.err(Error("USER_NOT_FOUND", "User not found"))

            await self.uow.users.update_password(user.id, hash_password(new_password))

            reset_token.used = True
            await self.uow.password_reset_tokens.update(reset_token)

            revoked_count = await self.sessions.revoke_all_for_user(user.id)

            await self.uow.commit()

        logger.info("Password reset for user %s, %d session(s) revoked", user.id, revoked_count)
        return Return.ok(
            ConfirmPasswordResetResponse(
                status="success", message="Password has been reset successfully"
            )
        )
