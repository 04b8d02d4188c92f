"""
Login Use Case

Authenticates an email or user name plus password and opens a session.
"""

import logging

from src.libs.result import Error, Result, Return
from src.app.services.credential_verifier import CredentialVerifier
from src.app.services.errors import DEFAULT_STORE_TIMEOUT
from src.app.services.session_manager import SessionManager
from src.app.services.token_codec import TokenCodec
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow
from .dtos import AuthResponse, LoginCommand
from .session_issuer import issue_session

logger = logging.getLogger(__name__)


class LoginUseCase:
    """
    Use case for user login and token issuance.

    Business Rules:
    - Unknown identifier, wrong password and password-less (Google-only)
      accounts fail identically with INVALID_CREDENTIALS
    - Unverified email is rejected only when verification is required
    - Creates a new session; existing sessions are left alone
    - Updates user.last_login_at
    """

    def __init__(
        self,
        uow: UnitOfWork,
        sessions: SessionManager,
        codec: TokenCodec,
        require_email_verification: bool = False,
        store_timeout: float = DEFAULT_STORE_TIMEOUT,
    ):
        self.uow = uow
        self.sessions = sessions
        self.codec = codec
        self.require_email_verification = require_email_verification
        self.store_timeout = store_timeout

    async def execute(self, command: LoginCommand) -> Result[AuthResponse]:
        """
        Execute login use case.

        Args:
            command: LoginCommand with identifier, password and client provenance

        Returns:
            Result with AuthResponse containing tokens and user info, or Error
        """
        async with self.uow:
            verified = await CredentialVerifier(
                self.uow.users, store_timeout=self.store_timeout
            ).verify(command.identifier, command.password)
            if verified.is_err():
                logger.info("Failed login attempt")
                return Return.err(verified.error)
            user = verified.value

            if self.require_email_verification and not user.email_verified:
                return Return.err(
                    Error("EMAIL_NOT_VERIFIED", "Please verify your email before logging in")
                )

            response = await issue_session(
                self.sessions,
                self.codec,
                user,
                user_agent=command.user_agent,
                ip_address=command.ip_address,
            )

            user.last_login_at = utcnow()
            await self.uow.users.update(user)

            await self.uow.commit()

        logger.info("User %s logged in, session %s", user.id, response.session_id)
        return Return.ok(response)
