"""
Google Auth Use Case

Signs a user in with a Google ID token, creating the account on first use.
"""

import logging
import secrets
from typing import Optional

from src.libs.result import Error, Result, Return
from src.app.services.google_identity import GoogleIdentity, GoogleIdentityVerifier
from src.app.services.session_manager import SessionManager
from src.app.services.token_codec import TokenCodec
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow
from src.domain.entities import User
from .dtos import AuthResponse, GoogleLoginCommand
from .session_issuer import issue_session

logger = logging.getLogger(__name__)

MAX_USER_NAME_ATTEMPTS = 5


class GoogleAuthUseCase:
    """
    Business Rules:
    - The ID token must be valid, issued to this app, with a verified email
    - Lookup order: linked google_id, then email (links the account)
    - New accounts are created verified and without a password
    - User names derive from the email local part, suffixed on collision
    """

    def __init__(
        self,
        uow: UnitOfWork,
        sessions: SessionManager,
        codec: TokenCodec,
        google: GoogleIdentityVerifier,
    ):
        self.uow = uow
        self.sessions = sessions
        self.codec = codec
        self.google = google

    async def execute(self, command: GoogleLoginCommand) -> Result[AuthResponse]:
        verified = await self.google.verify(command.id_token)
        if verified.is_err():
            return Return.err(verified.error)
        identity = verified.value

        if not identity.email_verified:
            return Return.err(
                Error("GOOGLE_EMAIL_NOT_VERIFIED", "Google account email is not verified")
            )

        async with self.uow:
            user = await self.uow.users.get_by_google_id(identity.google_id)

            if user is None:
                user = await self.uow.users.get_by_email(identity.email)
                if user is not None:
                    logger.info("Linking Google account to user %s", user.id)
                    user.google_id = identity.google_id
                    if not user.email_verified:
                        user.email_verified = True
                        user.email_verified_at = utcnow()
                        user.email_verification_token = None
                        user.email_verification_expires_at = None
                    if not user.avatar:
                        user.avatar = identity.picture

            if user is None:
                user_name = await self._available_user_name(identity.email)
                if user_name is None:
                    return Return.err(
                        Error("USERNAME_ALREADY_TAKEN", "Could not allocate a user name")
                    )
                user = await self.uow.users.create(self._new_user(identity, user_name))
                logger.info("Created user %s from Google sign-in", user.id)

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

        return Return.ok(response)

    @staticmethod
    def _new_user(identity: GoogleIdentity, user_name: str) -> User:
        now = utcnow()
        return User(
            email=identity.email,
            user_name=user_name,
            full_name=identity.full_name,
            google_id=identity.google_id,
            avatar=identity.picture,
            email_verified=True,
            email_verified_at=now,
        )

    async def _available_user_name(self, email: str) -> Optional[str]:
        base = email.split("@")[0][:40] or "user"
        candidate = base
        for _ in range(MAX_USER_NAME_ATTEMPTS):
            if await self.uow.users.get_by_user_name(candidate) is None:
                return candidate
            candidate = f"{base}{secrets.randbelow(10000)}"
        return None
