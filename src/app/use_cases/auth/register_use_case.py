import logging
import secrets
from datetime import timedelta

from src.libs.result import Error, Result, Return
from src.app.services.credential_verifier import hash_password, validate_password
from src.app.services.email_sender import EmailSender
from src.app.services.session_manager import SessionManager
from src.app.services.token_codec import TokenCodec
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow
from src.domain.entities import User
from .dtos import AuthResponse, RegisterCommand
from .session_issuer import issue_session

logger = logging.getLogger(__name__)

EMAIL_VERIFICATION_TTL = timedelta(days=1)


class RegisterUseCase:
    """
    Register Use Case

    Command/Response Pattern:
    - Input: RegisterCommand (validated business intent)
    - Output: Result[AuthResponse] (user plus a fresh token pair)

    Business Logic:
    1. Reject a taken email or user name
    2. Hash password with bcrypt cost factor 12
    3. Create User with email_verified=False and a 24h verification token
    4. Open a session and mint the token pair
    5. Commit, then send the verification email
    """

    def __init__(
        self,
        uow: UnitOfWork,
        sessions: SessionManager,
        codec: TokenCodec,
        email_sender: EmailSender,
    ):
        self.uow = uow
        self.sessions = sessions
        self.codec = codec
        self.email_sender = email_sender

    async def execute(self, command: RegisterCommand) -> Result[AuthResponse]:
        password_validation = validate_password(command.password)
        if password_validation.is_err():
            return Return.err(password_validation.error)

        email = command.email.strip().lower()
        user_name = command.user_name.strip()

        async with self.uow:
            if await self.uow.users.get_by_email(email):
                return Return.err(
                    Error("EMAIL_ALREADY_EXISTS", "Email already registered")
                )

            if await self.uow.users.get_by_user_name(user_name):
                return Return.err(
                    Error("USERNAME_ALREADY_TAKEN", "User name is already taken")
                )

            verification_token = secrets.token_urlsafe(32)
            user = User(
                email=email,
                user_name=user_name,
                full_name=command.full_name,
                password_hash=hash_password(command.password),
                email_verified=False,
                email_verification_token=verification_token,
                email_verification_expires_at=utcnow() + EMAIL_VERIFICATION_TTL,
            )
            user = await self.uow.users.create(user)

            response = await issue_session(
                self.sessions,
                self.codec,
                user,
                user_agent=command.user_agent,
                ip_address=command.ip_address,
            )

            await self.uow.commit()

        logger.info("Registered user %s", user.id)
        await self.email_sender.send_verification_email(
            user.email, user.user_name, verification_token
        )

        return Return.ok(response)
