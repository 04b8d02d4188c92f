"""
Credential Verifier

Checks an identifier (email or user name) and password against the stored
bcrypt hash. Unknown identifiers, wrong passwords and password-less accounts
all fail the same way and take roughly the same time.
"""

import logging

import bcrypt

from src.libs.result import Error, Result, Return
from src.app.services.errors import DEFAULT_STORE_TIMEOUT, guard_store_call
from src.app.repositories.user_repository import IUserRepository
from src.domain.entities import User

logger = logging.getLogger(__name__)

BCRYPT_ROUNDS = 12

# bcrypt only reads this many bytes of a password
MAX_PASSWORD_BYTES = 72

# Compared against when there is no real hash so the request still pays for one bcrypt check
_DUMMY_HASH = bcrypt.hashpw(b"dummy_password", bcrypt.gensalt(BCRYPT_ROUNDS)).decode("utf-8")


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(BCRYPT_ROUNDS)).decode("utf-8")


def check_password(password: str, password_hash: str) -> bool:
    encoded = password.encode("utf-8")
    if len(encoded) > MAX_PASSWORD_BYTES:
        # No stored hash can match; still pay for one comparison
        bcrypt.checkpw(encoded[:MAX_PASSWORD_BYTES], _DUMMY_HASH.encode("utf-8"))
        return False
    try:
        return bcrypt.checkpw(encoded, password_hash.encode("utf-8"))
    except ValueError:
        logger.warning("Stored password hash is not a valid bcrypt hash")
        return False


def invalid_credentials() -> Error:
    return Error("INVALID_CREDENTIALS", "Invalid email or password")


class CredentialVerifier:
    def __init__(self, users: IUserRepository, store_timeout: float = DEFAULT_STORE_TIMEOUT):
        self.users = users
        self.store_timeout = store_timeout

    async def verify(self, identifier: str, password: str) -> Result[User]:
        """
        Resolve the identifier to a user and check the password.

        An identifier containing "@" is looked up as an email, anything
        else as a user name.
        """
        identifier = (identifier or "").strip()
        if "@" in identifier:
            lookup = self.users.get_by_email(identifier.lower())
        else:
            lookup = self.users.get_by_user_name(identifier)
        user = await guard_store_call("user lookup", lookup, timeout=self.store_timeout)

        if user is None or not user.password_hash:
            check_password(password, _DUMMY_HASH)
            return Return.err(invalid_credentials())

        if not check_password(password, user.password_hash):
            return Return.err(invalid_credentials())

        return Return.ok(user)


def validate_password(password: str) -> Result[None]:
    """Minimum complexity for any new password"""
    if len(password) < 8:
        return Return.err(
            Error("INVALID_PASSWORD", "Password must be at least 8 characters long")
        )
    if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
        return Return.err(
            Error("INVALID_PASSWORD", "Password must be at most 72 bytes long")
        )
    return Return.ok(None)
