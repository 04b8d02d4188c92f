"""
Refresh Token Use Case

Exchanges a refresh token for a new access token and the next refresh token
of the same session.
"""

from src.libs.result import Error, Result, Return
from src.app.services.session_manager import SESSION_FAILURE_CODES, SessionManager
from src.app.services.token_codec import TokenCodec
from src.app.services.unit_of_work import UnitOfWork
from .dtos import RefreshTokenResponse


def _invalid_refresh_token() -> Error:
    return Error("INVALID_REFRESH_TOKEN", "Invalid refresh token. Please log in again.")


class RefreshTokenUseCase:
    """
    Use case for refreshing JWT access tokens.

    Business Rules:
    - Refresh token rotation: the session keeps its id, its version moves
      forward and the previous refresh token stops working
    - Session must exist, must not be revoked and must not be expired
    - Expired sessions are deleted when detected
    - Every session failure looks the same to the client
    """

    def __init__(self, uow: UnitOfWork, sessions: SessionManager, codec: TokenCodec):
        self.uow = uow
        self.sessions = sessions
        self.codec = codec

    async def execute(self, refresh_token: str) -> Result[RefreshTokenResponse]:
        async with self.uow:
            identity = await self.sessions.verify_and_consume(refresh_token)
            if identity.is_err():
                # Persist the expired-row deletion, if any
                await self.uow.commit()
                return Return.err(self._normalize(identity.error))
            identity = identity.value

            rotated = await self.sessions.rotate(identity.session_id, identity.version)
            if rotated.is_err():
                return Return.err(self._normalize(rotated.error))

            await self.uow.commit()

        access_token = self.codec.mint_access_token(
            identity.user_id,
            identity.email,
            identity.role,
            session_id=identity.session_id,
        )

        return Return.ok(
            RefreshTokenResponse(
                access_token=access_token,
                refresh_token=rotated.value,
                session_id=identity.session_id,
                access_token_expires_in=int(self.codec.access_ttl.total_seconds()),
            )
        )

    @staticmethod
    def _normalize(error: Error) -> Error:
        if error.code in SESSION_FAILURE_CODES:
            return _invalid_refresh_token()
        return error
