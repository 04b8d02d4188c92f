"""
Shared tail of every sign-in flow: open a session and mint the token pair.
"""

from typing import Optional

from src.app.services.session_manager import SessionManager
from src.app.services.token_codec import TokenCodec
from src.domain.entities import User
from .dtos import AuthResponse, UserInfo


def to_user_info(user: User) -> UserInfo:
    return UserInfo(
        id=str(user.id),
        email=user.email,
        user_name=user.user_name,
        full_name=user.full_name,
        avatar=user.avatar,
        role=user.role.value,
        email_verified=user.email_verified,
    )


async def issue_session(
    sessions: SessionManager,
    codec: TokenCodec,
    user: User,
    user_agent: Optional[str] = None,
    ip_address: Optional[str] = None,
) -> AuthResponse:
    issued = await sessions.create_session(
        user.id, user_agent=user_agent, ip_address=ip_address
    )
    access_token = codec.mint_access_token(
        user.id, user.email, user.role.value, session_id=issued.session_id
    )
    return AuthResponse(
        user=to_user_info(user),
        access_token=access_token,
        refresh_token=issued.refresh_token,
        session_id=issued.session_id,
        access_token_expires_in=int(codec.access_ttl.total_seconds()),
        refresh_token_expires_at=issued.expires_at,
    )
