"""
Session Entity

Anchors a refresh-token lineage to a user.
"""

import secrets
from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, Index, SQLModel

from src.domain.base import utcnow
from .enums import SessionState


def generate_session_id() -> str:
    """256 bits of randomness, url-safe"""
    return secrets.token_urlsafe(32)


class Session(SQLModel, table=True):
    """
    Session entity - one row per refresh-token lineage.

    Business Rules:
    - session_id is random and unrelated to id
    - Revocation is soft and terminal (is_revoked never flips back)
    - Rotation updates this row in place and increments version
    - Only a refresh token carrying the current version is accepted
    """

    __tablename__ = "sessions"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    session_id: str = Field(
        default_factory=generate_session_id, unique=True, index=True, max_length=64
    )

    user_id: UUID = Field(
        foreign_key="users.id", nullable=False, index=True, ondelete="CASCADE"
    )

    user_agent: Optional[str] = Field(default=None, max_length=512)
    ip_address: Optional[str] = Field(default=None, max_length=64)

    is_revoked: bool = Field(default=False)
    revoked_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))
    version: int = Field(default=0)

    # Timestamps
    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))
    last_used_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))
    expires_at: datetime = Field(sa_column=Column(DateTime, nullable=False))

    __table_args__ = (
        Index("idx_session_expires_at", "expires_at"),
        Index("idx_session_user_revoked", "user_id", "is_revoked"),
    )

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        return self.expires_at < (now or utcnow())

    def state(self, now: Optional[datetime] = None) -> SessionState:
        if self.is_revoked:
            return SessionState.revoked
        if self.is_expired(now):
            return SessionState.expired
        return SessionState.active
