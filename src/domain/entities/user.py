"""
User Entity

Represents a member of the social network.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, Index, SQLModel

from src.domain.base import utcnow
from .enums import UserRole


class User(SQLModel, table=True):
    """
    User entity - a person who signs in with a password or with Google.

    Business Rules:
    - Email and user_name must be unique across all users
    - Password stored as bcrypt hash (cost factor 12)
    - Google-only accounts have no password_hash
    - Email verification token expires after 24 hours
    """

    __tablename__ = "users"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    email: str = Field(unique=True, index=True, max_length=255)
    user_name: str = Field(unique=True, index=True, max_length=50)
    full_name: str = Field(default="", max_length=255)
    password_hash: Optional[str] = Field(default=None, max_length=60)
    google_id: Optional[str] = Field(default=None, unique=True, max_length=255)
    avatar: Optional[str] = Field(default=None, max_length=1024)

    role: UserRole = Field(default=UserRole.user)

    # Email verification
    email_verified: bool = Field(default=False)
    email_verified_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))
    email_verification_token: Optional[str] = Field(
        default=None, unique=True, index=True, max_length=64
    )
    email_verification_expires_at: Optional[datetime] = Field(
        default=None, sa_column=Column(DateTime)
    )

    # Timestamps
    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))
    updated_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))
    last_login_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))

    __table_args__ = (Index("idx_user_email_verified", "email_verified"),)
