from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from src.domain.entities import User


class IUserRepository(ABC):
    """User repository interface - application layer"""

    @abstractmethod
    async def get_by_email(self, email: str) -> Optional[User]:
        """Get user by email address"""
        pass

    @abstractmethod
    async def get_by_user_name(self, user_name: str) -> Optional[User]:
        """Get user by user name"""
        pass

    @abstractmethod
    async def get_by_google_id(self, google_id: str) -> Optional[User]:
        """Get user by linked Google account id"""
        pass

    @abstractmethod
    async def get_by_id(self, user_id: UUID) -> Optional[User]:
        """Get user by ID"""
        pass

    @abstractmethod
    async def create(self, user: User) -> User:
        """Create a new user"""
        pass

    @abstractmethod
    async def update(self, user: User) -> User:
        """Update existing user"""
        pass

    @abstractmethod
    async def update_password(self, user_id: UUID, password_hash: str) -> bool:
        """Replace the stored password hash. Returns False if the user is gone."""
        pass

    @abstractmethod
    async def get_by_verification_token(self, token: str) -> Optional[User]:
        """Get user by email verification token"""
        pass
