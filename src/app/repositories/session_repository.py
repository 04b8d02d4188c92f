from abc import ABC, abstractmethod
from datetime import timedelta
from typing import List, Optional
from uuid import UUID

from src.domain.entities import Session


class ISessionRepository(ABC):
    """Session store contract consumed by the session manager"""

    @abstractmethod
    async def create(
        self,
        user_id: UUID,
        lifetime: timedelta,
        user_agent: Optional[str] = None,
        ip_address: Optional[str] = None,
    ) -> Session:
        """Persist a new session with a fresh session_id and expires_at = now + lifetime"""
        pass

    @abstractmethod
    async def get_by_session_id(self, session_id: str) -> Optional[Session]:
        """Get session by its public session_id"""
        pass

    @abstractmethod
    async def get_active_by_user_id(self, user_id: UUID) -> List[Session]:
        """Non-revoked, non-expired sessions for a user, newest first"""
        pass

    @abstractmethod
    async def touch(self, session_id: str) -> None:
        """Set last_used_at to now"""
        pass

    @abstractmethod
    async def touch_and_extend(
        self, session_id: str, expected_version: int, lifetime: timedelta
    ) -> Optional[int]:
        """
        Atomically bump last_used_at, recompute expires_at and increment version.

        Applies only while the row still has expected_version and is not revoked.
        Returns the new version, or None if the row changed concurrently.
        """
        pass

    @abstractmethod
    async def revoke(self, session_id: str) -> bool:
        """Soft-revoke one session. Returns True if a live row was revoked."""
        pass

    @abstractmethod
    async def revoke_all_for_user(self, user_id: UUID) -> List[str]:
        """Soft-revoke every live session of a user. Returns the revoked session_ids."""
        pass

    @abstractmethod
    async def revoke_many(self, user_id: UUID, session_ids: List[str]) -> List[str]:
        """Soft-revoke the given sessions owned by user_id. Returns the revoked session_ids."""
        pass

    @abstractmethod
    async def revoke_all_except(self, user_id: UUID, keep_session_id: str) -> List[str]:
        """Soft-revoke all live sessions of a user but one. Returns the revoked session_ids."""
        pass

    @abstractmethod
    async def delete(self, session_id: str) -> None:
        """Hard-delete one session"""
        pass

    @abstractmethod
    async def delete_expired(self) -> int:
        """Hard-delete sessions whose expires_at is in the past. Returns count."""
        pass
