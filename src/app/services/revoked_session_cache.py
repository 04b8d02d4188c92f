from abc import ABC, abstractmethod
from typing import Iterable


class RevokedSessionCache(ABC):
    """
    Denylist of revoked session ids.

    Access tokens are stateless and stay valid until they expire; consulting
    this list on each protected request closes that window. Entries only need
    to live as long as the longest access token could.
    """

    @abstractmethod
    async def add(self, session_ids: Iterable[str]) -> None:
        """Record revoked sessions"""
        pass

    @abstractmethod
    async def contains(self, session_id: str) -> bool:
        """True if the session was revoked within the retention window"""
        pass
