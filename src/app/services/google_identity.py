from abc import ABC, abstractmethod
from typing import Optional

from pydantic import BaseModel

from src.libs.result import Result


class GoogleIdentity(BaseModel):
    """Verified claims of a Google ID token"""

    google_id: str
    email: str
    email_verified: bool
    full_name: str = ""
    picture: Optional[str] = None


class GoogleIdentityVerifier(ABC):
    @abstractmethod
    async def verify(self, id_token: str) -> Result[GoogleIdentity]:
        """Check an ID token issued to this application. Fails with INVALID_GOOGLE_TOKEN."""
        pass
