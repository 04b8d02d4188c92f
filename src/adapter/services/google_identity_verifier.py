"""
Google ID token verification via the tokeninfo endpoint.

Google validates the signature and expiry; this adapter checks that the
token was issued to our client id and maps the claims.
"""

import logging
from typing import Optional

import httpx

from src.libs.result import Error, Result, Return
from src.app.services.google_identity import GoogleIdentity, GoogleIdentityVerifier

logger = logging.getLogger(__name__)


def _invalid_google_token() -> Error:
    return Error("INVALID_GOOGLE_TOKEN", "Google sign-in could not be verified")


class HttpxGoogleIdentityVerifier(GoogleIdentityVerifier):
    def __init__(
        self,
        client_id: str,
        tokeninfo_url: str,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = 10.0,
    ):
        self.client_id = client_id
        self.tokeninfo_url = tokeninfo_url
        self.transport = transport
        self.timeout = timeout

    async def verify(self, id_token: str) -> Result[GoogleIdentity]:
        if not self.client_id:
            logger.error("Google sign-in attempted but GOOGLE_CLIENT_ID is not configured")
            return Return.err(_invalid_google_token())

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self.transport
            ) as client:
                response = await client.get(self.tokeninfo_url, params={"id_token": id_token})
                response.raise_for_status()
                claims = response.json()
        except httpx.HTTPStatusError as e:
            logger.warning("Google tokeninfo rejected token: HTTP %s", e.response.status_code)
            return Return.err(_invalid_google_token())
        except httpx.HTTPError as e:
            logger.error("Google tokeninfo request failed: %s", e)
            return Return.err(_invalid_google_token())
        except ValueError:
            logger.error("Google tokeninfo returned a non-JSON body")
            return Return.err(_invalid_google_token())

        if not isinstance(claims, dict):
            return Return.err(_invalid_google_token())

        if claims.get("aud") != self.client_id:
            logger.warning("Google token issued to another client: %s", claims.get("aud"))
            return Return.err(_invalid_google_token())

        google_id = claims.get("sub")
        email = claims.get("email")
        if not google_id or not email:
            return Return.err(_invalid_google_token())

        # tokeninfo returns booleans as strings
        email_verified = str(claims.get("email_verified", "false")).lower() == "true"

        return Return.ok(
            GoogleIdentity(
                google_id=google_id,
                email=email.lower(),
                email_verified=email_verified,
                full_name=claims.get("name") or "",
                picture=claims.get("picture"),
            )
        )
