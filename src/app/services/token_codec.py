"""
Token Codec

Pure transformations between token strings and structured claims. No I/O.

- Access tokens: HS256 JWTs, stateless, verified by signature and expiry only.
- Refresh tokens: url-safe base64 of a small JSON object naming a session.
  They are carriers, not credentials; the session store decides validity.
"""

import base64
import json
import re
from datetime import UTC, datetime, timedelta
from typing import Optional
from uuid import UUID

from jose import JWTError, jwt
from pydantic import BaseModel

from src.libs.result import Error, Result, Return

DEFAULT_REFRESH_LIFETIME = timedelta(days=7)
DEFAULT_ACCESS_TTL = timedelta(hours=24)

_UNIT_SECONDS = {"d": 86400, "h": 3600, "m": 60}


def parse_duration(value, fallback: timedelta, units: str = "dh") -> timedelta:
    """
    Parse a lifetime such as "7d" or "24h".

    Only the suffixes listed in ``units`` are recognized. Anything else,
    including zero or negative amounts, yields ``fallback``.
    """
    if not isinstance(value, str):
        return fallback
    match = re.fullmatch(r"\s*(\d+)\s*([a-z])\s*", value.lower())
    if match is None or match.group(2) not in units:
        return fallback
    amount = int(match.group(1))
    if amount <= 0:
        return fallback
    return timedelta(seconds=amount * _UNIT_SECONDS[match.group(2)])


def parse_refresh_lifetime(value) -> timedelta:
    """Refresh-token lifetime: day/hour suffixes, 7-day fallback"""
    return parse_duration(value, DEFAULT_REFRESH_LIFETIME, units="dh")


def parse_access_ttl(value) -> timedelta:
    """Access-token TTL: day/hour/minute suffixes, 24-hour fallback"""
    return parse_duration(value, DEFAULT_ACCESS_TTL, units="dhm")


def _invalid_access_token(reason: str) -> Error:
    return Error("INVALID_ACCESS_TOKEN", "Invalid or expired token", reason=reason)


def _malformed_refresh_token(reason: str) -> Error:
    return Error("MALFORMED_REFRESH_TOKEN", "Malformed refresh token", reason=reason)


class AccessTokenClaims(BaseModel):
    """Verified contents of an access token"""

    user_id: str
    email: str
    role: str
    session_id: Optional[str] = None
    issued_at: datetime
    expires_at: datetime

    @property
    def user_uuid(self) -> UUID:
        return UUID(self.user_id)


class RefreshTokenPayload(BaseModel):
    """Decoded contents of a refresh token"""

    session_id: str
    issued_at: Optional[int] = None
    version: int = 0


class TokenCodec:
    """
    Mints and reads access and refresh tokens.

    The signing secret is read once at construction and never changes.
    """

    ACCESS_TOKEN_TYPE = "access"

    def __init__(self, secret: str, access_ttl: timedelta, algorithm: str = "HS256"):
        self._secret = secret
        self._algorithm = algorithm
        self.access_ttl = access_ttl

    def mint_access_token(
        self,
        user_id: UUID,
        email: str,
        role: str,
        session_id: Optional[str] = None,
    ) -> str:
        now = datetime.now(UTC)
        payload = {
            "sub": str(user_id),
            "email": email,
            "role": role,
            "type": self.ACCESS_TOKEN_TYPE,
            "iat": now,
            "exp": now + self.access_ttl,
        }
        if session_id is not None:
            payload["sid"] = session_id
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    def validate_access_token(self, token: str) -> Result[AccessTokenClaims]:
        try:
            payload = jwt.decode(token, self._secret, algorithms=[self._algorithm])
        except JWTError as exc:
            return Return.err(_invalid_access_token(str(exc)))

        if payload.get("type") != self.ACCESS_TOKEN_TYPE or not payload.get("sub"):
            return Return.err(_invalid_access_token("wrong token type or missing subject"))
        try:
            UUID(str(payload["sub"]))
        except ValueError:
            return Return.err(_invalid_access_token("subject is not a user id"))

        return Return.ok(
            AccessTokenClaims(
                user_id=payload["sub"],
                email=payload.get("email", ""),
                role=payload.get("role", ""),
                session_id=payload.get("sid"),
                issued_at=datetime.fromtimestamp(payload["iat"], UTC),
                expires_at=datetime.fromtimestamp(payload["exp"], UTC),
            )
        )

    def mint_refresh_token(self, session_id: str, version: int = 0) -> str:
        body = {
            "sid": session_id,
            "iat": int(datetime.now(UTC).timestamp()),
            "ver": version,
        }
        raw = json.dumps(body, separators=(",", ":")).encode()
        return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")

    def decode_refresh_token(self, token: str) -> Result[RefreshTokenPayload]:
        if not token or not isinstance(token, str):
            return Return.err(_malformed_refresh_token("empty token"))

        padded = token + "=" * (-len(token) % 4)
        try:
            raw = base64.b64decode(padded, altchars=b"-_", validate=True)
            body = json.loads(raw.decode("utf-8"))
        except ValueError as exc:
            # binascii.Error, UnicodeDecodeError and JSONDecodeError are all ValueErrors
            return Return.err(_malformed_refresh_token(f"undecodable: {exc.__class__.__name__}"))

        if not isinstance(body, dict):
            return Return.err(_malformed_refresh_token("payload is not an object"))

        session_id = body.get("sid")
        version = body.get("ver", 0)
        if not isinstance(session_id, str) or not session_id:
            return Return.err(_malformed_refresh_token("missing session id"))
        if not isinstance(version, int) or isinstance(version, bool) or version < 0:
            return Return.err(_malformed_refresh_token("bad version"))

        issued_at = body.get("iat")
        return Return.ok(
            RefreshTokenPayload(
                session_id=session_id,
                issued_at=issued_at if isinstance(issued_at, int) else None,
                version=version,
            )
        )
