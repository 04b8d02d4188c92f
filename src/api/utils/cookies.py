"""
Token delivery per client type.

Web clients get tokens as HttpOnly cookies and never see them in JSON;
mobile and other clients get them in the response body and send the
access token as a bearer header.
"""

from datetime import timedelta
from typing import Optional, Tuple

from fastapi import Request, Response

ACCESS_TOKEN_COOKIE = "access_token"
REFRESH_TOKEN_COOKIE = "refresh_token"
CLIENT_TYPE_HEADER = "x-client-type"
CLIENT_TYPE_QUERY = "client_type"
WEB_CLIENT = "web"


def is_web_client(request: Request) -> bool:
    client_type = request.headers.get(CLIENT_TYPE_HEADER) or request.query_params.get(
        CLIENT_TYPE_QUERY
    )
    return (client_type or "").strip().lower() == WEB_CLIENT


def client_provenance(request: Request) -> Tuple[Optional[str], Optional[str]]:
    """(user agent, ip address) to record on a new session"""
    user_agent = request.headers.get("user-agent")
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        ip_address = forwarded.split(",")[0].strip()
    else:
        ip_address = request.client.host if request.client else None
    return (user_agent[:512] if user_agent else None), ip_address


def _cookie_policy(environment: str) -> dict:
    if environment == "production":
        return {"secure": True, "samesite": "none"}
    return {"secure": False, "samesite": "lax"}


def set_auth_cookies(
    response: Response,
    access_token: str,
    refresh_token: str,
    access_ttl: timedelta,
    refresh_lifetime: timedelta,
    environment: str,
) -> None:
    policy = _cookie_policy(environment)
    response.set_cookie(
        ACCESS_TOKEN_COOKIE,
        access_token,
        max_age=int(access_ttl.total_seconds()),
        httponly=True,
        path="/",
        **policy,
    )
    response.set_cookie(
        REFRESH_TOKEN_COOKIE,
        refresh_token,
        max_age=int(refresh_lifetime.total_seconds()),
        httponly=True,
        path="/",
        **policy,
    )


def clear_auth_cookies(response: Response, environment: str) -> None:
    policy = _cookie_policy(environment)
    for name in (ACCESS_TOKEN_COOKIE, REFRESH_TOKEN_COOKIE):
        response.delete_cookie(name, path="/", httponly=True, **policy)
