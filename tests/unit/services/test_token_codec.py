import base64
import json
from datetime import timedelta
from uuid import uuid4

import pytest
from jose import jwt

from src.app.services.token_codec import (
    TokenCodec,
    parse_access_ttl,
    parse_duration,
    parse_refresh_lifetime,
)

TEST_SECRET = "unit-test-secret"


def _encode_refresh(body) -> str:
    raw = json.dumps(body).encode()
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode()


@pytest.mark.parametrize(
    "value, expected",
    [
        ("7d", timedelta(days=7)),
        ("24h", timedelta(hours=24)),
        ("1d", timedelta(days=1)),
        (" 12H ", timedelta(hours=12)),
    ],
)
def test_parse_refresh_lifetime_accepts_days_and_hours(value, expected):
    assert parse_refresh_lifetime(value) == expected


@pytest.mark.parametrize("value", ["", "abc", "7 days", "0d", "-1d", "30m", "7", None, 7])
def test_parse_refresh_lifetime_falls_back_to_seven_days(value):
    assert parse_refresh_lifetime(value) == timedelta(days=7)


def test_parse_access_ttl_accepts_minutes():
    assert parse_access_ttl("15m") == timedelta(minutes=15)
    assert parse_access_ttl("bogus") == timedelta(hours=24)


def test_parse_duration_respects_allowed_units():
    fallback = timedelta(seconds=1)
    assert parse_duration("5m", fallback, units="dh") == fallback
    assert parse_duration("5m", fallback, units="m") == timedelta(minutes=5)


def test_access_token_round_trip(codec):
    user_id = uuid4()
    token = codec.mint_access_token(user_id, "alice@example.com", "USER", session_id="sid-1")

    result = codec.validate_access_token(token)

    assert result.is_ok()
    claims = result.value
    assert claims.user_uuid == user_id
    assert claims.email == "alice@example.com"
    assert claims.role == "USER"
    assert claims.session_id == "sid-1"
    assert claims.expires_at > claims.issued_at


def test_access_token_signed_with_other_secret_is_rejected(codec):
    other = TokenCodec("another-secret", timedelta(minutes=15))
    token = other.mint_access_token(uuid4(), "a@example.com", "USER")

    result = codec.validate_access_token(token)

    assert result.is_err()
    assert result.error.code == "INVALID_ACCESS_TOKEN"


def test_expired_access_token_is_rejected():
    codec = TokenCodec(TEST_SECRET, timedelta(seconds=-1))
    token = codec.mint_access_token(uuid4(), "a@example.com", "USER")

    result = codec.validate_access_token(token)

    assert result.is_err()
    assert result.error.code == "INVALID_ACCESS_TOKEN"


def test_access_token_without_access_type_is_rejected(codec):
    token = jwt.encode({"sub": str(uuid4()), "type": "refresh"}, TEST_SECRET, algorithm="HS256")

    result = codec.validate_access_token(token)

    assert result.is_err()
    assert result.error.code == "INVALID_ACCESS_TOKEN"


def test_garbage_access_token_is_rejected(codec):
    assert codec.validate_access_token("not-a-jwt").is_err()


def test_refresh_token_round_trip(codec):
    token = codec.mint_refresh_token("session-abc", version=3)

    result = codec.decode_refresh_token(token)

    assert result.is_ok()
    assert result.value.session_id == "session-abc"
    assert result.value.version == 3
    assert result.value.issued_at is not None


def test_refresh_token_is_url_safe_without_padding(codec):
    token = codec.mint_refresh_token("a" * 43)

    assert "=" not in token
    assert "+" not in token and "/" not in token


def test_refresh_token_without_version_defaults_to_zero(codec):
    result = codec.decode_refresh_token(_encode_refresh({"sid": "s1", "iat": 1}))

    assert result.is_ok()
    assert result.value.version == 0


@pytest.mark.parametrize(
    "token",
    [
        "",
        "%%%not-base64%%%",
        base64.urlsafe_b64encode(b"not json").decode(),
        _encode_refresh([1, 2, 3]),
        _encode_refresh({"iat": 1}),
        _encode_refresh({"sid": ""}),
        _encode_refresh({"sid": 42}),
        _encode_refresh({"sid": "s1", "ver": -1}),
        _encode_refresh({"sid": "s1", "ver": True}),
    ],
)
def test_malformed_refresh_tokens_are_rejected(codec, token):
    result = codec.decode_refresh_token(token)

    assert result.is_err()
    assert result.error.code == "MALFORMED_REFRESH_TOKEN"
