import asyncio
from datetime import timedelta
from unittest.mock import AsyncMock
from uuid import uuid4

import pytest
from sqlalchemy.exc import OperationalError

from src.app.services.errors import StoreUnavailableError
from src.app.services.session_manager import (
    INVALID_REFRESH_TOKEN_MESSAGE,
    RevokeTarget,
    SessionManager,
)
from src.domain.base import utcnow
from src.domain.entities import Session, User, UserRole

LIFETIME = timedelta(days=7)


def _user():
    return User(id=uuid4(), email="alice@example.com", user_name="alice", role=UserRole.user)


def _session(user_id, version=0, revoked=False, expires_in=timedelta(days=1)):
    now = utcnow()
    return Session(
        user_id=user_id,
        version=version,
        is_revoked=revoked,
        created_at=now,
        last_used_at=now,
        expires_at=now + expires_in,
    )


@pytest.fixture
def revoked_cache():
    cache = AsyncMock()
    cache.add = AsyncMock()
    cache.contains = AsyncMock(return_value=False)
    return cache


@pytest.fixture
def manager(mock_uow, codec, revoked_cache):
    return SessionManager(mock_uow, codec, LIFETIME, revoked_cache=revoked_cache, store_timeout=1.0)


@pytest.mark.asyncio
async def test_create_session_mints_refresh_token_for_new_session(manager, mock_uow, codec):
    user = _user()
    stored = _session(user.id)
    mock_uow.sessions.create.return_value = stored

    issued = await manager.create_session(user.id, user_agent="pytest", ip_address="127.0.0.1")

    mock_uow.sessions.create.assert_awaited_once_with(
        user.id, LIFETIME, user_agent="pytest", ip_address="127.0.0.1"
    )
    assert issued.session_id == stored.session_id
    assert codec.decode_refresh_token(issued.refresh_token).value.session_id == stored.session_id
    mock_uow.commit.assert_not_awaited()


@pytest.mark.asyncio
async def test_verify_and_consume_resolves_identity_and_touches(manager, mock_uow, codec):
    user = _user()
    stored = _session(user.id, version=2)
    mock_uow.sessions.get_by_session_id.return_value = stored
    mock_uow.users.get_by_id.return_value = user

    result = await manager.verify_and_consume(codec.mint_refresh_token(stored.session_id, 2))

    assert result.is_ok()
    assert result.value.user_id == user.id
    assert result.value.email == user.email
    assert result.value.role == "USER"
    assert result.value.version == 2
    mock_uow.sessions.touch.assert_awaited_once_with(stored.session_id)


@pytest.mark.asyncio
async def test_verify_and_consume_malformed_token(manager, mock_uow):
    result = await manager.verify_and_consume("@@not-a-token@@")

    assert result.is_err()
    assert result.error.code == "MALFORMED_REFRESH_TOKEN"
    assert result.error.message == INVALID_REFRESH_TOKEN_MESSAGE
    mock_uow.sessions.get_by_session_id.assert_not_awaited()


@pytest.mark.asyncio
async def test_verify_and_consume_unknown_session(manager, codec):
    result = await manager.verify_and_consume(codec.mint_refresh_token("missing"))

    assert result.error.code == "SESSION_NOT_FOUND"
    assert result.error.message == INVALID_REFRESH_TOKEN_MESSAGE


@pytest.mark.asyncio
async def test_verify_and_consume_revoked_session(manager, mock_uow, codec):
    stored = _session(uuid4(), revoked=True)
    mock_uow.sessions.get_by_session_id.return_value = stored

    result = await manager.verify_and_consume(codec.mint_refresh_token(stored.session_id))

    assert result.error.code == "SESSION_REVOKED"
    mock_uow.sessions.touch.assert_not_awaited()


@pytest.mark.asyncio
async def test_verify_and_consume_expired_session_is_deleted(manager, mock_uow, codec):
    stored = _session(uuid4(), expires_in=timedelta(seconds=-1))
    mock_uow.sessions.get_by_session_id.return_value = stored

    result = await manager.verify_and_consume(codec.mint_refresh_token(stored.session_id))

    assert result.error.code == "SESSION_EXPIRED"
    mock_uow.sessions.delete.assert_awaited_once_with(stored.session_id)


@pytest.mark.asyncio
async def test_verify_and_consume_rejects_superseded_token(manager, mock_uow, codec):
    stored = _session(uuid4(), version=3)
    mock_uow.sessions.get_by_session_id.return_value = stored

    result = await manager.verify_and_consume(codec.mint_refresh_token(stored.session_id, 2))

    assert result.error.code == "SESSION_REVOKED"
    assert "stale" in result.error.reason


@pytest.mark.asyncio
async def test_verify_and_consume_owner_deleted(manager, mock_uow, codec):
    stored = _session(uuid4())
    mock_uow.sessions.get_by_session_id.return_value = stored
    mock_uow.users.get_by_id.return_value = None

    result = await manager.verify_and_consume(codec.mint_refresh_token(stored.session_id))

    assert result.error.code == "SESSION_NOT_FOUND"


@pytest.mark.asyncio
async def test_failure_messages_do_not_reveal_the_kind(manager, mock_uow, codec):
    malformed = await manager.verify_and_consume("???")
    unknown = await manager.verify_and_consume(codec.mint_refresh_token("nope"))

    assert malformed.error.message == unknown.error.message


@pytest.mark.asyncio
async def test_rotate_returns_token_with_next_version(manager, mock_uow, codec):
    mock_uow.sessions.touch_and_extend.return_value = 5

    result = await manager.rotate("sid-1", 4)

    assert result.is_ok()
    payload = codec.decode_refresh_token(result.value).value
    assert payload.session_id == "sid-1"
    assert payload.version == 5
    mock_uow.sessions.touch_and_extend.assert_awaited_once_with("sid-1", 4, LIFETIME)


@pytest.mark.asyncio
async def test_rotate_loses_when_version_moved(manager, mock_uow):
    mock_uow.sessions.touch_and_extend.return_value = None

    result = await manager.rotate("sid-1", 4)

    assert result.is_err()
    assert result.error.code == "SESSION_REVOKED"


@pytest.mark.asyncio
async def test_revoke_by_token_denylists_session(manager, mock_uow, codec, revoked_cache):
    mock_uow.sessions.revoke.return_value = True

    revoked = await manager.revoke(RevokeTarget.by_token(codec.mint_refresh_token("sid-9")))

    assert revoked is True
    mock_uow.sessions.revoke.assert_awaited_once_with("sid-9")
    revoked_cache.add.assert_awaited_once_with(["sid-9"])


@pytest.mark.asyncio
async def test_revoke_by_session_id_does_not_decode(manager, mock_uow):
    mock_uow.sessions.revoke.return_value = True

    await manager.revoke(RevokeTarget.by_session_id("plain-session-id"))

    mock_uow.sessions.revoke.assert_awaited_once_with("plain-session-id")


@pytest.mark.asyncio
async def test_revoke_with_malformed_token_is_a_no_op(manager, mock_uow, revoked_cache):
    revoked = await manager.revoke(RevokeTarget.by_token("garbage!!"))

    assert revoked is False
    mock_uow.sessions.revoke.assert_not_awaited()
    revoked_cache.add.assert_not_awaited()


@pytest.mark.asyncio
async def test_revoke_already_revoked_session_skips_denylist(manager, mock_uow, revoked_cache):
    mock_uow.sessions.revoke.return_value = False

    revoked = await manager.revoke(RevokeTarget.by_session_id("sid"))

    assert revoked is False
    revoked_cache.add.assert_not_awaited()


@pytest.mark.asyncio
async def test_revoke_all_for_user_counts_and_denylists(manager, mock_uow, revoked_cache):
    user_id = uuid4()
    mock_uow.sessions.revoke_all_for_user.return_value = ["a", "b"]

    count = await manager.revoke_all_for_user(user_id)

    assert count == 2
    revoked_cache.add.assert_awaited_once_with(["a", "b"])


@pytest.mark.asyncio
async def test_revoke_selected_and_others(manager, mock_uow):
    user_id = uuid4()
    mock_uow.sessions.revoke_many.return_value = ["a"]
    mock_uow.sessions.revoke_all_except.return_value = ["b", "c"]

    assert await manager.revoke_selected(user_id, ["a", "x"]) == 1
    assert await manager.revoke_others(user_id, "keep") == 2
    mock_uow.sessions.revoke_all_except.assert_awaited_once_with(user_id, "keep")


@pytest.mark.asyncio
async def test_cleanup_expired_returns_deleted_count(manager, mock_uow):
    mock_uow.sessions.delete_expired.return_value = 3

    assert await manager.cleanup_expired() == 3


@pytest.mark.asyncio
async def test_store_timeout_raises_store_unavailable(mock_uow, codec):
    async def slow_lookup(session_id):
        await asyncio.sleep(1)

    mock_uow.sessions.get_by_session_id = slow_lookup
    manager = SessionManager(mock_uow, codec, LIFETIME, store_timeout=0.01)

    with pytest.raises(StoreUnavailableError) as exc_info:
        await manager.verify_and_consume(codec.mint_refresh_token("sid"))

    assert exc_info.value.operation == "lookup"


@pytest.mark.asyncio
async def test_store_operational_error_raises_store_unavailable(manager, mock_uow):
    mock_uow.sessions.delete_expired.side_effect = OperationalError(
        "DELETE", {}, Exception("database is locked")
    )

    with pytest.raises(StoreUnavailableError):
        await manager.cleanup_expired()


@pytest.mark.asyncio
async def test_manager_without_cache_still_revokes(mock_uow, codec):
    manager = SessionManager(mock_uow, codec, LIFETIME)
    mock_uow.sessions.revoke_all_for_user.return_value = ["a"]

    assert await manager.revoke_all_for_user(uuid4()) == 1


@pytest.mark.asyncio
async def test_get_owned_session_returns_callers_session(manager, mock_uow):
    user_id = uuid4()
    stored = _session(user_id)
    mock_uow.sessions.get_by_session_id.return_value = stored

    assert await manager.get_owned_session(user_id, stored.session_id) is stored


@pytest.mark.asyncio
async def test_get_owned_session_hides_other_users_session(manager, mock_uow):
    mock_uow.sessions.get_by_session_id.return_value = _session(uuid4())

    assert await manager.get_owned_session(uuid4(), "sid") is None


@pytest.mark.asyncio
async def test_get_owned_session_store_failure(manager, mock_uow):
    mock_uow.sessions.get_by_session_id.side_effect = OperationalError(
        "SELECT", {}, Exception("connection refused")
    )

    with pytest.raises(StoreUnavailableError) as exc_info:
        await manager.get_owned_session(uuid4(), "sid")

    assert exc_info.value.operation == "lookup"
