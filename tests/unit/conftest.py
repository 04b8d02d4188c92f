from datetime import timedelta
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.app.services.token_codec import TokenCodec

TEST_SECRET = "unit-test-secret"


@pytest.fixture
def mock_uow():
    uow = MagicMock()
    uow.__aenter__ = AsyncMock(return_value=uow)
    uow.__aexit__ = AsyncMock(return_value=False)  # Must return False to not suppress exceptions
    uow.commit = AsyncMock()
    uow.rollback = AsyncMock()

    uow.users = MagicMock()
    uow.users.get_by_email = AsyncMock(return_value=None)
    uow.users.get_by_user_name = AsyncMock(return_value=None)
    uow.users.get_by_google_id = AsyncMock(return_value=None)
    uow.users.get_by_id = AsyncMock(return_value=None)
    uow.users.get_by_verification_token = AsyncMock(return_value=None)
    uow.users.create = AsyncMock(side_effect=lambda user: user)
    uow.users.update = AsyncMock(side_effect=lambda user: user)
    uow.users.update_password = AsyncMock(return_value=True)

    uow.sessions = MagicMock()
    uow.sessions.create = AsyncMock()
    uow.sessions.get_by_session_id = AsyncMock(return_value=None)
    uow.sessions.get_active_by_user_id = AsyncMock(return_value=[])
    uow.sessions.touch = AsyncMock()
    uow.sessions.touch_and_extend = AsyncMock(return_value=None)
    uow.sessions.revoke = AsyncMock(return_value=False)
    uow.sessions.revoke_all_for_user = AsyncMock(return_value=[])
    uow.sessions.revoke_many = AsyncMock(return_value=[])
    uow.sessions.revoke_all_except = AsyncMock(return_value=[])
    uow.sessions.delete = AsyncMock()
    uow.sessions.delete_expired = AsyncMock(return_value=0)

    uow.password_reset_tokens = MagicMock()
    uow.password_reset_tokens.create = AsyncMock(side_effect=lambda token: token)
    uow.password_reset_tokens.get_by_token_hash = AsyncMock(return_value=None)
    uow.password_reset_tokens.update = AsyncMock(side_effect=lambda token: token)
    uow.password_reset_tokens.invalidate_for_user = AsyncMock(return_value=0)
    return uow


@pytest.fixture
def codec():
    return TokenCodec(TEST_SECRET, timedelta(minutes=15))


@pytest.fixture
def mock_sessions():
    """SessionManager double for use-case tests"""
    sessions = MagicMock()
    sessions.create_session = AsyncMock()
    sessions.verify_and_consume = AsyncMock()
    sessions.rotate = AsyncMock()
    sessions.revoke = AsyncMock(return_value=True)
    sessions.revoke_all_for_user = AsyncMock(return_value=0)
    sessions.revoke_selected = AsyncMock(return_value=0)
    sessions.revoke_others = AsyncMock(return_value=0)
    sessions.list_active = AsyncMock(return_value=[])
    sessions.get_owned_session = AsyncMock(return_value=None)
    sessions.cleanup_expired = AsyncMock(return_value=0)
    return sessions


@pytest.fixture
def mock_email_sender():
    sender = MagicMock()
    sender.send_verification_email = AsyncMock()
    sender.send_password_reset_email = AsyncMock()
    sender.send_password_changed_email = AsyncMock()
    return sender
