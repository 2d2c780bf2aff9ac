import statistics
import time
from datetime import timedelta
from unittest.mock import MagicMock
from uuid import uuid4

import pytest

from bastion.app.services.secret_codec import SecretCodec
from bastion.app.use_cases.auth.login_use_case import LoginUseCase
from bastion.domain.base import utcnow
from bastion.domain.entities import RefreshSession, User, UserStatus


def _user(codec, password="SecurePass123!", **overrides):
    fields = dict(
        id=uuid4(),
        email="user@acme.com",
        password_hash=codec.hash(password),
        status=UserStatus.active,
    )
    fields.update(overrides)
    return User(**fields)


@pytest.fixture
def login(mock_uow, codec, issuer, auth_config):
    mock_uow.sessions.list_live_by_user_id.return_value = []
    mock_uow.sessions.create.side_effect = lambda session: session
    mock_uow.users.update.side_effect = lambda user: user
    return LoginUseCase(mock_uow, codec, issuer, auth_config)


@pytest.mark.asyncio
async def test_successful_login(login, mock_uow, codec, issuer):
    """
    Given an active user with a known password
    When they log in with the right password
    Then they get an access token for their id and a refresh token
    And only the refresh token's hash is stored
    """
    user = _user(codec)
    mock_uow.users.get_by_email.return_value = user

    result = await login.execute("user@acme.com", "SecurePass123!")

    assert result.is_ok()
    data = result.value
    assert data.token_type == "Bearer"
    assert data.expires_in == 15 * 60
    assert issuer.verify(data.access_token).value.sub == user.id

    stored = mock_uow.sessions.create.call_args.args[0]
    assert isinstance(stored, RefreshSession)
    assert stored.user_id == user.id
    assert stored.refresh_token_hash != data.refresh_token
    assert codec.verify(data.refresh_token, stored.refresh_token_hash)
    assert stored.expires_at - stored.created_at == timedelta(days=30)
    assert str(stored.id) == data.session_id

    assert user.last_login_at is not None
    audit = mock_uow.audit_events.create.call_args.args[0]
    assert audit.action == "login"
    assert data.refresh_token not in str(audit.event_metadata)
    mock_uow.commit.assert_called_once()


@pytest.mark.asyncio
async def test_login_wrong_password(login, mock_uow, codec):
    mock_uow.users.get_by_email.return_value = _user(codec)

    result = await login.execute("user@acme.com", "WrongPassword!")

    assert result.is_err()
    assert result.error.code == "INVALID_CREDENTIALS"
    assert result.error.message == "Invalid email or password"
    mock_uow.sessions.create.assert_not_called()
    mock_uow.commit.assert_not_called()


@pytest.mark.asyncio
async def test_login_nonexistent_user_runs_dummy_verification(mock_uow, issuer, auth_config):
    """Unknown email still costs one bcrypt verification and reports the same error"""
    codec = MagicMock(spec=SecretCodec)
    mock_uow.users.get_by_email.return_value = None

    result = await LoginUseCase(mock_uow, codec, issuer, auth_config).execute(
        "ghost@acme.com", "SomePassword123!"
    )

    assert result.is_err()
    assert result.error.code == "INVALID_CREDENTIALS"
    assert result.error.message == "Invalid email or password"
    codec.verify_dummy.assert_called_once_with("SomePassword123!")
    codec.verify.assert_not_called()


@pytest.mark.asyncio
async def test_login_disabled_user_with_correct_password(login, mock_uow, codec):
    mock_uow.users.get_by_email.return_value = _user(codec, status=UserStatus.disabled)

    result = await login.execute("user@acme.com", "SecurePass123!")

    assert result.is_err()
    assert result.error.code == "PRINCIPAL_DISABLED"
    mock_uow.sessions.create.assert_not_called()


@pytest.mark.asyncio
async def test_login_disabled_user_with_wrong_password(login, mock_uow, codec):
    """Disabled status is not revealed without the right password"""
    mock_uow.users.get_by_email.return_value = _user(codec, status=UserStatus.disabled)

    result = await login.execute("user@acme.com", "WrongPassword!")

    assert result.error.code == "INVALID_CREDENTIALS"


@pytest.mark.asyncio
async def test_login_revokes_oldest_sessions_at_cap(login, mock_uow, codec):
    """
    Given a user already holding max_sessions_per_user (3) live sessions
    When they log in again
    Then the oldest one is revoked so at most 3 remain live
    """
    user = _user(codec)
    mock_uow.users.get_by_email.return_value = user
    now = utcnow()
    live = [
        RefreshSession(
            user_id=user.id,
            refresh_token_hash="x",
            created_at=now - timedelta(hours=3 - i),
            expires_at=now + timedelta(days=1),
        )
        for i in range(3)
    ]
    mock_uow.sessions.list_live_by_user_id.return_value = live

    result = await login.execute("user@acme.com", "SecurePass123!")

    assert result.is_ok()
    revoked_ids = mock_uow.sessions.revoke_by_ids.call_args.args[0]
    assert revoked_ids == [live[0].id]


@pytest.mark.asyncio
async def test_login_below_cap_revokes_nothing(login, mock_uow, codec):
    mock_uow.users.get_by_email.return_value = _user(codec)

    await login.execute("user@acme.com", "SecurePass123!")

    mock_uow.sessions.revoke_by_ids.assert_not_called()


@pytest.mark.asyncio
async def test_login_failure_paths_take_similar_time(mock_uow, issuer, auth_config):
    """
    Unknown email and wrong password must not be distinguishable by timing.
    Compared on medians with a generous bound, not equality.
    """
    codec = SecretCodec(rounds=6)
    user = _user(codec)
    use_case = LoginUseCase(mock_uow, codec, issuer, auth_config)

    async def timed(found):
        mock_uow.users.get_by_email.return_value = user if found else None
        start = time.perf_counter()
        result = await use_case.execute("user@acme.com", "WrongPassword!")
        elapsed = time.perf_counter() - start
        assert result.error.code == "INVALID_CREDENTIALS"
        return elapsed

    unknown, wrong = [], []
    for _ in range(15):
        unknown.append(await timed(found=False))
        wrong.append(await timed(found=True))

    ratio = statistics.median(unknown) / statistics.median(wrong)
    assert 0.5 < ratio < 2.0
