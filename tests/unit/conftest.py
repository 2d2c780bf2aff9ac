from datetime import timedelta
from unittest.mock import AsyncMock, MagicMock

import pytest

from bastion.app.services.auth_config import AuthConfig
from bastion.app.services.secret_codec import SecretCodec
from bastion.app.services.token_issuer import TokenIssuer


@pytest.fixture
def mock_uow():
    """Mock UnitOfWork; every repository method is an AsyncMock"""
    uow = MagicMock()
    uow.__aenter__ = AsyncMock(return_value=uow)
    uow.__aexit__ = AsyncMock(return_value=False)  # Must return False to not suppress exceptions
    uow.commit = AsyncMock()
    uow.rollback = AsyncMock()

    uow.users = AsyncMock()
    uow.sessions = AsyncMock()
    uow.api_keys = AsyncMock()
    uow.service_accounts = AsyncMock()
    uow.roles = AsyncMock()
    uow.audit_events = AsyncMock()
    return uow


@pytest.fixture
def auth_config():
    return AuthConfig(
        jwt_secret="unit-test-secret",
        access_token_ttl=timedelta(minutes=15),
        refresh_token_ttl=timedelta(days=30),
        service_account_token_ttl=timedelta(minutes=15),
        bcrypt_rounds=4,
        max_sessions_per_user=3,
    )


@pytest.fixture
def codec(auth_config):
    return SecretCodec(rounds=auth_config.bcrypt_rounds)


@pytest.fixture
def issuer(auth_config):
    return TokenIssuer(auth_config)
