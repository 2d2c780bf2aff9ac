from datetime import timedelta
from uuid import UUID

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

from bastion.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from bastion.app.services.auth_config import AuthConfig
from bastion.app.services.secret_codec import SecretCodec
from bastion.app.services.token_issuer import TokenIssuer
from bastion.app.use_cases.rbac import AssignRoleUseCase, SeedBuiltinRolesUseCase
from bastion.depends import (
    get_auth_config,
    get_secret_codec,
    get_token_issuer,
    get_unit_of_work,
)
from bastion.domain.principal import GlobalScope
from tests.utils.api_client import bearer, create_user, login

ADMIN_EMAIL = "admin@bastion.dev"
ADMIN_PASSWORD = "AdminPass123!"


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine("sqlite+aiosqlite:///./test.db")
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(engine):
    Session = sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with Session() as session:
        yield session


@pytest.fixture
def auth_config():
    return AuthConfig(
        jwt_secret="integration-test-secret",
        access_token_ttl=timedelta(minutes=15),
        refresh_token_ttl=timedelta(days=30),
        service_account_token_ttl=timedelta(minutes=15),
        bcrypt_rounds=4,
        max_sessions_per_user=10,
    )


@pytest.fixture
def token_issuer(auth_config):
    return TokenIssuer(auth_config)


@pytest.fixture
def app(db_session, auth_config, token_issuer):
    from bastion.api.app import create_app
    from config import ApplicationConfig

    app = create_app(ApplicationConfig)
    codec = SecretCodec(rounds=auth_config.bcrypt_rounds)

    async def override_get_unit_of_work():
        yield SqlAlchemyUnitOfWork(db_session)

    app.dependency_overrides[get_unit_of_work] = override_get_unit_of_work
    app.dependency_overrides[get_secret_codec] = lambda: codec
    app.dependency_overrides[get_token_issuer] = lambda: token_issuer
    app.dependency_overrides[get_auth_config] = lambda: auth_config
    return app


@pytest_asyncio.fixture
async def client(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest_asyncio.fixture
async def seeded(db_session):
    """Built-in permission catalogue and roles"""
    result = await SeedBuiltinRolesUseCase(SqlAlchemyUnitOfWork(db_session)).execute()
    assert result.is_ok()
    return result.value


@pytest_asyncio.fixture
async def admin_headers(client, db_session, seeded):
    """Bearer headers of a user holding bastion:admin globally"""
    user_id = await create_user(client, ADMIN_EMAIL, ADMIN_PASSWORD)
    result = await AssignRoleUseCase(SqlAlchemyUnitOfWork(db_session)).execute(
        UUID(user_id), "bastion:admin", GlobalScope()
    )
    assert result.is_ok()

    tokens = await login(client, ADMIN_EMAIL, ADMIN_PASSWORD)
    return bearer(tokens["access_token"])
