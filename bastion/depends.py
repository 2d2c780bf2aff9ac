import logging
from typing import Optional

from fastapi import Depends, Security, status
from fastapi.security import APIKeyHeader, HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession

from config import ApplicationConfig
from bastion.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from bastion.api.error import ClientError, ServerError, unauthorized
from bastion.app.services.auth_config import AuthConfig
from bastion.app.services.secret_codec import SecretCodec
from bastion.app.services.token_issuer import TokenIssuer
from bastion.app.services.unit_of_work import UnitOfWork
from bastion.app.use_cases.api_keys import AuthenticateApiKeyUseCase
from bastion.app.use_cases.rbac import PermissionResolver
from bastion.domain.principal import (
    GlobalScope,
    HumanPrincipal,
    Principal,
    TenantScope,
)
from bastion.libs.result import Error

logger = logging.getLogger(__name__)

engine = create_async_engine(ApplicationConfig.DB_URI, echo=False, future=True)

AsyncSessionLocal = sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
)

auth_config = AuthConfig.from_application_config(ApplicationConfig)
secret_codec = SecretCodec(rounds=auth_config.bcrypt_rounds)
token_issuer = TokenIssuer(auth_config)

api_key_header = APIKeyHeader(name=ApplicationConfig.API_KEY_HEADER, auto_error=False)
security = HTTPBearer(auto_error=False)


def get_auth_config() -> AuthConfig:
    return auth_config


def get_secret_codec() -> SecretCodec:
    return secret_codec


def get_token_issuer() -> TokenIssuer:
    return token_issuer


async def get_unit_of_work():
    async with AsyncSessionLocal() as session:
        yield SqlAlchemyUnitOfWork(session)


async def get_principal(
    api_key: Optional[str] = Security(api_key_header),
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    uow: UnitOfWork = Depends(get_unit_of_work),
    codec: SecretCodec = Depends(get_secret_codec),
    issuer: TokenIssuer = Depends(get_token_issuer),
) -> Principal:
    """
    Authenticate the request through exactly one path.

    An X-API-Key header wins over a bearer token when both are present.

    Raises:
        ClientError: 401 UNAUTHORIZED for any credential or token failure
        ServerError: 500 if the check itself failed
    """
    if api_key:
        result = await AuthenticateApiKeyUseCase(uow, codec).execute(api_key)
        if result.is_err():
            if result.error.code == "INTERNAL_ERROR":
                raise ServerError(result.error)
            logger.warning(f"API key rejected: {result.error.code}")
            raise unauthorized()

        return result.value.to_principal()

    if credentials is None:
        raise unauthorized()

    result = issuer.verify(credentials.credentials)
    if result.is_err():
        logger.warning(f"Bearer token rejected: {result.error.code}")
        raise unauthorized()

    return result.value.to_principal()


async def get_current_user(
    principal: Principal = Depends(get_principal),
) -> HumanPrincipal:
    """Only human users (bearer token from login/refresh) pass"""
    if not isinstance(principal, HumanPrincipal):
        raise ClientError(
            Error("PERMISSION_DENIED", f"{principal.kind} cannot perform this operation"),
            status_code=status.HTTP_403_FORBIDDEN,
        )
    return principal


async def authorize(
    principal: Principal,
    uow: UnitOfWork,
    resource_type: str,
    action: str,
    scope: Optional[GlobalScope | TenantScope] = None,
) -> None:
    """
    Raises:
        ClientError: 403 PERMISSION_DENIED carrying the resolver's reason
        ServerError: 500 if the check could not be completed
    """
    result = await PermissionResolver(uow).check(principal, resource_type, action, scope)
    if result.is_err():
        raise ServerError(result.error)

    decision = result.value
    if not decision.allowed:
        raise ClientError(
            Error("PERMISSION_DENIED", decision.reason),
            status_code=status.HTTP_403_FORBIDDEN,
        )


def require_permission(resource_type: str, action: str):
    """Route dependency: the principal must hold the permission in its own scope"""

    async def dependency(
        principal: Principal = Depends(get_principal),
        uow: UnitOfWork = Depends(get_unit_of_work),
    ) -> Principal:
        await authorize(principal, uow, resource_type, action)
        return principal

    return dependency
