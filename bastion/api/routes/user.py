from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, EmailStr, Field

from bastion.api.error import ClientError, ServerError
from bastion.app.services.secret_codec import SecretCodec
from bastion.app.services.unit_of_work import UnitOfWork
from bastion.app.use_cases.auth import CreateUserCommand, CreateUserUseCase, UserInfo
from bastion.app.use_cases.rbac import (
    GetUserRolesUseCase,
    PermissionInfo,
    PermissionResolver,
    RoleGrantInfo,
)
from bastion.depends import authorize, get_principal, get_secret_codec, get_unit_of_work
from bastion.domain.principal import HumanPrincipal, Principal, scope_for

router = APIRouter(prefix="/users", tags=["User"])


class CreateUserRequest(BaseModel):
    email: EmailStr = Field(..., description="User email address")
    password: str = Field(..., min_length=8, description="User password (min 8 chars)")
    tenant_id: Optional[UUID] = Field(default=None, description="Home tenant")


@router.post("", status_code=status.HTTP_201_CREATED, response_model=UserInfo)
async def create_user(
    request: CreateUserRequest,
    uow: UnitOfWork = Depends(get_unit_of_work),
    codec: SecretCodec = Depends(get_secret_codec),
):
    """
    Create User

    Raises:
        - 409 Conflict: Email already exists
        - 422 Unprocessable Entity: Invalid input (handled by FastAPI)
    """
    command = CreateUserCommand(
        email=request.email, password=request.password, tenant_id=request.tenant_id
    )
    result = await CreateUserUseCase(uow, codec).execute(command)

    if result.is_err():
        error = result.error
        if error.code == "EMAIL_ALREADY_EXISTS":
            raise ClientError(error, status_code=status.HTTP_409_CONFLICT)
        raise ServerError(error)

    return result.value


class PrincipalResponse(BaseModel):
    kind: str
    principal_id: str
    scope: str


@router.get("/me", response_model=PrincipalResponse)
async def get_me(principal: Principal = Depends(get_principal)):
    """The authenticated principal, whichever path it came through"""
    return PrincipalResponse(
        kind=principal.kind,
        principal_id=str(principal.principal_id),
        scope=principal.scope.key,
    )


def _is_self(principal: Principal, user_id: UUID) -> bool:
    return isinstance(principal, HumanPrincipal) and principal.principal_id == user_id


@router.get("/{user_id}/roles", response_model=List[RoleGrantInfo])
async def get_user_roles(
    user_id: UUID,
    tenant_id: Optional[UUID] = None,
    principal: Principal = Depends(get_principal),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Role grants of a user visible under the tenant (global grants included)

    Users may read their own grants; reading others needs bastion:role read.
    """
    scope = scope_for(tenant_id)
    if not _is_self(principal, user_id):
        await authorize(principal, uow, "bastion:role", "read", scope)

    result = await GetUserRolesUseCase(uow).execute(user_id, scope)
    if result.is_err():
        raise ServerError(result.error)

    return result.value


@router.get("/{user_id}/permissions", response_model=List[PermissionInfo])
async def get_user_permissions(
    user_id: UUID,
    tenant_id: Optional[UUID] = None,
    principal: Principal = Depends(get_principal),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Effective permissions of a user under the tenant

    Users may read their own permissions; reading others needs bastion:user read.
    """
    scope = scope_for(tenant_id)
    if not _is_self(principal, user_id):
        await authorize(principal, uow, "bastion:user", "read", scope)

    return await PermissionResolver(uow).effective_permissions(
        HumanPrincipal(principal_id=user_id, scope=scope), scope
    )
