from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field

from bastion.api.error import ClientError, ServerError
from bastion.app.services.secret_codec import SecretCodec
from bastion.app.services.unit_of_work import UnitOfWork
from bastion.app.use_cases.service_accounts import (
    AssignServiceAccountRoleUseCase,
    CreateServiceAccountCommand,
    CreateServiceAccountResponse,
    CreateServiceAccountUseCase,
    DeleteServiceAccountUseCase,
    GetServiceAccountUseCase,
    ListServiceAccountsUseCase,
    RegenerateSecretResponse,
    RegenerateSecretUseCase,
    ServiceAccountInfo,
    UpdateServiceAccountCommand,
    UpdateServiceAccountUseCase,
)
from bastion.depends import (
    authorize,
    get_principal,
    get_secret_codec,
    get_unit_of_work,
    require_permission,
)
from bastion.domain.principal import Principal, scope_for

router = APIRouter(prefix="/service-accounts", tags=["Service Accounts"])


def _raise_for(error):
    if error.code in ("SERVICE_ACCOUNT_NOT_FOUND", "ROLE_NOT_FOUND"):
        raise ClientError(error, status_code=status.HTTP_404_NOT_FOUND)
    raise ServerError(error)


class CreateServiceAccountRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: str = Field(default="", max_length=1024)
    tenant_id: Optional[UUID] = None
    roles: List[str] = Field(default_factory=list, description="Role names")


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=CreateServiceAccountResponse,
)
async def create_service_account(
    request: CreateServiceAccountRequest,
    principal: Principal = Depends(get_principal),
    uow: UnitOfWork = Depends(get_unit_of_work),
    codec: SecretCodec = Depends(get_secret_codec),
):
    """
    Create a service account

    The client secret is in this response only; it cannot be read back.
    """
    await authorize(
        principal, uow, "bastion:service-account", "create", scope_for(request.tenant_id)
    )

    command = CreateServiceAccountCommand(
        name=request.name,
        description=request.description,
        tenant_id=request.tenant_id,
        role_names=request.roles,
    )
    result = await CreateServiceAccountUseCase(uow, codec).execute(command)
    if result.is_err():
        _raise_for(result.error)
    return result.value


@router.get("", response_model=List[ServiceAccountInfo])
async def list_service_accounts(
    principal: Principal = Depends(require_permission("bastion:service-account", "read")),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    result = await ListServiceAccountsUseCase(uow).execute(principal.scope)
    if result.is_err():
        raise ServerError(result.error)
    return result.value


@router.get("/{account_id}", response_model=ServiceAccountInfo)
async def get_service_account(
    account_id: UUID,
    principal: Principal = Depends(require_permission("bastion:service-account", "read")),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    result = await GetServiceAccountUseCase(uow).execute(account_id, principal.scope)
    if result.is_err():
        _raise_for(result.error)
    return result.value


class UpdateServiceAccountRequest(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = Field(default=None, max_length=1024)
    enabled: Optional[bool] = None


@router.put("/{account_id}", response_model=ServiceAccountInfo)
async def update_service_account(
    account_id: UUID,
    request: UpdateServiceAccountRequest,
    principal: Principal = Depends(require_permission("bastion:service-account", "update")),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    command = UpdateServiceAccountCommand(**request.model_dump())
    result = await UpdateServiceAccountUseCase(uow).execute(
        account_id, command, principal.scope
    )
    if result.is_err():
        _raise_for(result.error)
    return result.value


@router.delete("/{account_id}", status_code=status.HTTP_200_OK)
async def delete_service_account(
    account_id: UUID,
    principal: Principal = Depends(require_permission("bastion:service-account", "delete")),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    result = await DeleteServiceAccountUseCase(uow).execute(
        account_id, principal.scope, deleted_by=principal.principal_id
    )
    if result.is_err():
        _raise_for(result.error)
    return result.value


@router.post("/{account_id}/regenerate-secret", response_model=RegenerateSecretResponse)
async def regenerate_secret(
    account_id: UUID,
    principal: Principal = Depends(require_permission("bastion:service-account", "update")),
    uow: UnitOfWork = Depends(get_unit_of_work),
    codec: SecretCodec = Depends(get_secret_codec),
):
    """
    Issue a new client secret

    The previous secret stops working immediately.
    """
    result = await RegenerateSecretUseCase(uow, codec).execute(
        account_id, principal.scope, requested_by=principal.principal_id
    )
    if result.is_err():
        _raise_for(result.error)
    return result.value


class AssignServiceAccountRoleRequest(BaseModel):
    role_name: str = Field(..., min_length=1)


@router.post("/{account_id}/roles")
async def assign_service_account_role(
    account_id: UUID,
    request: AssignServiceAccountRoleRequest,
    principal: Principal = Depends(require_permission("bastion:service-account", "update")),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    result = await AssignServiceAccountRoleUseCase(uow).execute(
        account_id, request.role_name, principal.scope
    )
    if result.is_err():
        _raise_for(result.error)
    return result.value
