from datetime import datetime
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field

from bastion.api.error import ClientError, ServerError
from bastion.app.services.secret_codec import SecretCodec
from bastion.app.services.unit_of_work import UnitOfWork
from bastion.app.use_cases.api_keys import (
    ApiKeyDetail,
    ApiKeyInfo,
    ApiKeyPermissionChange,
    ChangeApiKeyPermissionUseCase,
    CreateApiKeyCommand,
    CreateApiKeyResponse,
    CreateApiKeyUseCase,
    DeleteApiKeyUseCase,
    GetApiKeyUseCase,
    ListApiKeysUseCase,
)
from bastion.depends import (
    authorize,
    get_principal,
    get_secret_codec,
    get_unit_of_work,
    require_permission,
)
from bastion.domain.principal import Principal, scope_for

router = APIRouter(prefix="/api-keys", tags=["API Keys"])


def _raise_for(error):
    if error.code in ("API_KEY_NOT_FOUND", "PERMISSION_NOT_FOUND"):
        raise ClientError(error, status_code=status.HTTP_404_NOT_FOUND)
    raise ServerError(error)


class CreateApiKeyRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: str = Field(default="", max_length=1024)
    tenant_id: Optional[UUID] = None
    expires_at: Optional[datetime] = None
    permission_ids: List[UUID] = Field(default_factory=list)


@router.post("", status_code=status.HTTP_201_CREATED, response_model=CreateApiKeyResponse)
async def create_api_key(
    request: CreateApiKeyRequest,
    principal: Principal = Depends(get_principal),
    uow: UnitOfWork = Depends(get_unit_of_work),
    codec: SecretCodec = Depends(get_secret_codec),
):
    """
    Create an API key

    The full key ("bst_<prefix>.<secret>") is in this response only.
    """
    await authorize(principal, uow, "bastion:api-key", "create", scope_for(request.tenant_id))

    command = CreateApiKeyCommand(**request.model_dump())
    result = await CreateApiKeyUseCase(uow, codec).execute(command)
    if result.is_err():
        _raise_for(result.error)
    return result.value


@router.get("", response_model=List[ApiKeyInfo])
async def list_api_keys(
    principal: Principal = Depends(require_permission("bastion:api-key", "read")),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    result = await ListApiKeysUseCase(uow).execute(principal.scope)
    if result.is_err():
        raise ServerError(result.error)
    return result.value


@router.get("/{api_key_id}", response_model=ApiKeyDetail)
async def get_api_key(
    api_key_id: UUID,
    principal: Principal = Depends(require_permission("bastion:api-key", "read")),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    result = await GetApiKeyUseCase(uow).execute(api_key_id, principal.scope)
    if result.is_err():
        _raise_for(result.error)
    return result.value


@router.delete("/{api_key_id}", status_code=status.HTTP_200_OK)
async def delete_api_key(
    api_key_id: UUID,
    principal: Principal = Depends(require_permission("bastion:api-key", "delete")),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    result = await DeleteApiKeyUseCase(uow).execute(
        api_key_id, principal.scope, deleted_by=principal.principal_id
    )
    if result.is_err():
        _raise_for(result.error)
    return result.value


class AddPermissionRequest(BaseModel):
    permission_id: UUID


@router.post("/{api_key_id}/permissions", response_model=ApiKeyPermissionChange)
async def add_api_key_permission(
    api_key_id: UUID,
    request: AddPermissionRequest,
    principal: Principal = Depends(require_permission("bastion:api-key", "update")),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    result = await ChangeApiKeyPermissionUseCase(uow).add(
        api_key_id, request.permission_id, principal.scope
    )
    if result.is_err():
        _raise_for(result.error)
    return result.value


@router.delete(
    "/{api_key_id}/permissions/{permission_id}", response_model=ApiKeyPermissionChange
)
async def remove_api_key_permission(
    api_key_id: UUID,
    permission_id: UUID,
    principal: Principal = Depends(require_permission("bastion:api-key", "update")),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    result = await ChangeApiKeyPermissionUseCase(uow).remove(
        api_key_id, permission_id, principal.scope
    )
    if result.is_err():
        _raise_for(result.error)
    return result.value
