from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field

from bastion.api.error import ClientError, ServerError
from bastion.app.services.unit_of_work import UnitOfWork
from bastion.app.use_cases.rbac import (
    AssignRoleResponse,
    AssignRoleUseCase,
    ListRolesUseCase,
    RevokeRoleResponse,
    RevokeRoleUseCase,
    RoleInfo,
)
from bastion.depends import authorize, get_principal, get_unit_of_work, require_permission
from bastion.domain.principal import HumanPrincipal, Principal, scope_for

router = APIRouter(prefix="/roles", tags=["Roles"])


def _raise_for(error):
    if error.code in ("ROLE_NOT_FOUND", "USER_NOT_FOUND"):
        raise ClientError(error, status_code=status.HTTP_404_NOT_FOUND)
    if error.code == "MALFORMED_INPUT":
        raise ClientError(error, status_code=status.HTTP_400_BAD_REQUEST)
    raise ServerError(error)


def _acting_user(principal: Principal) -> Optional[UUID]:
    """Audit actor: recorded for human callers only"""
    return principal.principal_id if isinstance(principal, HumanPrincipal) else None


@router.get("", response_model=List[RoleInfo])
async def list_roles(
    principal: Principal = Depends(require_permission("bastion:role", "read")),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    result = await ListRolesUseCase(uow).execute()
    if result.is_err():
        raise ServerError(result.error)
    return result.value


class AssignRoleRequest(BaseModel):
    user_id: UUID = Field(..., description="User receiving the role")
    tenant_id: Optional[UUID] = Field(
        default=None, description="Tenant scope; omit for a global grant"
    )


@router.post(
    "/{role_name}/assign",
    status_code=status.HTTP_200_OK,
    response_model=AssignRoleResponse,
)
async def assign_role(
    role_name: str,
    request: AssignRoleRequest,
    principal: Principal = Depends(get_principal),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Grant a role to a user, globally or within one tenant

    The caller needs bastion:role assign in the target scope. Granting a
    role the user already holds in that scope returns created=false.
    """
    scope = scope_for(request.tenant_id)
    await authorize(principal, uow, "bastion:role", "assign", scope)

    result = await AssignRoleUseCase(uow).execute(
        request.user_id, role_name, scope, granted_by=_acting_user(principal)
    )
    if result.is_err():
        _raise_for(result.error)
    return result.value


@router.delete(
    "/{role_name}/assign",
    status_code=status.HTTP_200_OK,
    response_model=RevokeRoleResponse,
)
async def revoke_role(
    role_name: str,
    user_id: UUID,
    tenant_id: Optional[UUID] = None,
    principal: Principal = Depends(get_principal),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Revoke exactly the (user, role, scope) grant

    Global and tenant grants are independent: revoking one leaves the other.
    """
    scope = scope_for(tenant_id)
    await authorize(principal, uow, "bastion:role", "revoke", scope)

    result = await RevokeRoleUseCase(uow).execute(
        user_id, role_name, scope, revoked_by=_acting_user(principal)
    )
    if result.is_err():
        _raise_for(result.error)
    return result.value
