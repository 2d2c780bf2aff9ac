from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field

from bastion.api.error import ClientError, ServerError
from bastion.app.services.unit_of_work import UnitOfWork
from bastion.app.use_cases.rbac import PermissionDecision, PermissionResolver
from bastion.depends import authorize, get_principal, get_unit_of_work
from bastion.domain.principal import HumanPrincipal, Principal, scope_for

router = APIRouter(prefix="/authz", tags=["Authorization"])


class CheckRequest(BaseModel):
    resource_type: str = Field(..., description='e.g. "bastion:tenant"')
    action: str = Field(..., description='e.g. "create"')
    tenant_id: Optional[UUID] = Field(
        default=None, description="Scope to check in; defaults to the caller's scope"
    )
    user_id: Optional[UUID] = Field(
        default=None,
        description="Check another user instead of the caller (needs bastion:user read)",
    )


@router.post("/check", status_code=status.HTTP_200_OK, response_model=PermissionDecision)
async def check(
    request: CheckRequest,
    principal: Principal = Depends(get_principal),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Ask whether a principal may perform an action

    A denied check is a normal 200 answer with allowed=false and a reason;
    only a check that could not run is an error.
    """
    scope = scope_for(request.tenant_id) if request.tenant_id else None
    subject = principal
    if request.user_id is not None and not (
        isinstance(principal, HumanPrincipal) and principal.principal_id == request.user_id
    ):
        await authorize(principal, uow, "bastion:user", "read", scope)
        subject = HumanPrincipal(principal_id=request.user_id, scope=scope_for(request.tenant_id))

    result = await PermissionResolver(uow).check(
        subject, request.resource_type, request.action, scope
    )
    if result.is_err():
        if result.error.code == "MALFORMED_INPUT":
            raise ClientError(result.error, status_code=status.HTTP_400_BAD_REQUEST)
        raise ServerError(result.error)

    return result.value
