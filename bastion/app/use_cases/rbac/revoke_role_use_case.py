from typing import Optional
from uuid import UUID

from bastion.app.services.unit_of_work import UnitOfWork
from bastion.domain.entities import AuditEvent
from bastion.domain.principal import GlobalScope, TenantScope
from bastion.libs.result import Error, Result, Return

from .dtos import RevokeRoleResponse


class RevokeRoleUseCase:
    """
    Remove exactly one (user, role, scope) grant.

    Revoking a tenant grant leaves a global grant of the same role in place
    and vice versa. Revoking a grant that does not exist succeeds with
    revoked=False.
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(
        self,
        user_id: UUID,
        role_name: str,
        scope: GlobalScope | TenantScope,
        revoked_by: Optional[UUID] = None,
    ) -> Result[RevokeRoleResponse]:
        if not role_name:
            return Return.err(Error("MALFORMED_INPUT", "role name required"))

        async with self.uow:
            role = await self.uow.roles.get_by_name(role_name)
            if role is None:
                return Return.err(Error("ROLE_NOT_FOUND", f"Role {role_name} not found"))

            revoked = await self.uow.roles.revoke_from_user(user_id, role.id, scope)

            if revoked:
                await self.uow.audit_events.create(
                    AuditEvent(
                        tenant_id=scope.tenant_id,
                        principal_id=revoked_by,
                        action="role_revoked",
                        event_metadata={
                            "user_id": str(user_id),
                            "role_name": role.name,
                            "role_id": str(role.id),
                            "scope": scope.key,
                        },
                    )
                )

            await self.uow.commit()

            return Return.ok(
                RevokeRoleResponse(
                    user_id=str(user_id),
                    role_name=role.name,
                    scope=scope.key,
                    revoked=revoked,
                )
            )
