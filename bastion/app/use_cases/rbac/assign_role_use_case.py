from typing import Optional
from uuid import UUID

from bastion.app.services.unit_of_work import UnitOfWork
from bastion.domain.entities import AuditEvent
from bastion.domain.principal import GlobalScope, TenantScope
from bastion.libs.result import Error, Result, Return

from .dtos import AssignRoleResponse


class AssignRoleUseCase:
    """
    Grant a role, by name, to a user within a scope.

    Business Rules:
    - Unknown role name -> ROLE_NOT_FOUND, unknown user -> USER_NOT_FOUND
    - Re-granting an existing (user, role, scope) is a no-op reported as
      created=False; resolver output does not change
    - Global and tenant grants of the same role are independent
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(
        self,
        user_id: UUID,
        role_name: str,
        scope: GlobalScope | TenantScope,
        granted_by: Optional[UUID] = None,
    ) -> Result[AssignRoleResponse]:
        if not role_name:
            return Return.err(Error("MALFORMED_INPUT", "role name required"))

        async with self.uow:
            role = await self.uow.roles.get_by_name(role_name)
            if role is None:
                return Return.err(Error("ROLE_NOT_FOUND", f"Role {role_name} not found"))

            user = await self.uow.users.get_by_id(user_id)
            if user is None:
                return Return.err(Error("USER_NOT_FOUND", "User not found"))

            created = await self.uow.roles.assign_to_user(
                user.id, role.id, scope, granted_by
            )

            if created:
                await self.uow.audit_events.create(
                    AuditEvent(
                        tenant_id=scope.tenant_id,
                        principal_id=granted_by,
                        action="role_assigned",
                        event_metadata={
                            "user_id": str(user.id),
                            "role_name": role.name,
                            "role_id": str(role.id),
                            "scope": scope.key,
                        },
                    )
                )

            await self.uow.commit()

            return Return.ok(
                AssignRoleResponse(
                    user_id=str(user.id),
                    role_name=role.name,
                    scope=scope.key,
                    created=created,
                )
            )
