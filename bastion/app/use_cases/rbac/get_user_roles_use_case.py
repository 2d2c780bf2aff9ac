from typing import List
from uuid import UUID

from bastion.app.services.unit_of_work import UnitOfWork
from bastion.domain.principal import GlobalScope, TenantScope
from bastion.libs.result import Result, Return

from .dtos import RoleGrantInfo, RoleInfo


class GetUserRolesUseCase:
    """Grants visible under a scope, with tenant fallback applied"""

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(
        self, user_id: UUID, scope: GlobalScope | TenantScope
    ) -> Result[List[RoleGrantInfo]]:
        async with self.uow:
            grants = await self.uow.roles.get_user_grants(user_id, scope)
            return Return.ok(
                [RoleGrantInfo.from_entity(grant, role) for grant, role in grants]
            )


class ListRolesUseCase:
    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(self) -> Result[List[RoleInfo]]:
        async with self.uow:
            roles = await self.uow.roles.list_roles()
            result = []
            for role in roles:
                permissions = await self.uow.roles.get_role_permissions(role.id)
                result.append(RoleInfo.from_entity(role, permissions))
            return Return.ok(result)
