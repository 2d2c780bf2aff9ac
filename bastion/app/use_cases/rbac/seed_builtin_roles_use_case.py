"""
Seed Built-in Roles Use Case

Creates the service's own permission catalogue and the built-in roles that
hold it. Safe to run on every start.
"""

import logging

from bastion.app.services.unit_of_work import UnitOfWork
from bastion.domain.entities import Permission, Role, RoleType
from bastion.libs.result import Result, Return

from .dtos import SeedResult

logger = logging.getLogger(__name__)

APPLICATION_NAME = "bastion"

BUILTIN_PERMISSIONS = {
    "bastion:tenant": ["create", "read"],
    "bastion:service-account": ["create", "read", "update", "delete"],
    "bastion:api-key": ["create", "read", "update", "delete"],
    "bastion:role": ["assign", "revoke", "read"],
    "bastion:user": ["read"],
}

ADMIN_ROLE = "bastion:admin"
VIEWER_ROLE = "bastion:viewer"

BUILTIN_ROLES = {
    ADMIN_ROLE: "Full access to bastion management operations",
    VIEWER_ROLE: "Read-only access to bastion management operations",
}


class SeedBuiltinRolesUseCase:
    """
    Business Rules:
    - Idempotent: existing permissions, roles and edges are left alone
    - bastion:admin holds every catalogue permission
    - bastion:viewer holds the read permissions only
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(self) -> Result[SeedResult]:
        roles_created = 0
        permissions_created = 0

        async with self.uow:
            permissions = []
            for resource_type, actions in BUILTIN_PERMISSIONS.items():
                for action in actions:
                    permission = await self.uow.roles.get_permission(resource_type, action)
                    if permission is None:
                        permission = await self.uow.roles.create_permission(
                            Permission(
                                resource_type=resource_type,
                                action=action,
                                description=f"{action} {resource_type.split(':', 1)[1]}",
                            )
                        )
                        permissions_created += 1
                    permissions.append(permission)

            for role_name, description in BUILTIN_ROLES.items():
                role = await self.uow.roles.get_by_name(role_name)
                if role is None:
                    role = await self.uow.roles.create(
                        Role(
                            name=role_name,
                            description=description,
                            role_type=RoleType.builtin,
                            application_name=APPLICATION_NAME,
                        )
                    )
                    roles_created += 1

                for permission in permissions:
                    if role_name == VIEWER_ROLE and permission.action != "read":
                        continue
                    await self.uow.roles.add_permission_to_role(role.id, permission.id)

            await self.uow.commit()

        if roles_created or permissions_created:
            logger.info(
                f"Seeded {roles_created} built-in roles and {permissions_created} permissions"
            )
        return Return.ok(
            SeedResult(roles_created=roles_created, permissions_created=permissions_created)
        )
