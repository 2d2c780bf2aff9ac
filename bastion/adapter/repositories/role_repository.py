from typing import List, Optional, Tuple
from uuid import UUID, uuid4

from sqlalchemy import delete
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from bastion.app.repositories.role_repository import IRoleRepository
from bastion.domain.base import utcnow
from bastion.domain.entities import Permission, Role, RolePermission, UserRoleGrant
from bastion.domain.principal import GlobalScope, TenantScope, visible_scope_keys

from .base import insert_ignore


class RoleRepository(IRoleRepository):
    """Role, permission and user grant repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_name(self, name: str) -> Optional[Role]:
        stmt = select(Role).where(Role.name == name)
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def list_roles(self) -> List[Role]:
        stmt = select(Role).order_by(Role.role_type, Role.name)
        result = await self.session.exec(stmt)
        return list(result.all())

    async def create(self, role: Role) -> Role:
        self.session.add(role)
        await self.session.flush()
        await self.session.refresh(role)
        return role

    async def get_permission(
        self, resource_type: str, action: str
    ) -> Optional[Permission]:
        stmt = select(Permission).where(
            Permission.resource_type == resource_type,
            Permission.action == action,
        )
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def get_permission_by_id(self, permission_id: UUID) -> Optional[Permission]:
        stmt = select(Permission).where(Permission.id == permission_id)
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def create_permission(self, permission: Permission) -> Permission:
        self.session.add(permission)
        await self.session.flush()
        await self.session.refresh(permission)
        return permission

    async def add_permission_to_role(self, role_id: UUID, permission_id: UUID) -> bool:
        return await insert_ignore(
            self.session,
            RolePermission,
            {"role_id": role_id, "permission_id": permission_id},
        )

    async def get_role_permissions(self, role_id: UUID) -> List[Permission]:
        stmt = (
            select(Permission)
            .join(RolePermission, RolePermission.permission_id == Permission.id)
            .where(RolePermission.role_id == role_id)
            .order_by(Permission.resource_type, Permission.action)
        )
        result = await self.session.exec(stmt)
        return list(result.all())

    async def assign_to_user(
        self,
        user_id: UUID,
        role_id: UUID,
        scope: GlobalScope | TenantScope,
        granted_by: Optional[UUID],
    ) -> bool:
        return await insert_ignore(
            self.session,
            UserRoleGrant,
            {
                "id": uuid4(),
                "user_id": user_id,
                "role_id": role_id,
                "tenant_id": scope.tenant_id,
                "scope_key": scope.key,
                "granted_by": granted_by,
                "granted_at": utcnow(),
            },
        )

    async def revoke_from_user(
        self, user_id: UUID, role_id: UUID, scope: GlobalScope | TenantScope
    ) -> bool:
        # Exact scope match: revoking a tenant grant leaves the global one alone
        stmt = delete(UserRoleGrant).where(
            UserRoleGrant.user_id == user_id,
            UserRoleGrant.role_id == role_id,
            UserRoleGrant.scope_key == scope.key,
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount > 0

    async def get_user_grants(
        self, user_id: UUID, scope: GlobalScope | TenantScope
    ) -> List[Tuple[UserRoleGrant, Role]]:
        stmt = (
            select(UserRoleGrant, Role)
            .join(Role, Role.id == UserRoleGrant.role_id)
            .where(
                UserRoleGrant.user_id == user_id,
                UserRoleGrant.scope_key.in_(visible_scope_keys(scope)),
            )
            .order_by(Role.name, UserRoleGrant.scope_key)
        )
        result = await self.session.exec(stmt)
        return [(grant, role) for grant, role in result.all()]

    async def get_user_permissions(
        self, user_id: UUID, scope: GlobalScope | TenantScope
    ) -> List[Permission]:
        stmt = (
            select(Permission)
            .join(RolePermission, RolePermission.permission_id == Permission.id)
            .join(UserRoleGrant, UserRoleGrant.role_id == RolePermission.role_id)
            .where(
                UserRoleGrant.user_id == user_id,
                UserRoleGrant.scope_key.in_(visible_scope_keys(scope)),
            )
            .distinct()
            .order_by(Permission.resource_type, Permission.action)
        )
        result = await self.session.exec(stmt)
        return list(result.all())

    async def user_has_permission(
        self,
        user_id: UUID,
        scope: GlobalScope | TenantScope,
        resource_type: str,
        action: str,
    ) -> bool:
        stmt = (
            select(Permission.id)
            .join(RolePermission, RolePermission.permission_id == Permission.id)
            .join(UserRoleGrant, UserRoleGrant.role_id == RolePermission.role_id)
            .where(
                UserRoleGrant.user_id == user_id,
                UserRoleGrant.scope_key.in_(visible_scope_keys(scope)),
                Permission.resource_type == resource_type,
                Permission.action == action,
            )
            .limit(1)
        )
        result = await self.session.exec(stmt)
        return result.first() is not None
