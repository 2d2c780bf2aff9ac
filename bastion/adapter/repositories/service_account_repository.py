from datetime import datetime
from typing import List, Optional
from uuid import UUID

from sqlalchemy import delete, update
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from bastion.app.repositories.service_account_repository import IServiceAccountRepository
from bastion.domain.entities import (
    Permission,
    Role,
    RolePermission,
    ServiceAccount,
    ServiceAccountRole,
)
from bastion.domain.principal import GlobalScope, TenantScope

from .base import insert_ignore, tenant_filter


class ServiceAccountRepository(IServiceAccountRepository):
    """Service account repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, account_id: UUID) -> Optional[ServiceAccount]:
        stmt = select(ServiceAccount).where(ServiceAccount.id == account_id)
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def get_by_client_id(self, client_id: str) -> Optional[ServiceAccount]:
        stmt = select(ServiceAccount).where(ServiceAccount.client_id == client_id)
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def list_visible(
        self, scope: GlobalScope | TenantScope
    ) -> List[ServiceAccount]:
        stmt = (
            select(ServiceAccount)
            .where(tenant_filter(ServiceAccount.tenant_id, scope))
            .order_by(ServiceAccount.created_at)
        )
        result = await self.session.exec(stmt)
        return list(result.all())

    async def create(self, account: ServiceAccount) -> ServiceAccount:
        self.session.add(account)
        await self.session.flush()
        await self.session.refresh(account)
        return account

    async def update(self, account: ServiceAccount) -> ServiceAccount:
        self.session.add(account)
        await self.session.flush()
        await self.session.refresh(account)
        return account

    async def delete(self, account_id: UUID) -> bool:
        await self.session.execute(
            delete(ServiceAccountRole).where(
                ServiceAccountRole.service_account_id == account_id
            )
        )
        result = await self.session.execute(
            delete(ServiceAccount).where(ServiceAccount.id == account_id)
        )
        await self.session.flush()
        return result.rowcount > 0

    async def update_secret_hash(
        self, account_id: UUID, client_secret_hash: str, now: datetime
    ) -> bool:
        stmt = (
            update(ServiceAccount)
            .where(ServiceAccount.id == account_id)
            .values(client_secret_hash=client_secret_hash, updated_at=now)
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount > 0

    async def touch_last_used(self, account_id: UUID, now: datetime) -> None:
        stmt = (
            update(ServiceAccount)
            .where(ServiceAccount.id == account_id)
            .values(last_used_at=now)
        )
        await self.session.execute(stmt)
        await self.session.flush()

    async def assign_role(self, account_id: UUID, role_id: UUID) -> bool:
        return await insert_ignore(
            self.session,
            ServiceAccountRole,
            {"service_account_id": account_id, "role_id": role_id},
        )

    async def get_roles(self, account_id: UUID) -> List[Role]:
        stmt = (
            select(Role)
            .join(ServiceAccountRole, ServiceAccountRole.role_id == Role.id)
            .where(ServiceAccountRole.service_account_id == account_id)
            .order_by(Role.role_type, Role.name)
        )
        result = await self.session.exec(stmt)
        return list(result.all())

    async def get_permissions(self, account_id: UUID) -> List[Permission]:
        stmt = (
            select(Permission)
            .join(RolePermission, RolePermission.permission_id == Permission.id)
            .join(ServiceAccountRole, ServiceAccountRole.role_id == RolePermission.role_id)
            .where(ServiceAccountRole.service_account_id == account_id)
            .distinct()
            .order_by(Permission.resource_type, Permission.action)
        )
        result = await self.session.exec(stmt)
        return list(result.all())

    async def has_permission(
        self, account_id: UUID, resource_type: str, action: str
    ) -> bool:
        stmt = (
            select(Permission.id)
            .join(RolePermission, RolePermission.permission_id == Permission.id)
            .join(ServiceAccountRole, ServiceAccountRole.role_id == RolePermission.role_id)
            .where(
                ServiceAccountRole.service_account_id == account_id,
                Permission.resource_type == resource_type,
                Permission.action == action,
            )
            .limit(1)
        )
        result = await self.session.exec(stmt)
        return result.first() is not None
