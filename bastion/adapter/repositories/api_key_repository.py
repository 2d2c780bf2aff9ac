from datetime import datetime
from typing import List, Optional
from uuid import UUID

from sqlalchemy import delete, update
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from bastion.app.repositories.api_key_repository import IApiKeyRepository
from bastion.domain.entities import ApiKey, ApiKeyPermission, Permission
from bastion.domain.principal import GlobalScope, TenantScope

from .base import insert_ignore, tenant_filter


class ApiKeyRepository(IApiKeyRepository):
    """API key repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, api_key_id: UUID) -> Optional[ApiKey]:
        stmt = select(ApiKey).where(ApiKey.id == api_key_id)
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def get_by_prefix(self, key_prefix: str) -> Optional[ApiKey]:
        stmt = select(ApiKey).where(ApiKey.key_prefix == key_prefix)
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def list_visible(self, scope: GlobalScope | TenantScope) -> List[ApiKey]:
        stmt = (
            select(ApiKey)
            .where(tenant_filter(ApiKey.tenant_id, scope))
            .order_by(ApiKey.created_at)
        )
        result = await self.session.exec(stmt)
        return list(result.all())

    async def create(self, api_key: ApiKey) -> ApiKey:
        self.session.add(api_key)
        await self.session.flush()
        await self.session.refresh(api_key)
        return api_key

    async def delete(self, api_key_id: UUID) -> bool:
        await self.session.execute(
            delete(ApiKeyPermission).where(ApiKeyPermission.api_key_id == api_key_id)
        )
        result = await self.session.execute(delete(ApiKey).where(ApiKey.id == api_key_id))
        await self.session.flush()
        return result.rowcount > 0

    async def touch_last_used(self, api_key_id: UUID, now: datetime) -> None:
        stmt = update(ApiKey).where(ApiKey.id == api_key_id).values(last_used_at=now)
        await self.session.execute(stmt)
        await self.session.flush()

    async def add_permission(self, api_key_id: UUID, permission_id: UUID) -> bool:
        return await insert_ignore(
            self.session,
            ApiKeyPermission,
            {"api_key_id": api_key_id, "permission_id": permission_id},
        )

    async def remove_permission(self, api_key_id: UUID, permission_id: UUID) -> bool:
        stmt = delete(ApiKeyPermission).where(
            ApiKeyPermission.api_key_id == api_key_id,
            ApiKeyPermission.permission_id == permission_id,
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount > 0

    async def get_permissions(self, api_key_id: UUID) -> List[Permission]:
        stmt = (
            select(Permission)
            .join(ApiKeyPermission, ApiKeyPermission.permission_id == Permission.id)
            .where(ApiKeyPermission.api_key_id == api_key_id)
            .order_by(Permission.resource_type, Permission.action)
        )
        result = await self.session.exec(stmt)
        return list(result.all())

    async def has_permission(
        self, api_key_id: UUID, resource_type: str, action: str
    ) -> bool:
        stmt = (
            select(Permission.id)
            .join(ApiKeyPermission, ApiKeyPermission.permission_id == Permission.id)
            .where(
                ApiKeyPermission.api_key_id == api_key_id,
                Permission.resource_type == resource_type,
                Permission.action == action,
            )
            .limit(1)
        )
        result = await self.session.exec(stmt)
        return result.first() is not None
