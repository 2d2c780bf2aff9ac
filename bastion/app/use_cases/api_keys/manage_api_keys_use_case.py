"""
API Key Management Use Cases

List, inspect and delete keys, and edit their direct permissions.
"""

from typing import List, Optional
from uuid import UUID

from bastion.app.services.unit_of_work import UnitOfWork
from bastion.domain.entities import ApiKey, AuditEvent
from bastion.domain.principal import GlobalScope, TenantScope, owned_visible_from
from bastion.libs.result import Error, Result, Return

from .dtos import ApiKeyDetail, ApiKeyInfo, ApiKeyPermissionChange, PermissionInfo


def _visible(api_key: Optional[ApiKey], scope: GlobalScope | TenantScope) -> bool:
    return api_key is not None and owned_visible_from(api_key.tenant_id, scope)


class ListApiKeysUseCase:
    """Keys of the caller's tenant plus global keys"""

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(self, scope: GlobalScope | TenantScope) -> Result[List[ApiKeyInfo]]:
        async with self.uow:
            api_keys = await self.uow.api_keys.list_visible(scope)
            return Return.ok([ApiKeyInfo.from_entity(k) for k in api_keys])


class GetApiKeyUseCase:
    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(
        self, api_key_id: UUID, scope: GlobalScope | TenantScope
    ) -> Result[ApiKeyDetail]:
        async with self.uow:
            api_key = await self.uow.api_keys.get_by_id(api_key_id)
            if not _visible(api_key, scope):
                return Return.err(Error("API_KEY_NOT_FOUND", "API key not found"))

            permissions = await self.uow.api_keys.get_permissions(api_key.id)
            return Return.ok(
                ApiKeyDetail(
                    api_key=ApiKeyInfo.from_entity(api_key),
                    permissions=[PermissionInfo.from_entity(p) for p in permissions],
                )
            )


class DeleteApiKeyUseCase:
    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(
        self,
        api_key_id: UUID,
        scope: GlobalScope | TenantScope,
        deleted_by: Optional[UUID] = None,
    ) -> Result[dict]:
        async with self.uow:
            api_key = await self.uow.api_keys.get_by_id(api_key_id)
            if not _visible(api_key, scope):
                return Return.err(Error("API_KEY_NOT_FOUND", "API key not found"))

            await self.uow.api_keys.delete(api_key.id)

            await self.uow.audit_events.create(
                AuditEvent(
                    tenant_id=api_key.tenant_id,
                    principal_id=deleted_by,
                    action="api_key_deleted",
                    event_metadata={"api_key_id": str(api_key.id), "key_prefix": api_key.key_prefix},
                )
            )

            await self.uow.commit()
            return Return.ok({"deleted": True, "api_key_id": str(api_key.id)})


class ChangeApiKeyPermissionUseCase:
    """
    Add or remove one direct permission on a key.

    Adding an already-held permission and removing a missing one both
    succeed with changed=False.
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def add(
        self, api_key_id: UUID, permission_id: UUID, scope: GlobalScope | TenantScope
    ) -> Result[ApiKeyPermissionChange]:
        return await self._change(api_key_id, permission_id, scope, grant=True)

    async def remove(
        self, api_key_id: UUID, permission_id: UUID, scope: GlobalScope | TenantScope
    ) -> Result[ApiKeyPermissionChange]:
        return await self._change(api_key_id, permission_id, scope, grant=False)

    async def _change(
        self,
        api_key_id: UUID,
        permission_id: UUID,
        scope: GlobalScope | TenantScope,
        grant: bool,
    ) -> Result[ApiKeyPermissionChange]:
        async with self.uow:
            api_key = await self.uow.api_keys.get_by_id(api_key_id)
            if not _visible(api_key, scope):
                return Return.err(Error("API_KEY_NOT_FOUND", "API key not found"))

            permission = await self.uow.roles.get_permission_by_id(permission_id)
            if permission is None:
                return Return.err(Error("PERMISSION_NOT_FOUND", "Permission not found"))

            if grant:
                changed = await self.uow.api_keys.add_permission(api_key.id, permission.id)
            else:
                changed = await self.uow.api_keys.remove_permission(api_key.id, permission.id)

            if changed:
                await self.uow.audit_events.create(
                    AuditEvent(
                        tenant_id=api_key.tenant_id,
                        principal_id=api_key.id,
                        action="api_key_permission_added" if grant else "api_key_permission_removed",
                        event_metadata={
                            "resource_type": permission.resource_type,
                            "action": permission.action,
                        },
                    )
                )

            await self.uow.commit()

            return Return.ok(
                ApiKeyPermissionChange(
                    api_key_id=str(api_key.id),
                    permission_id=str(permission.id),
                    changed=changed,
                )
            )
