"""
Service Account Management Use Cases

List, inspect, update and delete service accounts and grant them roles.
Accounts outside the caller's visible scope are reported as not found.
"""

from typing import List, Optional
from uuid import UUID

from bastion.app.services.unit_of_work import UnitOfWork
from bastion.domain.base import utcnow
from bastion.domain.entities import AuditEvent, ServiceAccount
from bastion.domain.principal import GlobalScope, TenantScope, owned_visible_from
from bastion.libs.result import Error, Result, Return

from .dtos import ServiceAccountInfo, UpdateServiceAccountCommand

NOT_FOUND = Error("SERVICE_ACCOUNT_NOT_FOUND", "Service account not found")


def _visible(
    account: Optional[ServiceAccount], scope: Optional[GlobalScope | TenantScope]
) -> bool:
    if account is None:
        return False
    return scope is None or owned_visible_from(account.tenant_id, scope)


class ListServiceAccountsUseCase:
    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(
        self, scope: GlobalScope | TenantScope
    ) -> Result[List[ServiceAccountInfo]]:
        async with self.uow:
            accounts = await self.uow.service_accounts.list_visible(scope)
            return Return.ok([ServiceAccountInfo.from_entity(a) for a in accounts])


class GetServiceAccountUseCase:
    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(
        self, account_id: UUID, scope: Optional[GlobalScope | TenantScope] = None
    ) -> Result[ServiceAccountInfo]:
        async with self.uow:
            account = await self.uow.service_accounts.get_by_id(account_id)
            if not _visible(account, scope):
                return Return.err(NOT_FOUND)

            roles = await self.uow.service_accounts.get_roles(account.id)
            return Return.ok(
                ServiceAccountInfo.from_entity(account, roles=[r.name for r in roles])
            )


class UpdateServiceAccountUseCase:
    """Disabling an account blocks new token exchanges; issued tokens live out their TTL"""

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(
        self,
        account_id: UUID,
        command: UpdateServiceAccountCommand,
        scope: Optional[GlobalScope | TenantScope] = None,
    ) -> Result[ServiceAccountInfo]:
        async with self.uow:
            account = await self.uow.service_accounts.get_by_id(account_id)
            if not _visible(account, scope):
                return Return.err(NOT_FOUND)

            if command.name is not None:
                account.name = command.name
            if command.description is not None:
                account.description = command.description
            if command.enabled is not None:
                account.enabled = command.enabled
            account.updated_at = utcnow()

            account = await self.uow.service_accounts.update(account)
            roles = await self.uow.service_accounts.get_roles(account.id)

            await self.uow.audit_events.create(
                AuditEvent(
                    tenant_id=account.tenant_id,
                    principal_id=account.id,
                    action="service_account_updated",
                    event_metadata=command.model_dump(exclude_none=True),
                )
            )

            await self.uow.commit()

            return Return.ok(
                ServiceAccountInfo.from_entity(account, roles=[r.name for r in roles])
            )


class DeleteServiceAccountUseCase:
    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(
        self,
        account_id: UUID,
        scope: Optional[GlobalScope | TenantScope] = None,
        deleted_by: Optional[UUID] = None,
    ) -> Result[dict]:
        async with self.uow:
            account = await self.uow.service_accounts.get_by_id(account_id)
            if not _visible(account, scope):
                return Return.err(NOT_FOUND)

            await self.uow.service_accounts.delete(account.id)

            await self.uow.audit_events.create(
                AuditEvent(
                    tenant_id=account.tenant_id,
                    principal_id=deleted_by,
                    action="service_account_deleted",
                    event_metadata={"client_id": account.client_id},
                )
            )

            await self.uow.commit()
            return Return.ok({"deleted": True, "service_account_id": str(account.id)})


class AssignServiceAccountRoleUseCase:
    """Conflict-ignore: assigning a held role succeeds with assigned=False"""

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(
        self,
        account_id: UUID,
        role_name: str,
        scope: Optional[GlobalScope | TenantScope] = None,
    ) -> Result[dict]:
        async with self.uow:
            account = await self.uow.service_accounts.get_by_id(account_id)
            if not _visible(account, scope):
                return Return.err(NOT_FOUND)

            role = await self.uow.roles.get_by_name(role_name)
            if role is None:
                return Return.err(Error("ROLE_NOT_FOUND", f"Role {role_name} not found"))

            assigned = await self.uow.service_accounts.assign_role(account.id, role.id)
            if assigned:
                await self.uow.audit_events.create(
                    AuditEvent(
                        tenant_id=account.tenant_id,
                        principal_id=account.id,
                        action="service_account_role_assigned",
                        event_metadata={"role": role.name},
                    )
                )

            await self.uow.commit()
            return Return.ok(
                {
                    "service_account_id": str(account.id),
                    "role": role.name,
                    "assigned": assigned,
                }
            )
