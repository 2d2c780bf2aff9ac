"""
Permission Resolver

Answers "may principal P perform action A on resource type R within
scope S". Read-only; safe to run concurrently.

Tenant fallback for users: a grant applies under scope S if it was made
globally or for exactly S's tenant. Service accounts and API keys hold
permissions through their own credential, which applies wherever the
credential's scope covers S.
"""

import logging
from typing import List, Optional, Set, Tuple, assert_never
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError

from bastion.app.services.unit_of_work import UnitOfWork
from bastion.domain.principal import (
    ApiKeyPrincipal,
    GlobalScope,
    HumanPrincipal,
    Principal,
    ServiceAccountPrincipal,
    TenantScope,
    covers,
)
from bastion.libs.result import Error, Result, Return

from .dtos import PermissionDecision, PermissionInfo

logger = logging.getLogger(__name__)


class PermissionResolver:
    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def has_permission(
        self,
        user_id: UUID,
        scope: GlobalScope | TenantScope,
        resource_type: str,
        action: str,
    ) -> bool:
        async with self.uow:
            return await self.uow.roles.user_has_permission(
                user_id, scope, resource_type, action
            )

    async def get_effective_permissions(
        self, user_id: UUID, scope: GlobalScope | TenantScope
    ) -> Set[Tuple[str, str]]:
        async with self.uow:
            permissions = await self.uow.roles.get_user_permissions(user_id, scope)
            return {(p.resource_type, p.action) for p in permissions}

    async def check(
        self,
        principal: Principal,
        resource_type: str,
        action: str,
        scope: Optional[GlobalScope | TenantScope] = None,
    ) -> Result[PermissionDecision]:
        """
        Check one permission for any principal kind.

        Args:
            principal: Verified principal
            resource_type: e.g. "bastion:tenant"
            action: e.g. "create"
            scope: Requested scope; defaults to the principal's own scope

        Returns:
            Result with PermissionDecision (allowed or denied with reason),
            or Error(MALFORMED_INPUT) / Error(STORAGE_FAILURE)
        """
        if not resource_type or not resource_type.strip():
            return Return.err(Error("MALFORMED_INPUT", "resource type required"))
        if not action or not action.strip():
            return Return.err(Error("MALFORMED_INPUT", "action required"))

        requested = scope if scope is not None else principal.scope
        permission = f"{resource_type}:{action}"

        try:
            allowed, reason = await self._decide(principal, requested, resource_type, action)
        except SQLAlchemyError as exc:
            logger.error(f"Permission check {permission} for {principal.principal_id} failed: {exc}")
            return Return.err(Error("STORAGE_FAILURE", "Permission check failed"))

        logger.info(
            f"authz check {principal.kind}:{principal.principal_id} {permission} "
            f"scope={requested.key} allowed={allowed}"
        )
        return Return.ok(PermissionDecision(allowed=allowed, reason=reason))

    async def effective_permissions(
        self,
        principal: Principal,
        scope: Optional[GlobalScope | TenantScope] = None,
    ) -> List[PermissionInfo]:
        requested = scope if scope is not None else principal.scope

        async with self.uow:
            if isinstance(principal, HumanPrincipal):
                permissions = await self.uow.roles.get_user_permissions(
                    principal.principal_id, requested
                )
            elif isinstance(principal, ServiceAccountPrincipal):
                permissions = []
                if covers(principal.scope, requested):
                    permissions = await self.uow.service_accounts.get_permissions(
                        principal.principal_id
                    )
            elif isinstance(principal, ApiKeyPrincipal):
                permissions = []
                if covers(principal.scope, requested):
                    permissions = await self.uow.api_keys.get_permissions(
                        principal.principal_id
                    )
            else:
                assert_never(principal)

            return [PermissionInfo.from_entity(p) for p in permissions]

    async def _decide(
        self,
        principal: Principal,
        scope: GlobalScope | TenantScope,
        resource_type: str,
        action: str,
    ) -> Tuple[bool, str]:
        permission = f"{resource_type}:{action}"

        async with self.uow:
            if isinstance(principal, HumanPrincipal):
                allowed = await self.uow.roles.user_has_permission(
                    principal.principal_id, scope, resource_type, action
                )
            elif isinstance(principal, ServiceAccountPrincipal):
                if not covers(principal.scope, scope):
                    return False, f"service_account is not valid in scope {scope.key}"
                allowed = await self.uow.service_accounts.has_permission(
                    principal.principal_id, resource_type, action
                )
            elif isinstance(principal, ApiKeyPrincipal):
                if not covers(principal.scope, scope):
                    return False, f"api_key is not valid in scope {scope.key}"
                allowed = await self.uow.api_keys.has_permission(
                    principal.principal_id, resource_type, action
                )
            else:
                assert_never(principal)

        verb = "has" if allowed else "lacks"
        return allowed, f"{principal.kind} {verb} {permission} permission"
