"""
Principal Context

Typed identity produced by the authentication step and threaded through
authorization. Exactly one of three kinds, each built only from a verified
credential:

- HumanPrincipal: bearer token issued at login/refresh
- ServiceAccountPrincipal: bearer token issued by the client-credentials exchange
- ApiKeyPrincipal: X-API-Key header

Scope is a tagged value (GlobalScope | TenantScope) rather than a nullable
tenant id, so comparison sites never deal with None.
"""

from typing import Annotated, Literal, Optional, Union
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

GLOBAL_SCOPE_KEY = "global"


class GlobalScope(BaseModel):
    """Unscoped: applies under every tenant"""

    model_config = ConfigDict(frozen=True)

    kind: Literal["global"] = "global"

    @property
    def tenant_id(self) -> Optional[UUID]:
        return None

    @property
    def key(self) -> str:
        return GLOBAL_SCOPE_KEY


class TenantScope(BaseModel):
    """Scoped to a single tenant"""

    model_config = ConfigDict(frozen=True)

    kind: Literal["tenant"] = "tenant"
    tenant_id: UUID

    @property
    def key(self) -> str:
        return str(self.tenant_id)


Scope = Annotated[Union[GlobalScope, TenantScope], Field(discriminator="kind")]


def scope_for(tenant_id: Optional[UUID]) -> Union[GlobalScope, TenantScope]:
    if tenant_id is None:
        return GlobalScope()
    return TenantScope(tenant_id=tenant_id)


def visible_scope_keys(scope: Union[GlobalScope, TenantScope]) -> list[str]:
    """
    Grant scope keys visible from a query scope.

    Tenant fallback: a global grant is visible under any tenant, a tenant
    grant only under its own tenant.
    """
    if isinstance(scope, TenantScope):
        return [scope.key, GLOBAL_SCOPE_KEY]
    return [GLOBAL_SCOPE_KEY]


def covers(
    grant_scope: Union[GlobalScope, TenantScope],
    requested: Union[GlobalScope, TenantScope],
) -> bool:
    """True if something held at grant_scope applies to requested."""
    if isinstance(grant_scope, GlobalScope):
        return True
    return (
        isinstance(requested, TenantScope)
        and requested.tenant_id == grant_scope.tenant_id
    )


class HumanPrincipal(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["user"] = "user"
    principal_id: UUID
    email: Optional[str] = None
    scope: Scope = GlobalScope()


class ApiKeyPrincipal(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["api_key"] = "api_key"
    principal_id: UUID
    key_prefix: str
    scope: Scope = GlobalScope()


class ServiceAccountPrincipal(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["service_account"] = "service_account"
    principal_id: UUID
    name: Optional[str] = None
    scope: Scope = GlobalScope()


Principal = Union[HumanPrincipal, ApiKeyPrincipal, ServiceAccountPrincipal]


def owned_visible_from(
    owner_tenant_id: Optional[UUID], scope: Union[GlobalScope, TenantScope]
) -> bool:
    """True if a credential owned by owner_tenant_id is manageable from scope"""
    return scope_for(owner_tenant_id).key in visible_scope_keys(scope)
