"""
API Key Use Case DTOs (Data Transfer Objects)
"""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from bastion.app.use_cases.rbac.dtos import PermissionInfo
from bastion.domain.entities import ApiKey
from bastion.domain.principal import ApiKeyPrincipal, scope_for


# ============================================================================
# Command DTOs
# ============================================================================


class CreateApiKeyCommand(BaseModel):
    """Create API key command"""

    name: str = Field(min_length=1, max_length=255)
    description: str = ""
    tenant_id: Optional[UUID] = None
    expires_at: Optional[datetime] = None
    permission_ids: List[UUID] = Field(default_factory=list)


# ============================================================================
# Response DTOs
# ============================================================================


class ApiKeyInfo(BaseModel):
    """Public view of an API key (never includes the secret or its hash)"""

    id: str
    name: str
    description: str
    key_prefix: str
    tenant_id: Optional[str] = None
    enabled: bool
    expires_at: Optional[datetime] = None
    created_at: datetime
    last_used_at: Optional[datetime] = None

    @classmethod
    def from_entity(cls, api_key: ApiKey) -> "ApiKeyInfo":
        return cls(
            id=str(api_key.id),
            name=api_key.name,
            description=api_key.description,
            key_prefix=api_key.key_prefix,
            tenant_id=str(api_key.tenant_id) if api_key.tenant_id else None,
            enabled=api_key.enabled,
            expires_at=api_key.expires_at,
            created_at=api_key.created_at,
            last_used_at=api_key.last_used_at,
        )


class CreateApiKeyResponse(BaseModel):
    """The full key is returned here once and never again"""

    api_key: ApiKeyInfo
    key: str


class ApiKeyDetail(BaseModel):
    api_key: ApiKeyInfo
    permissions: List[PermissionInfo]


class ApiKeyPermissionChange(BaseModel):
    api_key_id: str
    permission_id: str
    changed: bool


class AuthenticatedApiKey(BaseModel):
    """Detached snapshot of a verified key"""

    id: UUID
    name: str
    key_prefix: str
    tenant_id: Optional[UUID] = None

    def to_principal(self) -> ApiKeyPrincipal:
        return ApiKeyPrincipal(
            principal_id=self.id,
            key_prefix=self.key_prefix,
            scope=scope_for(self.tenant_id),
        )
