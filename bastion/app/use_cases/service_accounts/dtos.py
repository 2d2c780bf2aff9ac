"""
Service Account Use Case DTOs (Data Transfer Objects)
"""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from bastion.domain.entities import ServiceAccount


# ============================================================================
# Command DTOs
# ============================================================================


class CreateServiceAccountCommand(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    description: str = ""
    tenant_id: Optional[UUID] = None
    role_names: List[str] = Field(default_factory=list)


class UpdateServiceAccountCommand(BaseModel):
    """Fields left as None are not changed"""

    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = None
    enabled: Optional[bool] = None


# ============================================================================
# Response DTOs
# ============================================================================


class ServiceAccountInfo(BaseModel):
    """Public view of a service account (never includes the secret hash)"""

    id: str
    name: str
    description: str
    client_id: str
    tenant_id: Optional[str] = None
    enabled: bool
    roles: List[str] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime
    last_used_at: Optional[datetime] = None

    @classmethod
    def from_entity(
        cls, account: ServiceAccount, roles: Optional[List[str]] = None
    ) -> "ServiceAccountInfo":
        return cls(
            id=str(account.id),
            name=account.name,
            description=account.description,
            client_id=account.client_id,
            tenant_id=str(account.tenant_id) if account.tenant_id else None,
            enabled=account.enabled,
            roles=roles or [],
            created_at=account.created_at,
            updated_at=account.updated_at,
            last_used_at=account.last_used_at,
        )


class CreateServiceAccountResponse(BaseModel):
    """The client secret is returned here once and never again"""

    service_account: ServiceAccountInfo
    client_secret: str


class RegenerateSecretResponse(BaseModel):
    client_id: str
    client_secret: str


class ClientCredentialsResponse(BaseModel):
    access_token: str
    token_type: str = "Bearer"
    expires_in: int
