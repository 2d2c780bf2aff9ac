"""
ServiceAccount Entity

Machine principals using the OAuth2 client-credentials exchange.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, Index, SQLModel

from bastion.domain.base import utcnow


class ServiceAccount(SQLModel, table=True):
    """
    ServiceAccount entity - machine-to-machine principal.

    Business Rules:
    - client_id is public, unique and the only lookup key
    - client_secret stored as bcrypt hash; regeneration kills the old secret
    - Role grants are tenant-unscoped: the account's own tenant_id applies
    - Disabled accounts cannot obtain tokens
    """

    __tablename__ = "service_accounts"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    name: str = Field(max_length=255)
    description: str = Field(default="", max_length=1024)

    client_id: str = Field(unique=True, index=True, max_length=64)
    client_secret_hash: str = Field(max_length=60)

    tenant_id: Optional[UUID] = Field(default=None, index=True)
    enabled: bool = Field(default=True)

    # Timestamps
    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))
    updated_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))
    last_used_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))


class ServiceAccountRole(SQLModel, table=True):
    """Role held by a service account"""

    __tablename__ = "service_account_roles"

    service_account_id: UUID = Field(foreign_key="service_accounts.id", primary_key=True)
    role_id: UUID = Field(foreign_key="roles.id", primary_key=True)

    __table_args__ = (Index("idx_service_account_role_account", "service_account_id"),)
