"""
ApiKey Entity

Long-lived credentials presented as "<prefix>.<secret>" in the X-API-Key header.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, Index, SQLModel

from bastion.domain.base import utcnow


class ApiKey(SQLModel, table=True):
    """
    ApiKey entity - long-lived machine credential.

    Business Rules:
    - key_prefix is public, unique and the only lookup key
    - Only the secret half is stored, bcrypt-hashed
    - Disabled or expired keys fail authentication even with a correct secret
    - Permissions are granted directly (api_key_permissions), not via roles
    """

    __tablename__ = "api_keys"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    name: str = Field(max_length=255)
    description: str = Field(default="", max_length=1024)

    key_prefix: str = Field(unique=True, index=True, max_length=16)
    key_secret_hash: str = Field(max_length=60)

    tenant_id: Optional[UUID] = Field(default=None, index=True)
    enabled: bool = Field(default=True)

    # Timestamps
    expires_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))
    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))
    last_used_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))


class ApiKeyPermission(SQLModel, table=True):
    """Direct permission grant on an API key"""

    __tablename__ = "api_key_permissions"

    api_key_id: UUID = Field(foreign_key="api_keys.id", primary_key=True)
    permission_id: UUID = Field(foreign_key="permissions.id", primary_key=True)

    __table_args__ = (Index("idx_api_key_permission_key", "api_key_id"),)
