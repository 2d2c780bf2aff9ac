"""
Role and Permission Entities

A role is a named bundle of (resource_type, action) permissions.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, Index, SQLModel

from bastion.domain.base import utcnow

from .enums import RoleType


class Role(SQLModel, table=True):
    """
    Role entity.

    Business Rules:
    - name is unique; grants and revocations address roles by name
    - application_name optionally scopes a role to one bounded context
    """

    __tablename__ = "roles"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    name: str = Field(unique=True, index=True, max_length=100)
    description: str = Field(default="", max_length=1024)

    role_type: RoleType = Field(default=RoleType.custom)
    application_name: Optional[str] = Field(default=None, max_length=100)

    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))


class Permission(SQLModel, table=True):
    """Capability atom: the (resource_type, action) pair is what gets checked"""

    __tablename__ = "permissions"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    resource_type: str = Field(max_length=100)
    action: str = Field(max_length=50)
    description: str = Field(default="", max_length=1024)

    __table_args__ = (
        Index("idx_permission_resource_action", "resource_type", "action", unique=True),
    )


class RolePermission(SQLModel, table=True):
    __tablename__ = "role_permissions"

    role_id: UUID = Field(foreign_key="roles.id", primary_key=True)
    permission_id: UUID = Field(foreign_key="permissions.id", primary_key=True)
