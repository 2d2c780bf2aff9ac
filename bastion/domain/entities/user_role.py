"""
UserRoleGrant Entity

Assignment of a role to a user, globally or within one tenant.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, Index, SQLModel

from bastion.domain.base import utcnow
from bastion.domain.principal import GlobalScope, TenantScope, scope_for


class UserRoleGrant(SQLModel, table=True):
    """
    UserRoleGrant entity.

    Business Rules:
    - tenant_id NULL is a global grant, visible under every tenant
    - scope_key mirrors tenant_id ("global" or the tenant id) and is never
      NULL, so (user_id, role_id, scope_key) is a real uniqueness constraint
    - Global and tenant grants of the same role are independent rows
    """

    __tablename__ = "user_roles"

    id: UUID = Field(default_factory=uuid4, primary_key=True)

    user_id: UUID = Field(foreign_key="users.id", nullable=False, index=True)
    role_id: UUID = Field(foreign_key="roles.id", nullable=False, index=True)

    tenant_id: Optional[UUID] = Field(default=None)
    scope_key: str = Field(max_length=36)

    granted_by: Optional[UUID] = Field(default=None)
    granted_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))

    __table_args__ = (
        Index("idx_user_role_scope", "user_id", "role_id", "scope_key", unique=True),
        Index("idx_user_role_user_scope", "user_id", "scope_key"),
    )

    @property
    def scope(self) -> GlobalScope | TenantScope:
        return scope_for(self.tenant_id)
