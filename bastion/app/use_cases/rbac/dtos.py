"""
RBAC Use Case DTOs (Data Transfer Objects)
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel

from bastion.domain.entities import Permission, Role, UserRoleGrant


class PermissionInfo(BaseModel):
    id: str
    resource_type: str
    action: str
    description: str = ""

    @classmethod
    def from_entity(cls, permission: Permission) -> "PermissionInfo":
        return cls(
            id=str(permission.id),
            resource_type=permission.resource_type,
            action=permission.action,
            description=permission.description,
        )


class PermissionDecision(BaseModel):
    """Outcome of a check that ran; denied is a normal outcome, not an error"""

    allowed: bool
    reason: str


class RoleInfo(BaseModel):
    id: str
    name: str
    description: str
    role_type: str
    application_name: Optional[str] = None
    permissions: List[PermissionInfo] = []

    @classmethod
    def from_entity(
        cls, role: Role, permissions: Optional[List[Permission]] = None
    ) -> "RoleInfo":
        return cls(
            id=str(role.id),
            name=role.name,
            description=role.description,
            role_type=role.role_type.value,
            application_name=role.application_name,
            permissions=[PermissionInfo.from_entity(p) for p in permissions or []],
        )


class RoleGrantInfo(BaseModel):
    role_id: str
    role_name: str
    scope: str  # "global" or the tenant id
    tenant_id: Optional[str] = None
    granted_by: Optional[str] = None
    granted_at: datetime

    @classmethod
    def from_entity(cls, grant: UserRoleGrant, role: Role) -> "RoleGrantInfo":
        return cls(
            role_id=str(role.id),
            role_name=role.name,
            scope=grant.scope_key,
            tenant_id=str(grant.tenant_id) if grant.tenant_id else None,
            granted_by=str(grant.granted_by) if grant.granted_by else None,
            granted_at=grant.granted_at,
        )


class AssignRoleResponse(BaseModel):
    user_id: str
    role_name: str
    scope: str
    created: bool


class RevokeRoleResponse(BaseModel):
    user_id: str
    role_name: str
    scope: str
    revoked: bool


class SeedResult(BaseModel):
    roles_created: int
    permissions_created: int
