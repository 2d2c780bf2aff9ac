"""
RBAC Use Cases

Permission resolution, role grants and the built-in role catalogue.
"""

from .permission_resolver import PermissionResolver
from .assign_role_use_case import AssignRoleUseCase
from .revoke_role_use_case import RevokeRoleUseCase
from .get_user_roles_use_case import GetUserRolesUseCase, ListRolesUseCase
from .seed_builtin_roles_use_case import (
    ADMIN_ROLE,
    BUILTIN_PERMISSIONS,
    VIEWER_ROLE,
    SeedBuiltinRolesUseCase,
)
from .dtos import (
    AssignRoleResponse,
    PermissionDecision,
    PermissionInfo,
    RevokeRoleResponse,
    RoleGrantInfo,
    RoleInfo,
    SeedResult,
)

__all__ = [
    # Use Cases
    "PermissionResolver",
    "AssignRoleUseCase",
    "RevokeRoleUseCase",
    "GetUserRolesUseCase",
    "ListRolesUseCase",
    "SeedBuiltinRolesUseCase",
    # Catalogue
    "ADMIN_ROLE",
    "VIEWER_ROLE",
    "BUILTIN_PERMISSIONS",
    # DTOs
    "AssignRoleResponse",
    "RevokeRoleResponse",
    "PermissionDecision",
    "PermissionInfo",
    "RoleGrantInfo",
    "RoleInfo",
    "SeedResult",
]
