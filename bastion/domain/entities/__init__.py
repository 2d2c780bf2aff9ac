"""
Bastion Domain Entities

All domain entities organized by model.
Each entity in its own file for better maintainability.
"""

# Export all enums
from .enums import IdentityType, RoleType, UserStatus

# Export all entities
from .user import User
from .session import RefreshSession
from .api_key import ApiKey, ApiKeyPermission
from .service_account import ServiceAccount, ServiceAccountRole
from .role import Permission, Role, RolePermission
from .user_role import UserRoleGrant
from .audit_event import AuditEvent

__all__ = [
    # Enums
    "IdentityType",
    "RoleType",
    "UserStatus",
    # Entities
    "User",
    "RefreshSession",
    "ApiKey",
    "ApiKeyPermission",
    "ServiceAccount",
    "ServiceAccountRole",
    "Role",
    "Permission",
    "RolePermission",
    "UserRoleGrant",
    "AuditEvent",
]
