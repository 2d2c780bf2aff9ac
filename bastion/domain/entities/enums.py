"""
Bastion Domain Enums

All enumeration types used across domain entities.
"""

from enum import Enum


class UserStatus(str, Enum):
    """User account status"""

    active = "active"
    disabled = "disabled"


class RoleType(str, Enum):
    """Built-in roles are seeded by the service, custom roles by operators"""

    builtin = "builtin"
    custom = "custom"


class IdentityType(str, Enum):
    """Principal kind carried in bearer tokens and audit events"""

    user = "user"
    api_key = "api_key"
    service_account = "service_account"
