"""
Use Cases

Organized into domain folders:
- auth/: user creation, login, refresh, logout
- api_keys/: API key lifecycle and authentication
- service_accounts/: service account lifecycle and client credentials
- rbac/: permission resolution and role grants
"""

from .auth import (
    CreateUserUseCase,
    LoginUseCase,
    LogoutUseCase,
    RefreshTokenUseCase,
)
from .api_keys import (
    AuthenticateApiKeyUseCase,
    CreateApiKeyUseCase,
)
from .service_accounts import (
    ClientCredentialsUseCase,
    CreateServiceAccountUseCase,
    RegenerateSecretUseCase,
)
from .rbac import (
    AssignRoleUseCase,
    GetUserRolesUseCase,
    PermissionResolver,
    RevokeRoleUseCase,
    SeedBuiltinRolesUseCase,
)

__all__ = [
    # Auth
    "CreateUserUseCase",
    "LoginUseCase",
    "RefreshTokenUseCase",
    "LogoutUseCase",
    # API keys
    "CreateApiKeyUseCase",
    "AuthenticateApiKeyUseCase",
    # Service accounts
    "CreateServiceAccountUseCase",
    "ClientCredentialsUseCase",
    "RegenerateSecretUseCase",
    # RBAC
    "PermissionResolver",
    "AssignRoleUseCase",
    "RevokeRoleUseCase",
    "GetUserRolesUseCase",
    "SeedBuiltinRolesUseCase",
]
