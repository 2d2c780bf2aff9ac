"""
Service Account Use Cases

Machine principals: management and the client-credentials exchange.
"""

from .create_service_account_use_case import CreateServiceAccountUseCase
from .client_credentials_use_case import ClientCredentialsUseCase
from .regenerate_secret_use_case import RegenerateSecretUseCase
from .manage_service_accounts_use_case import (
    AssignServiceAccountRoleUseCase,
    DeleteServiceAccountUseCase,
    GetServiceAccountUseCase,
    ListServiceAccountsUseCase,
    UpdateServiceAccountUseCase,
)
from .dtos import (
    ClientCredentialsResponse,
    CreateServiceAccountCommand,
    CreateServiceAccountResponse,
    RegenerateSecretResponse,
    ServiceAccountInfo,
    UpdateServiceAccountCommand,
)

__all__ = [
    # Use Cases
    "CreateServiceAccountUseCase",
    "ClientCredentialsUseCase",
    "RegenerateSecretUseCase",
    "ListServiceAccountsUseCase",
    "GetServiceAccountUseCase",
    "UpdateServiceAccountUseCase",
    "DeleteServiceAccountUseCase",
    "AssignServiceAccountRoleUseCase",
    # DTOs
    "CreateServiceAccountCommand",
    "UpdateServiceAccountCommand",
    "CreateServiceAccountResponse",
    "ClientCredentialsResponse",
    "RegenerateSecretResponse",
    "ServiceAccountInfo",
]
