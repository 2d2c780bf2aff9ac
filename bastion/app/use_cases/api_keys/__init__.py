"""
API Key Use Cases

Creation, authentication and management of long-lived API keys.
"""

from .create_api_key_use_case import CreateApiKeyUseCase
from .authenticate_api_key_use_case import AuthenticateApiKeyUseCase
from .manage_api_keys_use_case import (
    ChangeApiKeyPermissionUseCase,
    DeleteApiKeyUseCase,
    GetApiKeyUseCase,
    ListApiKeysUseCase,
)
from .dtos import (
    ApiKeyDetail,
    ApiKeyInfo,
    ApiKeyPermissionChange,
    AuthenticatedApiKey,
    CreateApiKeyCommand,
    CreateApiKeyResponse,
    PermissionInfo,
)

__all__ = [
    # Use Cases
    "CreateApiKeyUseCase",
    "AuthenticateApiKeyUseCase",
    "ListApiKeysUseCase",
    "GetApiKeyUseCase",
    "DeleteApiKeyUseCase",
    "ChangeApiKeyPermissionUseCase",
    # DTOs
    "CreateApiKeyCommand",
    "CreateApiKeyResponse",
    "ApiKeyInfo",
    "ApiKeyDetail",
    "ApiKeyPermissionChange",
    "AuthenticatedApiKey",
    "PermissionInfo",
]
