"""
Authentication Use Cases

All authentication-related business logic.
"""

from .create_user_use_case import CreateUserUseCase
from .login_use_case import LoginUseCase
from .refresh_token_use_case import RefreshTokenUseCase
from .logout_use_case import LogoutUseCase
from .dtos import (
    CreateUserCommand,
    LoginResponse,
    LogoutResponse,
    RefreshTokenResponse,
    UserInfo,
)

__all__ = [
    # Use Cases
    "CreateUserUseCase",
    "LoginUseCase",
    "RefreshTokenUseCase",
    "LogoutUseCase",
    # DTOs - Commands
    "CreateUserCommand",
    # DTOs - Responses
    "LoginResponse",
    "RefreshTokenResponse",
    "LogoutResponse",
    "UserInfo",
]
