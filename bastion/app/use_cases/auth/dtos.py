"""
Authentication Use Case DTOs (Data Transfer Objects)

All Command and Response classes for the auth domain.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel


# ============================================================================
# Command DTOs
# ============================================================================


class CreateUserCommand(BaseModel):
    """
    Create user command - validated signup intent

    Created by API layer after request validation passes.
    """

    email: str
    password: str
    tenant_id: Optional[UUID] = None


# ============================================================================
# Response DTOs
# ============================================================================


class UserInfo(BaseModel):
    """User information returned by user creation"""

    id: str
    email: str
    tenant_id: Optional[str] = None
    status: str
    created_at: datetime


class LoginResponse(BaseModel):
    """Response for user login use case"""

    access_token: str
    refresh_token: str
    token_type: str = "Bearer"
    expires_in: int
    session_id: str


class RefreshTokenResponse(BaseModel):
    """Response for refresh token use case (the refresh token is not rotated)"""

    access_token: str
    token_type: str = "Bearer"
    expires_in: int


class LogoutResponse(BaseModel):
    """Response for logout use case"""

    revoked_count: int
