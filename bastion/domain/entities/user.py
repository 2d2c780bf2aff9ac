"""
User Entity

A human principal authenticating with email and password.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, Index, SQLModel

from bastion.domain.base import utcnow

from .enums import UserStatus


class User(SQLModel, table=True):
    """
    User entity - human principal.

    Business Rules:
    - Email must be unique across all users
    - Password stored as bcrypt hash, never in plaintext
    - tenant_id NULL means the user is not bound to a home tenant
    - Disabled users cannot log in or refresh
    """

    __tablename__ = "users"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    email: str = Field(unique=True, index=True, max_length=255)
    password_hash: str = Field(max_length=60)  # Bcrypt output is 60 chars

    tenant_id: Optional[UUID] = Field(default=None, index=True)
    status: UserStatus = Field(default=UserStatus.active)

    # Timestamps
    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))
    updated_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))
    last_login_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))

    __table_args__ = (Index("idx_user_status", "status"),)

    @property
    def enabled(self) -> bool:
        return self.status == UserStatus.active
