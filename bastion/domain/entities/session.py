"""
RefreshSession Entity

Stores hashed refresh tokens for human users.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, Index, SQLModel

from bastion.domain.base import utcnow


class RefreshSession(SQLModel, table=True):
    """
    RefreshSession entity - one row per login (multi-device).

    Business Rules:
    - Refresh tokens are hashed (bcrypt); the raw token is never stored
    - Refresh does not rotate the token, it only bumps last_activity
    - Logout revokes every live session of the user
    - Live = not revoked and not expired
    """

    __tablename__ = "sessions"

    id: UUID = Field(default_factory=uuid4, primary_key=True)

    user_id: UUID = Field(foreign_key="users.id", nullable=False, index=True)

    refresh_token_hash: str = Field(max_length=60)  # Bcrypt output
    revoked: bool = Field(default=False)
    revoked_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))

    # Timestamps
    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))
    expires_at: datetime = Field(sa_column=Column(DateTime, nullable=False))
    last_activity: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))

    __table_args__ = (
        Index("idx_session_expires_at", "expires_at"),
        Index("idx_session_user_revoked", "user_id", "revoked"),
        Index("idx_session_revoked", "revoked"),
    )
