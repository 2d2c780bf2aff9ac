from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from bastion.domain.entities import RefreshSession


class ISessionRepository(ABC):
    """Refresh session repository interface - application layer"""

    @abstractmethod
    async def get_by_id(self, session_id: UUID) -> Optional[RefreshSession]:
        """Get session by ID"""
        pass

    @abstractmethod
    async def create(self, session: RefreshSession) -> RefreshSession:
        """Create a new session"""
        pass

    @abstractmethod
    async def list_live(self, now: datetime) -> List[RefreshSession]:
        """All sessions that are neither revoked nor expired at `now`"""
        pass

    @abstractmethod
    async def list_live_by_user_id(
        self, user_id: UUID, now: datetime
    ) -> List[RefreshSession]:
        """Live sessions of one user, oldest first"""
        pass

    @abstractmethod
    async def touch(self, session_id: UUID, now: datetime) -> None:
        """Set last_activity"""
        pass

    @abstractmethod
    async def revoke_by_ids(self, session_ids: List[UUID], now: datetime) -> int:
        """Revoke the given sessions. Returns count of revoked sessions."""
        pass

    @abstractmethod
    async def revoke_all_by_user_id(self, user_id: UUID, now: datetime) -> int:
        """Revoke all sessions for a user. Returns count of revoked sessions."""
        pass
