from datetime import datetime
from typing import List, Optional
from uuid import UUID

from sqlalchemy import update
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from bastion.app.repositories.session_repository import ISessionRepository
from bastion.domain.entities import RefreshSession


class SessionRepository(ISessionRepository):
    """Refresh session repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, session_id: UUID) -> Optional[RefreshSession]:
        """Get session by ID"""
        stmt = select(RefreshSession).where(RefreshSession.id == session_id)
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def create(self, session_obj: RefreshSession) -> RefreshSession:
        """Create a new session"""
        self.session.add(session_obj)
        await self.session.flush()
        await self.session.refresh(session_obj)
        return session_obj

    async def list_live(self, now: datetime) -> List[RefreshSession]:
        """
        Candidates for refresh-token matching.

        Revoked and expired rows are excluded here so the caller's bcrypt
        loop only runs over sessions that could still be honoured.
        """
        stmt = select(RefreshSession).where(
            RefreshSession.revoked == False,  # noqa: E712
            RefreshSession.expires_at > now,
        )
        result = await self.session.exec(stmt)
        return list(result.all())

    async def list_live_by_user_id(
        self, user_id: UUID, now: datetime
    ) -> List[RefreshSession]:
        """Live sessions of one user, oldest first"""
        stmt = (
            select(RefreshSession)
            .where(
                RefreshSession.user_id == user_id,
                RefreshSession.revoked == False,  # noqa: E712
                RefreshSession.expires_at > now,
            )
            .order_by(RefreshSession.created_at)
        )
        result = await self.session.exec(stmt)
        return list(result.all())

    async def touch(self, session_id: UUID, now: datetime) -> None:
        """Set last_activity"""
        stmt = (
            update(RefreshSession)
            .where(RefreshSession.id == session_id)
            .values(last_activity=now)
        )
        await self.session.execute(stmt)
        await self.session.flush()

    async def revoke_by_ids(self, session_ids: List[UUID], now: datetime) -> int:
        """Revoke the given sessions"""
        if not session_ids:
            return 0
        stmt = (
            update(RefreshSession)
            .where(
                RefreshSession.id.in_(session_ids),
                RefreshSession.revoked == False,  # noqa: E712
            )
            .values(revoked=True, revoked_at=now)
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount

    async def revoke_all_by_user_id(self, user_id: UUID, now: datetime) -> int:
        """Revoke all active sessions for a user"""
        stmt = (
            update(RefreshSession)
            .where(
                RefreshSession.user_id == user_id,
                RefreshSession.revoked == False,  # noqa: E712
            )
            .values(revoked=True, revoked_at=now)
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount
