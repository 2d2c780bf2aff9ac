from sqlmodel.ext.asyncio.session import AsyncSession

from bastion.adapter.repositories.api_key_repository import ApiKeyRepository
from bastion.adapter.repositories.audit_event_repository import AuditEventRepository
from bastion.adapter.repositories.role_repository import RoleRepository
from bastion.adapter.repositories.service_account_repository import ServiceAccountRepository
from bastion.adapter.repositories.session_repository import SessionRepository
from bastion.adapter.repositories.user_repository import UserRepository
from bastion.app.services.unit_of_work import UnitOfWork


class SqlAlchemyUnitOfWork(UnitOfWork):
    """SQLAlchemy implementation of UnitOfWork pattern"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def __aenter__(self):
        self.users = UserRepository(self.session)
        self.sessions = SessionRepository(self.session)
        self.api_keys = ApiKeyRepository(self.session)
        self.service_accounts = ServiceAccountRepository(self.session)
        self.roles = RoleRepository(self.session)
        self.audit_events = AuditEventRepository(self.session)
        return self

    async def __aexit__(self, *args):
        # Anything not committed explicitly is discarded
        await self.rollback()

    async def commit(self):
        await self.session.commit()

    async def rollback(self):
        await self.session.rollback()
