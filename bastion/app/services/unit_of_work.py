from abc import ABC, abstractmethod

from bastion.app.repositories.api_key_repository import IApiKeyRepository
from bastion.app.repositories.audit_event_repository import IAuditEventRepository
from bastion.app.repositories.role_repository import IRoleRepository
from bastion.app.repositories.service_account_repository import IServiceAccountRepository
from bastion.app.repositories.session_repository import ISessionRepository
from bastion.app.repositories.user_repository import IUserRepository


class UnitOfWork(ABC):
    """Abstract UnitOfWork - defines repository access and transaction management"""

    # Repository properties (initialized in __aenter__)
    users: IUserRepository
    sessions: ISessionRepository
    api_keys: IApiKeyRepository
    service_accounts: IServiceAccountRepository
    roles: IRoleRepository
    audit_events: IAuditEventRepository

    @abstractmethod
    async def __aenter__(self):
        pass

    @abstractmethod
    async def __aexit__(self, *args):
        pass

    @abstractmethod
    async def commit(self):
        pass

    @abstractmethod
    async def rollback(self):
        pass
