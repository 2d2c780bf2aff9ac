from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from bastion.domain.entities import Permission, Role, ServiceAccount
from bastion.domain.principal import GlobalScope, TenantScope


class IServiceAccountRepository(ABC):
    """Service account repository interface - application layer"""

    @abstractmethod
    async def get_by_id(self, account_id: UUID) -> Optional[ServiceAccount]:
        """Get service account by ID"""
        pass

    @abstractmethod
    async def get_by_client_id(self, client_id: str) -> Optional[ServiceAccount]:
        """Get service account by its public client_id"""
        pass

    @abstractmethod
    async def list_visible(
        self, scope: GlobalScope | TenantScope
    ) -> List[ServiceAccount]:
        """Accounts of the tenant plus global accounts"""
        pass

    @abstractmethod
    async def create(self, account: ServiceAccount) -> ServiceAccount:
        """Create a new service account"""
        pass

    @abstractmethod
    async def update(self, account: ServiceAccount) -> ServiceAccount:
        """Update existing service account"""
        pass

    @abstractmethod
    async def delete(self, account_id: UUID) -> bool:
        """Delete account and its role edges. Returns True if it existed."""
        pass

    @abstractmethod
    async def update_secret_hash(
        self, account_id: UUID, client_secret_hash: str, now: datetime
    ) -> bool:
        """Replace the secret hash. Returns True if the account exists."""
        pass

    @abstractmethod
    async def touch_last_used(self, account_id: UUID, now: datetime) -> None:
        """Set last_used_at"""
        pass

    @abstractmethod
    async def assign_role(self, account_id: UUID, role_id: UUID) -> bool:
        """Grant a role. Returns False if it was already granted."""
        pass

    @abstractmethod
    async def get_roles(self, account_id: UUID) -> List[Role]:
        """Roles held by the account"""
        pass

    @abstractmethod
    async def get_permissions(self, account_id: UUID) -> List[Permission]:
        """Distinct permissions reachable through the account's roles"""
        pass

    @abstractmethod
    async def has_permission(
        self, account_id: UUID, resource_type: str, action: str
    ) -> bool:
        """True if any role of the account grants (resource_type, action)"""
        pass
