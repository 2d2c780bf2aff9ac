from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from bastion.domain.entities import ApiKey, Permission
from bastion.domain.principal import GlobalScope, TenantScope


class IApiKeyRepository(ABC):
    """API key repository interface - application layer"""

    @abstractmethod
    async def get_by_id(self, api_key_id: UUID) -> Optional[ApiKey]:
        """Get API key by ID"""
        pass

    @abstractmethod
    async def get_by_prefix(self, key_prefix: str) -> Optional[ApiKey]:
        """Get API key by its public prefix"""
        pass

    @abstractmethod
    async def list_visible(self, scope: GlobalScope | TenantScope) -> List[ApiKey]:
        """Keys of the tenant plus global keys (global scope: global keys only)"""
        pass

    @abstractmethod
    async def create(self, api_key: ApiKey) -> ApiKey:
        """Create a new API key"""
        pass

    @abstractmethod
    async def delete(self, api_key_id: UUID) -> bool:
        """Delete key and its permission edges. Returns True if it existed."""
        pass

    @abstractmethod
    async def touch_last_used(self, api_key_id: UUID, now: datetime) -> None:
        """Set last_used_at"""
        pass

    @abstractmethod
    async def add_permission(self, api_key_id: UUID, permission_id: UUID) -> bool:
        """Grant a permission. Returns False if it was already granted."""
        pass

    @abstractmethod
    async def remove_permission(self, api_key_id: UUID, permission_id: UUID) -> bool:
        """Remove a permission. Returns True if it was granted."""
        pass

    @abstractmethod
    async def get_permissions(self, api_key_id: UUID) -> List[Permission]:
        """Permissions granted directly to the key"""
        pass

    @abstractmethod
    async def has_permission(
        self, api_key_id: UUID, resource_type: str, action: str
    ) -> bool:
        """True if the key holds the (resource_type, action) permission"""
        pass
