from abc import ABC, abstractmethod
from typing import List, Optional, Tuple
from uuid import UUID

from bastion.domain.entities import Permission, Role, UserRoleGrant
from bastion.domain.principal import GlobalScope, TenantScope


class IRoleRepository(ABC):
    """Role, permission and user grant repository interface - application layer"""

    @abstractmethod
    async def get_by_name(self, name: str) -> Optional[Role]:
        """Get role by unique name"""
        pass

    @abstractmethod
    async def list_roles(self) -> List[Role]:
        """All roles ordered by role_type, name"""
        pass

    @abstractmethod
    async def create(self, role: Role) -> Role:
        """Create a new role"""
        pass

    @abstractmethod
    async def get_permission(
        self, resource_type: str, action: str
    ) -> Optional[Permission]:
        """Get permission by its (resource_type, action) pair"""
        pass

    @abstractmethod
    async def get_permission_by_id(self, permission_id: UUID) -> Optional[Permission]:
        """Get permission by ID"""
        pass

    @abstractmethod
    async def create_permission(self, permission: Permission) -> Permission:
        """Create a new permission"""
        pass

    @abstractmethod
    async def add_permission_to_role(self, role_id: UUID, permission_id: UUID) -> bool:
        """Attach a permission to a role. Returns False if already attached."""
        pass

    @abstractmethod
    async def get_role_permissions(self, role_id: UUID) -> List[Permission]:
        """Permissions attached to a role"""
        pass

    @abstractmethod
    async def assign_to_user(
        self,
        user_id: UUID,
        role_id: UUID,
        scope: GlobalScope | TenantScope,
        granted_by: Optional[UUID],
    ) -> bool:
        """
        Grant a role to a user within a scope.

        Conflict-ignore: returns False when the (user, role, scope) grant
        already exists, without touching it.
        """
        pass

    @abstractmethod
    async def revoke_from_user(
        self, user_id: UUID, role_id: UUID, scope: GlobalScope | TenantScope
    ) -> bool:
        """Delete exactly the (user, role, scope) grant. Returns True if it existed."""
        pass

    @abstractmethod
    async def get_user_grants(
        self, user_id: UUID, scope: GlobalScope | TenantScope
    ) -> List[Tuple[UserRoleGrant, Role]]:
        """Grants visible under scope (tenant fallback applied), with their roles"""
        pass

    @abstractmethod
    async def get_user_permissions(
        self, user_id: UUID, scope: GlobalScope | TenantScope
    ) -> List[Permission]:
        """Distinct permissions reachable under scope (tenant fallback applied)"""
        pass

    @abstractmethod
    async def user_has_permission(
        self,
        user_id: UUID,
        scope: GlobalScope | TenantScope,
        resource_type: str,
        action: str,
    ) -> bool:
        """True if a visible grant leads to the (resource_type, action) permission"""
        pass
