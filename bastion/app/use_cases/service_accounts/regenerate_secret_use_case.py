import asyncio
from typing import Optional
from uuid import UUID

from bastion.app.services.secret_codec import SecretCodec, SecretCodecError
from bastion.app.services.unit_of_work import UnitOfWork
from bastion.domain.base import utcnow
from bastion.domain.entities import AuditEvent
from bastion.domain.principal import GlobalScope, TenantScope, owned_visible_from
from bastion.libs.result import Error, Result, Return

from .credentials import generate_client_secret
from .dtos import RegenerateSecretResponse


class RegenerateSecretUseCase:
    """
    Replace a service account's client secret.

    The new hash overwrites the old one in a single statement, so the
    previous secret stops working as soon as this commits.
    """

    def __init__(self, uow: UnitOfWork, codec: SecretCodec):
        self.uow = uow
        self.codec = codec

    async def execute(
        self,
        account_id: UUID,
        scope: Optional[GlobalScope | TenantScope] = None,
        requested_by: Optional[UUID] = None,
    ) -> Result[RegenerateSecretResponse]:
        async with self.uow:
            account = await self.uow.service_accounts.get_by_id(account_id)
            if account is None or (
                scope is not None and not owned_visible_from(account.tenant_id, scope)
            ):
                return Return.err(
                    Error("SERVICE_ACCOUNT_NOT_FOUND", "Service account not found")
                )

            client_secret = generate_client_secret()
            try:
                secret_hash = await asyncio.to_thread(self.codec.hash, client_secret)
            except SecretCodecError:
                return Return.err(Error("INTERNAL_ERROR", "Failed to hash client secret"))

            await self.uow.service_accounts.update_secret_hash(
                account.id, secret_hash, utcnow()
            )

            await self.uow.audit_events.create(
                AuditEvent(
                    tenant_id=account.tenant_id,
                    principal_id=requested_by,
                    action="service_account_secret_regenerated",
                    event_metadata={"client_id": account.client_id},
                )
            )

            await self.uow.commit()

            return Return.ok(
                RegenerateSecretResponse(
                    client_id=account.client_id, client_secret=client_secret
                )
            )
