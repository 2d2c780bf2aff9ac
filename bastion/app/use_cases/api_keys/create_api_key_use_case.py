import asyncio

from bastion.app.services.secret_codec import SecretCodec, SecretCodecError
from bastion.app.services.unit_of_work import UnitOfWork
from bastion.domain.base import to_naive_utc
from bastion.domain.entities import ApiKey, AuditEvent
from bastion.libs.result import Error, Result, Return

from .dtos import ApiKeyInfo, CreateApiKeyCommand, CreateApiKeyResponse
from .key_format import generate_api_key


class CreateApiKeyUseCase:
    """
    Create API Key Use Case

    Business Logic:
    1. Resolve every requested permission (PERMISSION_NOT_FOUND otherwise)
    2. Generate "bst_<prefix>.<secret>"; only the secret's hash is stored
    3. Create the key and its direct permission edges
    4. Record an api_key_created audit event
    5. Return the full key once
    """

    def __init__(self, uow: UnitOfWork, codec: SecretCodec):
        self.uow = uow
        self.codec = codec

    async def execute(
        self, command: CreateApiKeyCommand
    ) -> Result[CreateApiKeyResponse]:
        async with self.uow:
            for permission_id in command.permission_ids:
                permission = await self.uow.roles.get_permission_by_id(permission_id)
                if permission is None:
                    return Return.err(
                        Error("PERMISSION_NOT_FOUND", f"Permission {permission_id} not found")
                    )

            prefix, secret, full_key = generate_api_key()
            try:
                secret_hash = await asyncio.to_thread(self.codec.hash, secret)
            except SecretCodecError:
                return Return.err(Error("INTERNAL_ERROR", "Failed to hash API key"))

            api_key = ApiKey(
                name=command.name,
                description=command.description,
                key_prefix=prefix,
                key_secret_hash=secret_hash,
                tenant_id=command.tenant_id,
                expires_at=to_naive_utc(command.expires_at),
            )
            api_key = await self.uow.api_keys.create(api_key)

            for permission_id in command.permission_ids:
                await self.uow.api_keys.add_permission(api_key.id, permission_id)

            await self.uow.audit_events.create(
                AuditEvent(
                    tenant_id=api_key.tenant_id,
                    principal_id=api_key.id,
                    action="api_key_created",
                    event_metadata={"name": api_key.name, "key_prefix": prefix},
                )
            )

            await self.uow.commit()

            return Return.ok(
                CreateApiKeyResponse(api_key=ApiKeyInfo.from_entity(api_key), key=full_key)
            )
