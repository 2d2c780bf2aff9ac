import asyncio

from bastion.app.services.secret_codec import SecretCodec, SecretCodecError
from bastion.app.services.unit_of_work import UnitOfWork
from bastion.domain.entities import AuditEvent, ServiceAccount
from bastion.libs.result import Error, Result, Return

from .credentials import generate_client_id, generate_client_secret
from .dtos import (
    CreateServiceAccountCommand,
    CreateServiceAccountResponse,
    ServiceAccountInfo,
)


class CreateServiceAccountUseCase:
    """
    Create Service Account Use Case

    Business Logic:
    1. Resolve initial roles by name (ROLE_NOT_FOUND otherwise)
    2. Generate client_id "sa_<20 chars>" and a 40-char client secret
    3. Store only the secret's hash
    4. Attach roles, record a service_account_created audit event
    5. Return the client secret once
    """

    def __init__(self, uow: UnitOfWork, codec: SecretCodec):
        self.uow = uow
        self.codec = codec

    async def execute(
        self, command: CreateServiceAccountCommand
    ) -> Result[CreateServiceAccountResponse]:
        async with self.uow:
            roles = []
            for role_name in command.role_names:
                role = await self.uow.roles.get_by_name(role_name)
                if role is None:
                    return Return.err(
                        Error("ROLE_NOT_FOUND", f"Role {role_name} not found")
                    )
                roles.append(role)

            client_secret = generate_client_secret()
            try:
                secret_hash = await asyncio.to_thread(self.codec.hash, client_secret)
            except SecretCodecError:
                return Return.err(Error("INTERNAL_ERROR", "Failed to hash client secret"))

            account = ServiceAccount(
                name=command.name,
                description=command.description,
                client_id=generate_client_id(),
                client_secret_hash=secret_hash,
                tenant_id=command.tenant_id,
            )
            account = await self.uow.service_accounts.create(account)

            for role in roles:
                await self.uow.service_accounts.assign_role(account.id, role.id)

            await self.uow.audit_events.create(
                AuditEvent(
                    tenant_id=account.tenant_id,
                    principal_id=account.id,
                    action="service_account_created",
                    event_metadata={
                        "name": account.name,
                        "client_id": account.client_id,
                        "roles": [r.name for r in roles],
                    },
                )
            )

            await self.uow.commit()

            return Return.ok(
                CreateServiceAccountResponse(
                    service_account=ServiceAccountInfo.from_entity(
                        account, roles=sorted(r.name for r in roles)
                    ),
                    client_secret=client_secret,
                )
            )
