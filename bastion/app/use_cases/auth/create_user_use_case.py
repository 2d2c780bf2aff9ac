import asyncio

from bastion.app.services.secret_codec import SecretCodec, SecretCodecError
from bastion.app.services.unit_of_work import UnitOfWork
from bastion.domain.entities import AuditEvent, User
from bastion.libs.result import Error, Result, Return

from .dtos import CreateUserCommand, UserInfo


class CreateUserUseCase:
    """
    Create User Use Case

    Business Logic:
    1. Reject an email that is already registered
    2. Hash the password with the secret codec
    3. Create the User (status=active)
    4. Record a user_created audit event
    5. Commit transaction atomically
    """

    def __init__(self, uow: UnitOfWork, codec: SecretCodec):
        self.uow = uow
        self.codec = codec

    async def execute(self, command: CreateUserCommand) -> Result[UserInfo]:
        async with self.uow:
            existing_user = await self.uow.users.get_by_email(command.email)
            if existing_user:
                return Return.err(
                    Error("EMAIL_ALREADY_EXISTS", "Email already registered")
                )

            try:
                password_hash = await asyncio.to_thread(self.codec.hash, command.password)
            except SecretCodecError:
                return Return.err(Error("INTERNAL_ERROR", "Failed to hash password"))

            user = User(
                email=command.email,
                password_hash=password_hash,
                tenant_id=command.tenant_id,
            )
            user = await self.uow.users.create(user)

            await self.uow.audit_events.create(
                AuditEvent(
                    tenant_id=user.tenant_id,
                    principal_id=user.id,
                    action="user_created",
                    event_metadata={"email": user.email},
                )
            )

            await self.uow.commit()

            return Return.ok(
                UserInfo(
                    id=str(user.id),
                    email=user.email,
                    tenant_id=str(user.tenant_id) if user.tenant_id else None,
                    status=user.status.value,
                    created_at=user.created_at,
                )
            )
