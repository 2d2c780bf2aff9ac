from uuid import UUID

from bastion.app.services.unit_of_work import UnitOfWork
from bastion.domain.base import utcnow
from bastion.domain.entities import AuditEvent
from bastion.libs.result import Result, Return

from .dtos import LogoutResponse


class LogoutUseCase:
    """
    Use case for logging a user out of every device.

    Business Rules:
    - Revokes all live refresh sessions of the user
    - Idempotent: a second logout revokes nothing and still succeeds
    - Issued access tokens stay valid until they expire
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(self, user_id: UUID) -> Result[LogoutResponse]:
        async with self.uow:
            revoked_count = await self.uow.sessions.revoke_all_by_user_id(
                user_id, utcnow()
            )

            await self.uow.audit_events.create(
                AuditEvent(
                    principal_id=user_id,
                    action="logout",
                    event_metadata={"revoked_count": revoked_count},
                )
            )

            await self.uow.commit()

            return Return.ok(LogoutResponse(revoked_count=revoked_count))
