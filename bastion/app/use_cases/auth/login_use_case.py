"""
Login Use Case

Handles password authentication and returns an access token plus a
refresh token bound to a new server-side session.
"""

import asyncio
import logging

from bastion.app.services.auth_config import AuthConfig
from bastion.app.services.secret_codec import SecretCodec, SecretCodecError
from bastion.app.services.token_issuer import TokenIssuer
from bastion.app.services.unit_of_work import UnitOfWork
from bastion.domain.base import utcnow
from bastion.domain.entities import AuditEvent, RefreshSession, User
from bastion.libs.result import Error, Result, Return

from .dtos import LoginResponse

logger = logging.getLogger(__name__)


class LoginUseCase:
    """
    Use case for user login and token issuance.

    Business Rules:
    - Unknown email and wrong password return the same error and cost one
      bcrypt verification each
    - Disabled users are rejected after the password check
    - Only the hash of the refresh token is stored
    - A user holds at most max_sessions_per_user live sessions; the oldest
      are revoked to make room
      (a soft cap: the count and the insert are not locked, so concurrent
      logins can briefly leave one session over)
    - Session, last_login_at and audit event commit together
    """

    def __init__(
        self,
        uow: UnitOfWork,
        codec: SecretCodec,
        issuer: TokenIssuer,
        config: AuthConfig,
    ):
        self.uow = uow
        self.codec = codec
        self.issuer = issuer
        self.config = config

    async def execute(self, email: str, password: str) -> Result[LoginResponse]:
        """
        Execute login use case.

        Args:
            email: User email
            password: Plain text password

        Returns:
            Result with LoginResponse, or Error
        """
        async with self.uow:
            user = await self.uow.users.get_by_email(email)

            try:
                if user is None:
                    await asyncio.to_thread(self.codec.verify_dummy, password)
                    return Return.err(
                        Error("INVALID_CREDENTIALS", "Invalid email or password")
                    )

                password_valid = await asyncio.to_thread(
                    self.codec.verify, password, user.password_hash
                )
            except SecretCodecError as exc:
                logger.error(f"Password verification failed: {exc}")
                return Return.err(Error("INTERNAL_ERROR", "Credential check failed"))

            if not password_valid:
                return Return.err(
                    Error("INVALID_CREDENTIALS", "Invalid email or password")
                )

            if not user.enabled:
                return Return.err(
                    Error("PRINCIPAL_DISABLED", "User account is disabled")
                )

            now = utcnow()
            await self._enforce_session_cap(user, now)

            refresh_token = self.codec.generate_random_token(32)
            try:
                refresh_token_hash = await asyncio.to_thread(self.codec.hash, refresh_token)
            except SecretCodecError:
                return Return.err(Error("INTERNAL_ERROR", "Failed to create session"))

            session = RefreshSession(
                user_id=user.id,
                refresh_token_hash=refresh_token_hash,
                created_at=now,
                expires_at=now + self.config.refresh_token_ttl,
            )
            session = await self.uow.sessions.create(session)

            user.last_login_at = now
            user.updated_at = now
            await self.uow.users.update(user)

            await self.uow.audit_events.create(
                AuditEvent(
                    tenant_id=user.tenant_id,
                    principal_id=user.id,
                    action="login",
                    event_metadata={"session_id": str(session.id)},
                )
            )

            await self.uow.commit()

            access_token = self.issuer.issue_for_user(user)

            return Return.ok(
                LoginResponse(
                    access_token=access_token,
                    refresh_token=refresh_token,
                    expires_in=int(self.config.access_token_ttl.total_seconds()),
                    session_id=str(session.id),
                )
            )

    async def _enforce_session_cap(self, user: User, now) -> None:
        live_sessions = await self.uow.sessions.list_live_by_user_id(user.id, now)
        excess = len(live_sessions) - (self.config.max_sessions_per_user - 1)
        if excess <= 0:
            return

        evicted = [s.id for s in live_sessions[:excess]]
        await self.uow.sessions.revoke_by_ids(evicted, now)
        logger.info(f"Session cap reached for user {user.id}: revoked {len(evicted)} oldest")
