"""
Refresh Token Use Case

Exchanges a refresh token for a new access token.
"""

import asyncio
import logging

from bastion.app.services.auth_config import AuthConfig
from bastion.app.services.secret_codec import SecretCodec, SecretCodecError
from bastion.app.services.token_issuer import TokenIssuer
from bastion.app.services.unit_of_work import UnitOfWork
from bastion.domain.base import utcnow
from bastion.domain.entities import AuditEvent
from bastion.libs.result import Error, Result, Return

from .dtos import RefreshTokenResponse

logger = logging.getLogger(__name__)


class RefreshTokenUseCase:
    """
    Use case for refreshing access tokens.

    Business Rules:
    - Only live sessions (not revoked, not expired) are candidates; storage
      filters the rest before the bcrypt comparison loop
    - The refresh token is not rotated; the session's last_activity is bumped
    - A missing or disabled owner fails the same way as an unknown token
    - bcrypt comparisons run in worker threads, so a long scan does not
      stall other requests on the event loop
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

    async def execute(self, refresh_token: str) -> Result[RefreshTokenResponse]:
        """
        Execute refresh token use case.

        Args:
            refresh_token: Refresh token returned by login

        Returns:
            Result with RefreshTokenResponse, or Error(INVALID_TOKEN)
        """
        if not refresh_token:
            return Return.err(Error("INVALID_TOKEN", "Invalid refresh token"))

        async with self.uow:
            now = utcnow()
            candidates = await self.uow.sessions.list_live(now)

            matching_session = None
            try:
                for candidate in candidates:
                    if await asyncio.to_thread(
                        self.codec.verify, refresh_token, candidate.refresh_token_hash
                    ):
                        matching_session = candidate
                        break
            except SecretCodecError as exc:
                logger.error(f"Refresh token verification failed: {exc}")
                return Return.err(Error("INTERNAL_ERROR", "Token check failed"))

            if matching_session is None:
                return Return.err(Error("INVALID_TOKEN", "Invalid refresh token"))

            user = await self.uow.users.get_by_id(matching_session.user_id)
            if user is None or not user.enabled:
                return Return.err(Error("INVALID_TOKEN", "Invalid refresh token"))

            await self.uow.sessions.touch(matching_session.id, now)

            await self.uow.audit_events.create(
                AuditEvent(
                    tenant_id=user.tenant_id,
                    principal_id=user.id,
                    action="token_refresh",
                    event_metadata={"session_id": str(matching_session.id)},
                )
            )

            await self.uow.commit()

            access_token = self.issuer.issue_for_user(user)

            return Return.ok(
                RefreshTokenResponse(
                    access_token=access_token,
                    expires_in=int(self.config.access_token_ttl.total_seconds()),
                )
            )
