"""
Authenticate API Key Use Case

Verifies a presented "<prefix>.<secret>" key.
"""

import asyncio
import logging

from sqlalchemy.exc import SQLAlchemyError

from bastion.app.services.secret_codec import SecretCodec, SecretCodecError
from bastion.app.services.unit_of_work import UnitOfWork
from bastion.domain.base import utcnow
from bastion.libs.result import Error, Result, Return

from .dtos import AuthenticatedApiKey
from .key_format import split_api_key

logger = logging.getLogger(__name__)


class AuthenticateApiKeyUseCase:
    """
    Use case for API key authentication.

    Business Rules:
    - Checks run in a fixed order: malformed, not found, disabled, expired,
      secret mismatch
    - An unknown prefix still costs one bcrypt verification
    - Disabled or expired keys fail even when the secret is correct
    - last_used_at is recorded best-effort; a failed write does not fail
      authentication
    """

    def __init__(self, uow: UnitOfWork, codec: SecretCodec):
        self.uow = uow
        self.codec = codec

    async def execute(self, presented_key: str) -> Result[AuthenticatedApiKey]:
        parts = split_api_key(presented_key)
        if parts is None:
            return Return.err(Error("MALFORMED_KEY", "Invalid API key format"))
        prefix, secret = parts

        async with self.uow:
            api_key = await self.uow.api_keys.get_by_prefix(prefix)

            try:
                if api_key is None:
                    await asyncio.to_thread(self.codec.verify_dummy, secret)
                    return Return.err(Error("KEY_NOT_FOUND", "API key not found"))

                if not api_key.enabled:
                    return Return.err(Error("KEY_DISABLED", "API key is disabled"))

                now = utcnow()
                if api_key.expires_at is not None and api_key.expires_at <= now:
                    return Return.err(Error("KEY_EXPIRED", "API key has expired"))

                if not await asyncio.to_thread(
                    self.codec.verify, secret, api_key.key_secret_hash
                ):
                    return Return.err(Error("SECRET_MISMATCH", "Invalid API key"))
            except SecretCodecError as exc:
                logger.error(f"API key verification failed for {prefix}: {exc}")
                return Return.err(Error("INTERNAL_ERROR", "Credential check failed"))

            authenticated = AuthenticatedApiKey(
                id=api_key.id,
                name=api_key.name,
                key_prefix=api_key.key_prefix,
                tenant_id=api_key.tenant_id,
            )

            try:
                await self.uow.api_keys.touch_last_used(api_key.id, now)
                await self.uow.commit()
            except SQLAlchemyError as exc:
                logger.warning(f"Failed to update last_used_at for API key {prefix}: {exc}")

            return Return.ok(authenticated)
