"""
Client Credentials Use Case

OAuth2 client-credentials exchange for service accounts.
"""

import asyncio
import logging

from bastion.app.services.secret_codec import SecretCodec, SecretCodecError
from bastion.app.services.token_issuer import TokenIssuer
from bastion.app.services.unit_of_work import UnitOfWork
from bastion.domain.base import utcnow
from bastion.libs.result import Error, Result, Return

from .dtos import ClientCredentialsResponse

logger = logging.getLogger(__name__)

CLIENT_CREDENTIALS_GRANT = "client_credentials"


class ClientCredentialsUseCase:
    """
    Use case for exchanging client credentials for an access token.

    Business Rules:
    - Only grant_type=client_credentials is supported
    - Unknown client, disabled account and wrong secret are reported
      identically as INVALID_CLIENT
    - Tokens carry identity_type=service_account and the service-account TTL
    """

    def __init__(self, uow: UnitOfWork, codec: SecretCodec, issuer: TokenIssuer):
        self.uow = uow
        self.codec = codec
        self.issuer = issuer

    async def execute(
        self, grant_type: str, client_id: str, client_secret: str
    ) -> Result[ClientCredentialsResponse]:
        if grant_type != CLIENT_CREDENTIALS_GRANT:
            return Return.err(
                Error("UNSUPPORTED_GRANT_TYPE", f"Unsupported grant type: {grant_type}")
            )

        invalid_client = Error("INVALID_CLIENT", "Invalid client credentials")

        async with self.uow:
            account = await self.uow.service_accounts.get_by_client_id(client_id)

            try:
                if account is None:
                    await asyncio.to_thread(self.codec.verify_dummy, client_secret)
                    return Return.err(invalid_client)

                secret_valid = await asyncio.to_thread(
                    self.codec.verify, client_secret, account.client_secret_hash
                )
            except SecretCodecError as exc:
                logger.error(f"Client secret verification failed: {exc}")
                return Return.err(Error("INTERNAL_ERROR", "Credential check failed"))

            if not secret_valid or not account.enabled:
                return Return.err(invalid_client)

            await self.uow.service_accounts.touch_last_used(account.id, utcnow())
            await self.uow.commit()

            access_token = self.issuer.issue_for_service_account(account)
            ttl = self.issuer.config.service_account_token_ttl

            return Return.ok(
                ClientCredentialsResponse(
                    access_token=access_token,
                    expires_in=int(ttl.total_seconds()),
                )
            )
