"""
Token Issuer

Mints and verifies HS256 bearer tokens (JWT, three base64url segments).
Tokens are stateless: nothing is stored, and the short access TTL bounds
exposure after logout.
"""

from datetime import UTC, datetime, timedelta
from typing import Optional, Union
from uuid import UUID

from jose import jwt
from jose.exceptions import ExpiredSignatureError, JWTClaimsError, JWTError
from pydantic import BaseModel, ValidationError

from bastion.domain.entities import IdentityType, ServiceAccount, User
from bastion.domain.principal import (
    GlobalScope,
    HumanPrincipal,
    ServiceAccountPrincipal,
    TenantScope,
    scope_for,
)
from bastion.libs.result import Error, Result, Return

from .auth_config import AuthConfig


class TokenClaims(BaseModel):
    """Verified bearer token payload"""

    sub: UUID
    identity_type: IdentityType = IdentityType.user
    email: Optional[str] = None
    name: Optional[str] = None
    tenant_id: Optional[UUID] = None
    iat: int
    exp: int

    @property
    def scope(self) -> Union[GlobalScope, TenantScope]:
        return scope_for(self.tenant_id)

    def to_principal(self) -> Union[HumanPrincipal, ServiceAccountPrincipal]:
        if self.identity_type == IdentityType.service_account:
            return ServiceAccountPrincipal(
                principal_id=self.sub, name=self.name, scope=self.scope
            )
        return HumanPrincipal(principal_id=self.sub, email=self.email, scope=self.scope)


class TokenIssuer:
    def __init__(self, config: AuthConfig):
        self.config = config

    def issue(
        self,
        subject: UUID,
        identity_type: IdentityType,
        scope: Union[GlobalScope, TenantScope],
        ttl: timedelta,
        email: Optional[str] = None,
        name: Optional[str] = None,
    ) -> str:
        """
        Issue a signed access token.

        Args:
            subject: Principal ID (sub claim)
            identity_type: Principal kind discriminator
            scope: Tenant scope; global scope omits the tenant_id claim
            ttl: Lifetime from now
            email: Human users only
            name: Service accounts only

        Returns:
            JWT string (configured HMAC algorithm)
        """
        now = datetime.now(UTC)
        payload = {
            "sub": str(subject),
            "identity_type": identity_type.value,
            "iat": now,
            "exp": now + ttl,
        }
        if scope.tenant_id is not None:
            payload["tenant_id"] = str(scope.tenant_id)
        if email is not None:
            payload["email"] = email
        if name is not None:
            payload["name"] = name
        return jwt.encode(
            payload,
            self.config.jwt_secret.get_secret_value(),
            algorithm=self.config.jwt_algorithm,
        )

    def issue_for_user(self, user: User) -> str:
        return self.issue(
            user.id,
            IdentityType.user,
            scope_for(user.tenant_id),
            self.config.access_token_ttl,
            email=user.email,
        )

    def issue_for_service_account(self, account: ServiceAccount) -> str:
        return self.issue(
            account.id,
            IdentityType.service_account,
            scope_for(account.tenant_id),
            self.config.service_account_token_ttl,
            name=account.name,
        )

    def verify(self, token: str) -> Result[TokenClaims]:
        """
        Verify signature, algorithm and expiry.

        Any algorithm other than the configured one is rejected before the
        signature is looked at, including "none" and asymmetric algorithms.
        """
        try:
            header = jwt.get_unverified_header(token)
        except JWTError:
            return Return.err(Error("MALFORMED_TOKEN", "Token is not a valid JWT"))

        if header.get("alg") != self.config.jwt_algorithm:
            return Return.err(
                Error("INVALID_SIGNATURE", "Unexpected token signing algorithm")
            )

        try:
            payload = jwt.decode(
                token,
                self.config.jwt_secret.get_secret_value(),
                algorithms=[self.config.jwt_algorithm],
            )
        except ExpiredSignatureError:
            return Return.err(Error("TOKEN_EXPIRED", "Token has expired"))
        except JWTClaimsError:
            return Return.err(Error("MALFORMED_TOKEN", "Token claims are invalid"))
        except JWTError:
            return Return.err(Error("INVALID_SIGNATURE", "Token signature is invalid"))

        try:
            claims = TokenClaims.model_validate(payload)
        except ValidationError:
            return Return.err(Error("MALFORMED_TOKEN", "Token claims are invalid"))

        return Return.ok(claims)
