from datetime import timedelta
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, SecretStr


class AuthConfig(BaseModel):
    """
    Immutable authentication settings.

    Built once at process start from ApplicationConfig and passed into the
    secret codec, token issuer and use cases at construction.
    """

    model_config = ConfigDict(frozen=True)

    jwt_secret: SecretStr
    jwt_algorithm: Literal["HS256"] = "HS256"
    access_token_ttl: timedelta = timedelta(minutes=15)
    refresh_token_ttl: timedelta = timedelta(days=30)
    service_account_token_ttl: timedelta = timedelta(minutes=15)
    bcrypt_rounds: int = Field(default=12, ge=4, le=31)
    max_sessions_per_user: int = Field(default=10, ge=1)

    @classmethod
    def from_application_config(cls, config) -> "AuthConfig":
        return cls(
            jwt_secret=config.JWT_SECRET,
            access_token_ttl=timedelta(minutes=config.ACCESS_TOKEN_TTL_MINUTES),
            refresh_token_ttl=timedelta(days=config.REFRESH_TOKEN_TTL_DAYS),
            service_account_token_ttl=timedelta(
                minutes=config.SERVICE_ACCOUNT_TOKEN_TTL_MINUTES
            ),
            bcrypt_rounds=config.BCRYPT_ROUNDS,
            max_sessions_per_user=config.MAX_SESSIONS_PER_USER,
        )
