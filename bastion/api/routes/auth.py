from fastapi import APIRouter, Depends, Form, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel, EmailStr, Field

from bastion.api.error import ServerError, unauthorized
from bastion.app.services.auth_config import AuthConfig
from bastion.app.services.secret_codec import SecretCodec
from bastion.app.services.token_issuer import TokenIssuer
from bastion.app.services.unit_of_work import UnitOfWork
from bastion.app.use_cases.auth import (
    LoginResponse,
    LoginUseCase,
    LogoutResponse,
    LogoutUseCase,
    RefreshTokenResponse,
    RefreshTokenUseCase,
)
from bastion.app.use_cases.service_accounts import (
    ClientCredentialsResponse,
    ClientCredentialsUseCase,
)
from bastion.depends import (
    get_auth_config,
    get_current_user,
    get_secret_codec,
    get_token_issuer,
    get_unit_of_work,
)
from bastion.domain.principal import HumanPrincipal

router = APIRouter(prefix="/auth", tags=["Authentication"])

# Credential and token failures; anything else is an internal error
UNAUTHORIZED_CODES = {
    "INVALID_CREDENTIALS",
    "PRINCIPAL_DISABLED",
    "INVALID_TOKEN",
}


class LoginRequest(BaseModel):
    """
    Login HTTP request payload

    Validates incoming login request.
    """

    email: EmailStr = Field(..., description="User email address")
    password: str = Field(..., description="User password")


@router.post("/login", status_code=status.HTTP_200_OK, response_model=LoginResponse)
async def login(
    request: LoginRequest,
    uow: UnitOfWork = Depends(get_unit_of_work),
    codec: SecretCodec = Depends(get_secret_codec),
    issuer: TokenIssuer = Depends(get_token_issuer),
    config: AuthConfig = Depends(get_auth_config),
):
    """
    User Login

    Returns a short-lived access token and a refresh token bound to a new
    server-side session.

    Raises:
        - 401 Unauthorized: Unknown email, wrong password or disabled user
        - 500 Internal Server Error: Server error
    """
    use_case = LoginUseCase(uow, codec, issuer, config)
    result = await use_case.execute(request.email, request.password)

    if result.is_err():
        if result.error.code in UNAUTHORIZED_CODES:
            raise unauthorized()
        raise ServerError(result.error)

    return result.value


class RefreshTokenRequest(BaseModel):
    refresh_token: str = Field(..., description="Refresh token from login")


@router.post(
    "/refresh", status_code=status.HTTP_200_OK, response_model=RefreshTokenResponse
)
async def refresh_token(
    request: RefreshTokenRequest,
    uow: UnitOfWork = Depends(get_unit_of_work),
    codec: SecretCodec = Depends(get_secret_codec),
    issuer: TokenIssuer = Depends(get_token_issuer),
    config: AuthConfig = Depends(get_auth_config),
):
    """
    Refresh Access Token

    The refresh token itself is not rotated.

    Raises:
        - 401 Unauthorized: Unknown, revoked or expired refresh token
        - 500 Internal Server Error: Server error
    """
    use_case = RefreshTokenUseCase(uow, codec, issuer, config)
    result = await use_case.execute(request.refresh_token)

    if result.is_err():
        if result.error.code in UNAUTHORIZED_CODES:
            raise unauthorized()
        raise ServerError(result.error)

    return result.value


@router.post("/logout", status_code=status.HTTP_200_OK, response_model=LogoutResponse)
async def logout(
    current_user: HumanPrincipal = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Logout from every device

    Revokes all refresh sessions of the caller. Access tokens already issued
    remain valid until they expire.
    """
    result = await LogoutUseCase(uow).execute(current_user.principal_id)

    if result.is_err():
        raise ServerError(result.error)

    return result.value


@router.post(
    "/token", status_code=status.HTTP_200_OK, response_model=ClientCredentialsResponse
)
async def token(
    grant_type: str = Form(...),
    client_id: str = Form(...),
    client_secret: str = Form(...),
    uow: UnitOfWork = Depends(get_unit_of_work),
    codec: SecretCodec = Depends(get_secret_codec),
    issuer: TokenIssuer = Depends(get_token_issuer),
):
    """
    OAuth2 client-credentials exchange for service accounts

    Errors use the OAuth2 body shape {"error": "<code>"}.
    """
    use_case = ClientCredentialsUseCase(uow, codec, issuer)
    result = await use_case.execute(grant_type, client_id, client_secret)

    if result.is_err():
        if result.error.code == "UNSUPPORTED_GRANT_TYPE":
            return JSONResponse(
                status_code=status.HTTP_400_BAD_REQUEST,
                content={"error": "unsupported_grant_type"},
            )
        if result.error.code == "INVALID_CLIENT":
            return JSONResponse(
                status_code=status.HTTP_401_UNAUTHORIZED,
                content={"error": "invalid_client"},
            )
        raise ServerError(result.error)

    return result.value
