from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import SQLModel

from .error import ClientError, ServerError
import logging

logger = logging.getLogger(__name__)


async def handle_client_error(request: Request, exc: ClientError):
    error_dict = {"code": exc.base_error.code, "message": exc.base_error.message}
    logger.warning(f"Client error: {error_dict}")
    return JSONResponse(status_code=exc.status_code, content={"error": error_dict})


async def handle_server_error(request: Request, exc: ServerError):
    error_dict = {"code": exc.base_error.code, "message": "Internal server error"}
    logger.error(f"Server error: {exc.base_error.code}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content={"error": error_dict}
    )


async def handle_storage_error(request: Request, exc: SQLAlchemyError):
    # Storage detail stays in the log
    logger.error(f"Storage failure on {request.method} {request.url.path}: {exc}")
    error_dict = {"code": "STORAGE_FAILURE", "message": "Internal server error"}
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content={"error": error_dict}
    )


def create_app(ApplicationConfig) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        from bastion.app.use_cases.rbac import SeedBuiltinRolesUseCase
        from bastion.depends import AsyncSessionLocal, engine
        from bastion.adapter.services.unit_of_work import SqlAlchemyUnitOfWork

        if ApplicationConfig.AUTO_CREATE_TABLES:
            async with engine.begin() as conn:
                await conn.run_sync(SQLModel.metadata.create_all)

        if ApplicationConfig.SEED_BUILTIN_ROLES:
            async with AsyncSessionLocal() as session:
                await SeedBuiltinRolesUseCase(SqlAlchemyUnitOfWork(session)).execute()

        yield
        await engine.dispose()

    app = FastAPI(title="Bastion", version="0.1.0", lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=ApplicationConfig.CORS_ORIGINS,
        allow_credentials=ApplicationConfig.CORS_ALLOW_CREDENTIALS,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    from bastion.api.routes import (
        api_keys,
        auth,
        authz,
        health_check,
        roles,
        service_accounts,
        user,
    )

    app.include_router(health_check.router, tags=["Health"])
    app.include_router(auth.router, tags=["Authentication"])
    app.include_router(user.router, tags=["User"])
    app.include_router(roles.router, tags=["Roles"])
    app.include_router(authz.router, tags=["Authorization"])
    app.include_router(service_accounts.router, tags=["Service Accounts"])
    app.include_router(api_keys.router, tags=["API Keys"])

    app.add_exception_handler(ClientError, handle_client_error)
    app.add_exception_handler(ServerError, handle_server_error)
    app.add_exception_handler(SQLAlchemyError, handle_storage_error)

    return app
