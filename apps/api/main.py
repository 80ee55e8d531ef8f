"""api entrypoint and HTTP route wiring."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncEngine

from leaderboard_service.application.ports.user_repository_port import BackendUnavailableError
from leaderboard_service.application.services.account_service import (
    DEFAULT_LEADERBOARD_LIMIT,
    AccountService,
)
from leaderboard_service.config.settings import load_settings
from leaderboard_service.infrastructure.db.session import create_engine, create_session_factory
from leaderboard_service.infrastructure.db.user_repository import SqlAlchemyUserRepository
from leaderboard_service.infrastructure.http.account_router import build_account_router
from leaderboard_service.infrastructure.logging import configure_logging
from leaderboard_service.infrastructure.security.password_hasher import Pbkdf2PasswordHasher

API_HOST = "0.0.0.0"
API_PORT = 8000
logger = logging.getLogger(__name__)


def build_account_service(
    engine: AsyncEngine,
    *,
    password_hash_iterations: int | None = None,
    default_leaderboard_limit: int = DEFAULT_LEADERBOARD_LIMIT,
) -> AccountService:
    """Build account service with SQLAlchemy-backed dependencies."""

    session_factory = create_session_factory(engine=engine)
    hasher = (
        Pbkdf2PasswordHasher()
        if password_hash_iterations is None
        else Pbkdf2PasswordHasher(iterations=password_hash_iterations)
    )
    return AccountService(
        users=SqlAlchemyUserRepository(session_factory),
        password_hasher=hasher,
        default_leaderboard_limit=default_leaderboard_limit,
    )


def create_app(
    *,
    account_service: AccountService | None = None,
    database_url: str | None = None,
    default_leaderboard_limit: int | None = None,
    password_hash_iterations: int | None = None,
) -> FastAPI:
    """Create FastAPI app exposing account and leaderboard routes.

    The engine is created once here and shared by every request; it is
    disposed when the application shuts down.
    """

    engine: AsyncEngine | None = None
    should_load_settings = default_leaderboard_limit is None or (
        account_service is None and database_url is None
    )
    if should_load_settings:
        settings = load_settings()
        configure_logging(level=settings.log_level)
        if database_url is None:
            database_url = settings.database_url
        if default_leaderboard_limit is None:
            default_leaderboard_limit = settings.leaderboard_default_limit
        if password_hash_iterations is None:
            password_hash_iterations = settings.password_hash_iterations

    assert default_leaderboard_limit is not None
    if account_service is None:
        assert database_url is not None
        engine = create_engine(database_url)
        account_service = build_account_service(
            engine,
            password_hash_iterations=password_hash_iterations,
            default_leaderboard_limit=default_leaderboard_limit,
        )

    @asynccontextmanager
    async def lifespan(_: FastAPI) -> AsyncIterator[None]:
        logger.info("api_startup")
        yield
        if engine is not None:
            await engine.dispose()
        logger.info("api_shutdown")

    app = FastAPI(lifespan=lifespan)
    app.include_router(
        build_account_router(
            account_service=account_service,
            default_leaderboard_limit=default_leaderboard_limit,
        )
    )

    @app.exception_handler(BackendUnavailableError)
    async def backend_unavailable_handler(
        request: Request,
        exc: BackendUnavailableError,
    ) -> JSONResponse:
        logger.error("api_backend_unavailable path=%s error=%s", request.url.path, exc)
        return JSONResponse(status_code=503, content={"detail": "backend unavailable"})

    return app


def run_asgi_server(*, host: str = API_HOST, port: int = API_PORT) -> None:
    """Run api as a long-lived ASGI process using application factory mode."""

    uvicorn.run(
        "apps.api.main:create_app",
        host=host,
        port=port,
        factory=True,
    )


def main() -> None:
    """Run api runtime process."""

    run_asgi_server()


if __name__ == "__main__":
    main()
