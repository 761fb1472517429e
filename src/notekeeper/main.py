"""FastAPI application factory.

Learn: App factory pattern — create_app() returns a configured FastAPI
instance. Everything process-wide (settings, the database handle, the
token service) is built here from one Settings object and hung on
app.state; dependencies read it back off the request. Lifespan only
logs and disposes the engine on shutdown.
"""

from contextlib import asynccontextmanager
from typing import Optional

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from notekeeper import __version__
from notekeeper.api import api_router
from notekeeper.auth.tokens import TokenService
from notekeeper.config import Settings, get_settings
from notekeeper.db.engine import Database
from notekeeper.errors import NotekeeperError, StorageFailure
from notekeeper.logging_config import configure_logging

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown lifecycle.

    Learn: FastAPI lifespan replaces on_event("startup") / on_event("shutdown").
    Anything before `yield` runs at startup, after `yield` runs at shutdown.
    """
    settings: Settings = app.state.settings
    logger.info(
        "notekeeper.starting",
        version=__version__,
        environment=settings.environment,
        port=settings.port,
    )

    yield

    logger.info("notekeeper.shutdown")
    await app.state.database.dispose()


def register_exception_handlers(app: FastAPI) -> None:
    """Map application and storage errors to JSON responses."""

    @app.exception_handler(NotekeeperError)
    async def handle_app_error(request: Request, exc: NotekeeperError):
        if exc.status_code >= 500:
            logger.error("request.failed", error=type(exc).__name__)
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})

    @app.exception_handler(SQLAlchemyError)
    async def handle_storage_error(request: Request, exc: SQLAlchemyError):
        # Cause goes to the log only; the client gets a generic 500.
        logger.error("storage.error", path=request.url.path, exc_info=exc)
        failure = StorageFailure()
        return JSONResponse(
            status_code=failure.status_code, content={"detail": failure.message}
        )


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build and return the FastAPI application."""
    settings = settings or get_settings()
    configure_logging(settings.log_level, json=settings.log_json)

    app = FastAPI(
        title="Notekeeper",
        description="Personal notes behind a signed-token gate",
        version=__version__,
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.database = Database(settings.database_url, echo=settings.database_echo)
    app.state.token_service = TokenService(
        secret=settings.jwt_secret,
        algorithm=settings.jwt_algorithm,
        expire_minutes=settings.access_token_expire_minutes,
    )

    # ── Middleware stack ──────────────────────────────────────
    # Note: Starlette middleware executes in reverse order of registration.
    # Request flow: RequestId → CORS → handler

    from notekeeper.middleware.request_id import RequestIdMiddleware

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestIdMiddleware)

    register_exception_handlers(app)

    # Mount API routes
    app.include_router(api_router)

    return app


def build_default_app() -> FastAPI:
    """Entry point for uvicorn: `uvicorn notekeeper.main:build_default_app --factory`."""
    return create_app()
