"""
FastAPI Application Entry Point.

This is the main entry point for the Notes API.
"""

import asyncio
import os
import signal
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from notes_api.api import router as api_router
from notes_api.core.config import get_app_config
from notes_api.core.database import connect_with_retry, dispose_engine
from notes_api.core.dependencies import OptionalUser
from notes_api.core.exception_handlers import register_exception_handlers
from notes_api.core.logging import get_logger, setup_logging
from notes_api.core.middleware import RequestContextMiddleware, RequestTimeoutMiddleware

logger = get_logger(__name__)

_app: FastAPI | None = None


def handle_unhandled_async_error(
    loop: asyncio.AbstractEventLoop,
    context: dict[str, Any],
) -> None:
    """
    Event loop exception handler for failures no request handler owns.

    Logs the failure and asks the server to shut down with SIGTERM, so
    the lifespan shutdown still disposes of the database engine.
    """
    exc = context.get("exception")
    logger.critical(
        "Unhandled async failure, shutting down",
        extra={
            "message": context.get("message"),
            "exception_type": type(exc).__name__ if exc else None,
        },
        exc_info=exc,
    )
    os.kill(os.getpid(), signal.SIGTERM)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    app_config = get_app_config()
    setup_logging()

    if app_config.features.security_startup_checks_enabled:
        from notes_api.core.startup_checks import run_startup_checks
        run_startup_checks()

    retry = app_config.database.connect_retry
    try:
        await connect_with_retry(retry.attempts, retry.delay_seconds)
    except Exception as e:
        logger.critical("Database unreachable at startup", extra={"error": str(e)})
        await dispose_engine()
        raise

    loop = asyncio.get_running_loop()
    previous_handler = loop.get_exception_handler()
    loop.set_exception_handler(handle_unhandled_async_error)

    logger.info(
        "Application starting",
        extra={
            "app_name": app_config.application.name,
            "env": app_config.application.environment,
        },
    )
    try:
        yield
    finally:
        loop.set_exception_handler(previous_handler)
        await dispose_engine()
        logger.info("Application shutting down")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app_config = get_app_config()
    app_settings = app_config.application

    app = FastAPI(
        title=app_settings.name,
        description=app_settings.description,
        version=app_settings.version,
        docs_url="/docs" if app_settings.docs_enabled else None,
        redoc_url="/redoc" if app_settings.docs_enabled else None,
        openapi_url="/openapi.json" if app_settings.docs_enabled else None,
        lifespan=lifespan,
    )

    # Last added runs first: CORS, then request context, then the timeout
    app.add_middleware(
        RequestTimeoutMiddleware,
        timeout_seconds=app_settings.timeouts.request,
    )
    app.add_middleware(
        RequestContextMiddleware,
        log_requests=app_config.features.api_request_logging,
    )

    cors_origins = app_settings.cors.origins
    if cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=cors_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    register_exception_handlers(app)

    app.include_router(api_router, prefix="/api")

    @app.get("/", tags=["info"])
    async def root(user: OptionalUser) -> dict[str, Any]:
        """API info. Names the caller when a valid access token is sent."""
        info: dict[str, Any] = {
            "message": app_settings.name,
            "version": app_settings.version,
            "endpoints": {
                "health": "/api/health",
                "notes": "/api/notes",
                "auth": "/api/auth",
            },
            "environment": app_settings.environment,
        }
        if user is not None:
            info["user"] = user.get("username")
        return info

    return app


def get_app() -> FastAPI:
    """
    Get the application instance (lazy initialization).

    This function creates the app on first call and caches it.
    Use this instead of importing `app` directly to avoid
    import-time configuration errors.
    """
    global _app
    if _app is None:
        _app = create_app()
    return _app


# For uvicorn: `uvicorn notes_api.main:app`
def __getattr__(name: str) -> FastAPI:
    """Support lazy access to `app` for uvicorn compatibility."""
    if name == "app":
        return get_app()
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
