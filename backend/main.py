"""
Application factory for FastAPI.

This module provides a factory function for creating FastAPI application instances.
The factory pattern allows for:
- Easy testing with custom settings
- Multiple app instances with different configurations
- Clear separation of app creation from route definitions

Usage:
    from backend.main import create_app
    from backend.settings import Settings

    # Default app (uses get_settings())
    app = create_app()

    # Test app with custom settings
    test_settings = Settings(environment="test", database_url="sqlite://", _env_file=None)
    test_app = create_app(settings=test_settings)
"""

import logging
from pathlib import Path
from typing import Optional

import sentry_sdk
import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from backend.services.completion_client import CompletionClientFactory
from backend.settings import Settings, get_settings
from infrastructure.db.database import Database

logger = logging.getLogger(__name__)

LOG_FORMAT = "[%(asctime)s] %(levelname)s %(name)s - %(message)s"


# ---------------------------------------------------------------------------
# Application Factory
# ---------------------------------------------------------------------------


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Create and configure a FastAPI application instance.

    Args:
        settings: Optional Settings instance. If not provided, uses get_settings()
                  which loads from environment variables.

    Returns:
        Configured FastAPI application instance.
    """
    if settings is None:
        settings = get_settings()

    _configure_logging(settings)

    # Initialize Sentry for error tracking
    _init_sentry(settings)

    app = FastAPI(
        title="Chat Session API",
        description="Multi-session chat transcripts backed by an LLM completion API",
        version="1.0.0",
    )

    # Shared state for dependency providers
    app.state.settings = settings
    app.state.database = Database(settings.database_url)
    app.state.completion_gateway = CompletionClientFactory.create(settings)

    _configure_cors(app, settings)
    _register_error_handlers(app)
    _include_routers(app)
    _mount_static(app, settings)
    _register_lifecycle(app, settings)

    return app


def _configure_logging(settings: Settings) -> None:
    logging.basicConfig(level=settings.log_level, format=LOG_FORMAT)


def _init_sentry(settings: Settings) -> None:
    """Initialize Sentry SDK if DSN is configured (never under test)."""
    if settings.sentry_dsn and not settings.is_test:
        sentry_sdk.init(
            dsn=settings.sentry_dsn,
            environment=settings.environment,
            traces_sample_rate=0.1,
        )
        logger.info("Sentry initialized for chat-api")


def _configure_cors(app: FastAPI, settings: Settings) -> None:
    """Configure CORS middleware for the application."""
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


def _register_error_handlers(app: FastAPI) -> None:
    """Keep the {"error": ...} body shape for malformed requests too."""

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        logger.info("Rejected malformed request to %s: %s", request.url.path, exc.errors())
        return JSONResponse(status_code=400, content={"error": "Invalid request body"})


def _include_routers(app: FastAPI) -> None:
    """Include all API routers in the application."""
    from api.routers import chats_router, health_router

    # Health router (no prefix - /health at root)
    app.include_router(health_router)

    # Chats router (/api/chats/*)
    app.include_router(chats_router)


def _mount_static(app: FastAPI, settings: Settings) -> None:
    """Serve the browser front-end at / when the directory exists."""
    static_dir = Path(settings.static_dir)
    if static_dir.is_dir():
        app.mount("/", StaticFiles(directory=static_dir, html=True), name="static")
        logger.info("Serving static files from %s", static_dir.resolve())


def _register_lifecycle(app: FastAPI, settings: Settings) -> None:
    """Open the session store at startup and close it at shutdown."""

    @app.on_event("startup")
    def startup_event():
        app.state.database.open()
        logger.info("Chat API ready on http://localhost:%d", settings.port)

    @app.on_event("shutdown")
    def shutdown_event():
        app.state.database.close()
        logger.info("chat-api shutdown complete")


def run() -> None:
    """Console entry point: serve the default app with uvicorn."""
    settings = get_settings()
    uvicorn.run(app, host=settings.host, port=settings.port)


# Default app instance for uvicorn
# This allows: uvicorn backend.main:app --reload
app = create_app()
