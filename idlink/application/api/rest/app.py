import asyncio
import logging
from contextlib import asynccontextmanager

import logfire
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from idlink.application.api.v1.errors import map_idlink_error
from idlink.application.api.v1.routes import health, link
from idlink.application.di import create_container
from idlink.config import Config, configure_logging
from idlink.domain.shared.error import IdLinkError
from idlink.infrastructure.event.dispatcher import AsyncioBackgroundDispatcher
from idlink.infrastructure.persistence.migrate import run_migrations
from idlink.util.di.fastapi import setup_dishka

logger = logging.getLogger(__name__)

# Seconds to wait for in-flight welcome mail at shutdown
SHUTDOWN_DRAIN_TIMEOUT = 10.0


@asynccontextmanager
async def lifespan(app: FastAPI):
    container = app.state.dishka_container
    config = await container.get(Config)

    if config.database.auto_migrate:
        await asyncio.to_thread(run_migrations, config.database.url)

    dispatcher = await container.get(AsyncioBackgroundDispatcher)

    yield

    # Mail tasks use the shared HTTP client, so finish them before it closes
    await dispatcher.drain(timeout=SHUTDOWN_DRAIN_TIMEOUT)
    await container.close()


def create_app(config: Config | None = None) -> FastAPI:
    """Create FastAPI application."""
    # Pydantic Settings populates from env vars at runtime
    config = config or Config()  # type: ignore[call-arg]

    # Configure logging early
    configure_logging(config.logging)
    logger.info("Starting idlink server: %s v%s", config.server.name, config.server.version)

    app_instance = FastAPI(
        title=config.server.name,
        description=config.server.description,
        version=config.server.version,
        lifespan=lifespan,
    )

    # Instrument FastAPI for automatic tracing of HTTP requests
    logfire.instrument_httpx()
    logfire.instrument_fastapi(app_instance)

    # Setup dependency injection
    container = create_container(config)
    setup_dishka(container, app_instance)

    # Register v1 routes with /api/v1 prefix
    app_instance.include_router(health.router, prefix="/api/v1")
    app_instance.include_router(link.router, prefix="/api/v1")

    add_error_handlers(app_instance)

    return app_instance


def add_error_handlers(app_instance: FastAPI) -> None:
    """Register the global idlink and fallback exception handlers."""

    # Global idlink error handler - maps domain and infrastructure errors to HTTP responses
    @app_instance.exception_handler(IdLinkError)
    async def idlink_error_handler(request: Request, exc: IdLinkError):
        http_exc = map_idlink_error(exc)
        return JSONResponse(
            status_code=http_exc.status_code,
            content=http_exc.detail,
            headers=http_exc.headers,
        )

    # Global exception handler - logs all unhandled exceptions
    @app_instance.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception(
            "Unhandled exception on %s %s",
            request.method,
            request.url.path,
        )
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error"},
        )
