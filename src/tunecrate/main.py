"""FastAPI application factory and server entry point."""

import httpx
import uvicorn
from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from tunecrate import __version__
from tunecrate.api import api_router, register_exception_handlers
from tunecrate.api.routers import health
from tunecrate.config import Settings, get_settings
from tunecrate.infrastructure.lifecycle import lifespan
from tunecrate.infrastructure.observability import RequestLoggingMiddleware


def create_app(
    settings: Settings | None = None,
    object_storage_transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    """Build the application.

    Args:
        settings: Settings to use instead of the cached environment settings
        object_storage_transport: httpx transport for the object storage client
            (tests pass an httpx.MockTransport here)
    """
    settings = settings or get_settings()

    app = FastAPI(
        title="TuneCrate",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.object_storage_transport = object_storage_transport

    app.add_middleware(
        RequestLoggingMiddleware,
        log_request_body=settings.observability.request_body,
    )
    register_exception_handlers(app)

    app.include_router(api_router, prefix="/api")
    app.include_router(health.router, prefix="/health", tags=["Health"])
    # The lifespan creates the directory, it may not exist yet at this point
    app.mount(
        "/uploads",
        StaticFiles(directory=settings.storage.dir, check_dir=False),
        name="uploads",
    )
    return app


app = create_app()


def run() -> None:
    """Console entry point: serve the app with uvicorn."""
    settings = get_settings()
    uvicorn.run(
        "tunecrate.main:app",
        host=settings.host,
        port=settings.port,
        log_config=None,
    )
