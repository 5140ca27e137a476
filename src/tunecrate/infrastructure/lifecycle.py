"""Application lifecycle management for startup and shutdown tasks.

This module handles the FastAPI lifespan context manager that builds every shared
collaborator once (database, schema, storage clients, guard, hasher) and tears
them down in reverse order.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI

from tunecrate.config import Settings, get_settings
from tunecrate.domain.exceptions import ConfigurationError
from tunecrate.infrastructure.observability import configure_logging
from tunecrate.infrastructure.persistence import Database, SchemaManager
from tunecrate.infrastructure.security import (
    BcryptPasswordHasher,
    SharedSecretAccessGuard,
)
from tunecrate.infrastructure.storage import (
    FileJanitor,
    LocalUploadStore,
    SupabaseStorageClient,
)

logger = logging.getLogger(__name__)


def _prepare_directories(settings: Settings) -> None:
    try:
        settings.ensure_directories()
    except OSError as exc:
        raise ConfigurationError(
            f"Unable to create storage directories: {exc}. "
            "Check UPLOADS_DIR / DATABASE_URL and directory permissions."
        ) from exc


# Listen future me, everything before `yield` runs at STARTUP, everything after at SHUTDOWN.
# All shared objects end up on app.state so the dependencies in api/dependencies.py can hand
# them to routes. A schema failure re-raises and the server never starts accepting traffic.
@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager.

    Handles startup and shutdown tasks including:
    - Logging configuration
    - Directory creation
    - Database initialization and schema migration
    - Object storage client (only when configured)
    - Resource cleanup
    """
    settings: Settings = getattr(app.state, "settings", None) or get_settings()
    app.state.settings = settings

    configure_logging(
        log_level=settings.log_level,
        json_format=settings.observability.json_format,
        app_name=settings.app_name,
    )
    logger.info("Starting application: %s", settings.app_name)

    db: Database | None = None
    http_client: httpx.AsyncClient | None = None
    janitor: FileJanitor | None = None
    try:
        _prepare_directories(settings)

        db = Database(settings.database)
        app.state.db = db
        added = await SchemaManager(db.engine).ensure_schema()
        logger.info(
            "Database ready (%s), %d column(s) added",
            settings.database.url.split("://", 1)[0],
            len(added),
        )

        store = LocalUploadStore(
            settings.storage.dir, default_extension=settings.storage.default_extension
        )
        janitor = FileJanitor(store)
        app.state.upload_store = store
        app.state.janitor = janitor

        app.state.object_storage = None
        if settings.object_storage.is_configured:
            http_client = httpx.AsyncClient(
                timeout=settings.object_storage.timeout,
                transport=getattr(app.state, "object_storage_transport", None),
            )
            app.state.object_storage = SupabaseStorageClient(
                settings.object_storage, http_client
            )
            logger.info(
                "Object storage enabled (bucket %s)", settings.object_storage.bucket
            )
        else:
            logger.info("Object storage not configured, uploads stay local")

        if settings.security.uses_default_admin_password:
            logger.warning(
                "ADMIN_PASSWORD is not set, using the built-in development password. "
                "Set ADMIN_PASSWORD before exposing this server."
            )
        app.state.access_guard = SharedSecretAccessGuard(
            settings.security.admin_password
        )
        app.state.password_hasher = BcryptPasswordHasher(
            rounds=settings.security.bcrypt_rounds
        )

        yield

    except Exception as e:
        logger.exception("Error during application startup: %s", e)
        raise
    finally:
        logger.info("Shutting down application")

        if janitor is not None:
            await janitor.drain()

        if http_client is not None:
            await http_client.aclose()
            logger.info("Object storage client closed")

        if db is not None:
            await db.close()
            logger.info("Database connection closed")
