"""Dependency injection for API endpoints."""

import logging
from collections.abc import AsyncGenerator
from typing import cast

from fastapi import Depends, Header, Request
from sqlalchemy.ext.asyncio import AsyncSession

from tunecrate.application.services import (
    AccountService,
    TrackService,
    UploadReconciler,
)
from tunecrate.application.use_cases import UploadTrackUseCase
from tunecrate.config import Settings
from tunecrate.domain.exceptions import ConfigurationError
from tunecrate.domain.ports import IAccessGuard, IObjectStorage, IPasswordHasher
from tunecrate.infrastructure.persistence import (
    AccountRepository,
    Database,
    TrackRepository,
)
from tunecrate.infrastructure.storage import FileJanitor, LocalUploadStore

logger = logging.getLogger(__name__)


def _app_state(request: Request, name: str) -> object:
    value = getattr(request.app.state, name, None)
    if value is None:
        raise ConfigurationError(f"{name} not initialized")
    return value


def get_app_settings(request: Request) -> Settings:
    return cast(Settings, _app_state(request, "settings"))


def get_database(request: Request) -> Database:
    return cast(Database, _app_state(request, "db"))


# Hey future me - one session per request, committed when the route returns (session_scope).
# Mutating routes still call `await session.commit()` themselves when something must happen
# AFTER the commit (file removal on delete) or when a failing commit must surface as the
# route's own error instead of after the response was built.
async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """Get database session from app state."""
    db = get_database(request)
    async with db.session_scope() as session:
        yield session


def get_access_guard(request: Request) -> IAccessGuard:
    return cast(IAccessGuard, _app_state(request, "access_guard"))


def get_password_hasher(request: Request) -> IPasswordHasher:
    return cast(IPasswordHasher, _app_state(request, "password_hasher"))


def get_upload_store(request: Request) -> LocalUploadStore:
    return cast(LocalUploadStore, _app_state(request, "upload_store"))


def get_janitor(request: Request) -> FileJanitor:
    return cast(FileJanitor, _app_state(request, "janitor"))


def get_object_storage(request: Request) -> IObjectStorage | None:
    """Object storage client, or None when uploads stay local."""
    return cast(IObjectStorage | None, getattr(request.app.state, "object_storage", None))


def get_admin_header(
    x_admin_password: str | None = Header(default=None, alias="X-Admin-Password"),
) -> str | None:
    """Admin secret sent as header. Body fields named adminPassword take precedence."""
    return x_admin_password


def get_account_service(
    session: AsyncSession = Depends(get_db_session),
    hasher: IPasswordHasher = Depends(get_password_hasher),
) -> AccountService:
    return AccountService(AccountRepository(session), hasher)


def get_track_service(
    session: AsyncSession = Depends(get_db_session),
    store: LocalUploadStore = Depends(get_upload_store),
    janitor: FileJanitor = Depends(get_janitor),
) -> TrackService:
    return TrackService(TrackRepository(session), store=store, janitor=janitor)


# The pipeline opens its own short sessions per step, so it gets the Database,
# not the request session.
def get_upload_track_use_case(
    request: Request,
    db: Database = Depends(get_database),
    guard: IAccessGuard = Depends(get_access_guard),
    store: LocalUploadStore = Depends(get_upload_store),
    object_storage: IObjectStorage | None = Depends(get_object_storage),
) -> UploadTrackUseCase:
    settings = get_app_settings(request)
    return UploadTrackUseCase(
        session_scope=db.session_scope,
        guard=guard,
        store=store,
        object_storage=object_storage,
        default_content_type=settings.storage.default_content_type,
    )


def get_upload_reconciler(
    db: Database = Depends(get_database),
    store: LocalUploadStore = Depends(get_upload_store),
    object_storage: IObjectStorage | None = Depends(get_object_storage),
) -> UploadReconciler:
    return UploadReconciler(db.session_scope, store, object_storage)
