"""Shared pytest fixtures.

Every test gets its own in-memory SQLite database and its own uploads directory under
tmp_path. Object storage is never contacted: FakeObjectStore answers the Supabase
Storage protocol through httpx.MockTransport and records every request.
"""

from collections.abc import AsyncIterator, Callable, Iterator
from pathlib import Path

import httpx
import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from tunecrate.config import (
    DatabaseSettings,
    ObjectStorageSettings,
    SecuritySettings,
    Settings,
    StorageSettings,
)
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
from tunecrate.main import create_app

ADMIN_SECRET = "test-admin-secret"
SUPABASE_URL = "https://demo.supabase.co"
SERVICE_KEY = "sb_secret_test_key"
BUCKET = "music"


class FakeObjectStore:
    """In-memory bucket speaking the Supabase Storage object API."""

    prefix = f"/storage/v1/object/{BUCKET}/"

    def __init__(self) -> None:
        self.objects: dict[str, bytes] = {}
        self.requests: list[httpx.Request] = []
        self.upload_status = 200

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        if not path.startswith(self.prefix):
            return httpx.Response(400, json={"error": "unknown bucket"})
        key = path[len(self.prefix) :]

        if request.method == "POST":
            if self.upload_status >= 300:
                return httpx.Response(self.upload_status, text="bucket unavailable")
            self.objects[key] = request.content
            return httpx.Response(200, json={"Key": f"{BUCKET}/{key}"})
        if request.method == "DELETE":
            if self.objects.pop(key, None) is None:
                return httpx.Response(404, json={"error": "not_found"})
            return httpx.Response(200, json={"message": "Successfully deleted"})
        return httpx.Response(405)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def requests_with(self, method: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == method]


def build_settings(tmp_path: Path, remote: bool = False) -> Settings:
    return Settings(
        database=DatabaseSettings(url="sqlite+aiosqlite:///:memory:"),
        storage=StorageSettings(dir=tmp_path / "uploads"),
        object_storage=ObjectStorageSettings(
            url=SUPABASE_URL if remote else "",
            service_key=SERVICE_KEY if remote else "",
            bucket=BUCKET,
        ),
        security=SecuritySettings(admin_password=ADMIN_SECRET, bcrypt_rounds=4),
    )


@pytest.fixture
def admin_secret() -> str:
    return ADMIN_SECRET


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return build_settings(tmp_path)


@pytest.fixture
def remote_settings(tmp_path: Path) -> Settings:
    return build_settings(tmp_path, remote=True)


@pytest.fixture
def fake_object_store() -> FakeObjectStore:
    return FakeObjectStore()


@pytest.fixture
async def database(settings: Settings) -> AsyncIterator[Database]:
    db = Database(settings.database)
    await SchemaManager(db.engine).ensure_schema()
    yield db
    await db.close()


@pytest.fixture
def upload_store(settings: Settings) -> LocalUploadStore:
    store = LocalUploadStore(settings.storage.dir)
    store.ensure_directory()
    return store


@pytest.fixture
def janitor(upload_store: LocalUploadStore) -> FileJanitor:
    return FileJanitor(upload_store)


@pytest.fixture
def access_guard() -> SharedSecretAccessGuard:
    return SharedSecretAccessGuard(ADMIN_SECRET)


@pytest.fixture
def password_hasher() -> BcryptPasswordHasher:
    return BcryptPasswordHasher(rounds=4)


@pytest.fixture
async def object_storage(
    remote_settings: Settings, fake_object_store: FakeObjectStore
) -> AsyncIterator[SupabaseStorageClient]:
    async with httpx.AsyncClient(transport=fake_object_store.transport) as client:
        yield SupabaseStorageClient(remote_settings.object_storage, client)


@pytest.fixture
def app_factory(
    fake_object_store: FakeObjectStore,
) -> Callable[[Settings], FastAPI]:
    """Build an app whose object storage (if enabled) is the fake bucket."""

    def factory(app_settings: Settings) -> FastAPI:
        return create_app(
            app_settings, object_storage_transport=fake_object_store.transport
        )

    return factory


@pytest.fixture
def client(
    settings: Settings, app_factory: Callable[[Settings], FastAPI]
) -> Iterator[TestClient]:
    with TestClient(app_factory(settings)) as test_client:
        yield test_client


@pytest.fixture
def remote_client(
    remote_settings: Settings, app_factory: Callable[[Settings], FastAPI]
) -> Iterator[TestClient]:
    with TestClient(app_factory(remote_settings)) as test_client:
        yield test_client
