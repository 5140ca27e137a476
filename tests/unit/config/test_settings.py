"""Tests for settings parsing."""

from pathlib import Path

import pytest

from tunecrate.config import (
    DatabaseSettings,
    ObjectStorageSettings,
    SecuritySettings,
    Settings,
    StorageSettings,
)


class TestDatabaseUrl:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("postgres://u:p@db:5432/app", "postgresql+asyncpg://u:p@db:5432/app"),
            ("postgresql://u:p@db/app", "postgresql+asyncpg://u:p@db/app"),
            ("postgresql+asyncpg://u:p@db/app", "postgresql+asyncpg://u:p@db/app"),
            ("sqlite:///./data/x.db", "sqlite+aiosqlite:///./data/x.db"),
            ("sqlite+aiosqlite:///:memory:", "sqlite+aiosqlite:///:memory:"),
        ],
    )
    def test_urls_are_rewritten_to_async_drivers(self, raw: str, expected: str) -> None:
        assert DatabaseSettings(url=raw).url == expected

    def test_dialect_flags(self) -> None:
        assert DatabaseSettings(url="postgres://h/db").is_postgresql
        assert DatabaseSettings(url="sqlite:///x.db").is_sqlite

    def test_database_url_env_var(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("DATABASE_URL", "postgres://env-host/db")
        assert DatabaseSettings().url == "postgresql+asyncpg://env-host/db"


class TestObjectStorage:
    def test_needs_url_and_key(self) -> None:
        assert not ObjectStorageSettings(
            url="https://x.supabase.co", service_key=""
        ).is_configured
        assert not ObjectStorageSettings(url="", service_key="k").is_configured
        assert ObjectStorageSettings(
            url="https://x.supabase.co", service_key="k"
        ).is_configured

    def test_base_url_strips_trailing_slash(self) -> None:
        settings = ObjectStorageSettings(url="https://x.supabase.co/", service_key="k")
        assert settings.base_url == "https://x.supabase.co"

    def test_env_vars(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("SUPABASE_URL", "https://env.supabase.co")
        monkeypatch.setenv("SUPABASE_SERVICE_KEY", "sb_secret_env")
        monkeypatch.delenv("SUPABASE_BUCKET", raising=False)

        settings = ObjectStorageSettings()

        assert settings.is_configured
        assert settings.bucket == "music"


class TestSecurity:
    def test_default_admin_password_is_flagged(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.delenv("ADMIN_PASSWORD", raising=False)
        settings = SecuritySettings()
        assert settings.admin_password == "dev-admin-password"
        assert settings.uses_default_admin_password

    def test_admin_password_env_var(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("ADMIN_PASSWORD", "rotated")
        settings = SecuritySettings()
        assert settings.admin_password == "rotated"
        assert not settings.uses_default_admin_password


class TestSqlitePath:
    def test_file_database_path(self) -> None:
        settings = Settings(database=DatabaseSettings(url="sqlite:///./data/app.db"))
        assert settings.sqlite_db_path() == Path("./data/app.db")

    def test_memory_and_postgres_have_no_path(self) -> None:
        memory = Settings(database=DatabaseSettings(url="sqlite:///:memory:"))
        postgres = Settings(database=DatabaseSettings(url="postgres://h/db"))
        assert memory.sqlite_db_path() is None
        assert postgres.sqlite_db_path() is None

    def test_ensure_directories_creates_upload_and_db_dirs(
        self, tmp_path: Path
    ) -> None:
        settings = Settings(
            database=DatabaseSettings(url=f"sqlite:///{tmp_path}/db/app.db"),
            storage=StorageSettings(dir=tmp_path / "uploads"),
        )

        settings.ensure_directories()

        assert (tmp_path / "uploads").is_dir()
        assert (tmp_path / "db").is_dir()
