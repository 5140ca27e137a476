"""Tests for the startup schema manager.

Hey future me - the interesting case is the LEGACY database: tables created by an older
deployment without likes/playlists/owner_email. ensure_schema must add exactly those
columns, keep existing rows, and be a no-op afterwards.
"""

import pytest
from sqlalchemy import Text, inspect, text
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.pool import StaticPool

from tunecrate.domain.exceptions import SchemaMigrationError
from tunecrate.infrastructure.persistence import (
    AccountRepository,
    ColumnMigration,
    Database,
    SchemaManager,
)


@pytest.fixture
async def engine():
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", poolclass=StaticPool)
    yield engine
    await engine.dispose()


async def _columns(engine: AsyncEngine, table: str) -> set[str]:
    async with engine.connect() as conn:
        return await conn.run_sync(
            lambda sync_conn: {c["name"] for c in inspect(sync_conn).get_columns(table)}
        )


async def _create_legacy_tables(engine: AsyncEngine) -> None:
    async with engine.begin() as conn:
        await conn.execute(
            text(
                "CREATE TABLE users (id INTEGER PRIMARY KEY AUTOINCREMENT, "
                "email TEXT UNIQUE NOT NULL, password TEXT NOT NULL)"
            )
        )
        await conn.execute(
            text(
                "CREATE TABLE tracks (id INTEGER PRIMARY KEY AUTOINCREMENT, "
                "title TEXT NOT NULL, artist TEXT, url TEXT NOT NULL)"
            )
        )
        await conn.execute(
            text("INSERT INTO users (email, password) VALUES ('old@x.io', 'hash')")
        )


class TestFreshDatabase:
    async def test_creates_all_tables(self, engine: AsyncEngine) -> None:
        added = await SchemaManager(engine).ensure_schema()

        # create_all already produces the current shape
        assert added == []
        assert {"id", "email", "password", "likes", "playlists"} <= await _columns(
            engine, "users"
        )
        assert "owner_email" in await _columns(engine, "tracks")
        assert "status" in await _columns(engine, "pending_uploads")

    async def test_second_run_is_a_no_op(self, engine: AsyncEngine) -> None:
        manager = SchemaManager(engine)
        await manager.ensure_schema()

        assert manager.applied
        assert await manager.ensure_schema() == []
        # A new manager (next process start) finds nothing to do either
        assert await SchemaManager(engine).ensure_schema() == []


class TestLegacyDatabase:
    async def test_adds_missing_columns(self, engine: AsyncEngine) -> None:
        await _create_legacy_tables(engine)

        added = await SchemaManager(engine).ensure_schema()

        assert added == ["users.likes", "users.playlists", "tracks.owner_email"]
        assert {"likes", "playlists"} <= await _columns(engine, "users")
        assert "owner_email" in await _columns(engine, "tracks")

    async def test_existing_rows_get_empty_preferences(self, settings) -> None:
        db = Database(settings.database)
        try:
            await _create_legacy_tables(db.engine)
            await SchemaManager(db.engine).ensure_schema()

            async with db.session_scope() as session:
                user = await AccountRepository(session).get_by_email("old@x.io")
        finally:
            await db.close()

        assert user is not None
        assert user.preferences.likes == ()
        assert user.preferences.playlists == ()

    async def test_rerun_after_migration_adds_nothing(self, engine: AsyncEngine) -> None:
        await _create_legacy_tables(engine)
        await SchemaManager(engine).ensure_schema()

        assert await SchemaManager(engine).ensure_schema() == []


class TestFailures:
    async def test_ddl_failure_raises_schema_migration_error(
        self, engine: AsyncEngine
    ) -> None:
        broken = (ColumnMigration("no_such_table", "col", Text()),)

        with pytest.raises(SchemaMigrationError):
            await SchemaManager(engine, migrations=broken).ensure_schema()


def test_postgres_ddl_is_guarded() -> None:
    from sqlalchemy.dialects import postgresql, sqlite

    migration = ColumnMigration("users", "likes", Text(), "'[]'")

    class _Conn:
        def __init__(self, dialect) -> None:
            self.dialect = dialect

    pg = migration.ddl(_Conn(postgresql.dialect()))
    lite = migration.ddl(_Conn(sqlite.dialect()))

    assert pg == "ALTER TABLE users ADD COLUMN IF NOT EXISTS likes TEXT DEFAULT '[]'"
    assert lite == "ALTER TABLE users ADD COLUMN likes TEXT DEFAULT '[]'"
