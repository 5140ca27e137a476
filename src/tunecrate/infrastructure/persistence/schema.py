"""Startup schema management: create missing tables, then apply additive migrations.

Hey future me - this replaces a migration tool for this tiny schema. The rules:
1. ADDITIVE ONLY. We create tables and add columns. Never rename, never drop.
2. IDEMPOTENT. Every step checks first (create_all uses checkfirst, columns are looked
   up with the inspector - same trick as the "check if column already exists" guards in
   the old Alembic migrations). Running it on every restart is the normal case.
3. FATAL ON FAILURE. If DDL fails the app must NOT start - every query downstream assumes
   these shapes exist. We wrap the error in SchemaMigrationError and re-raise.

To add a column later: append a ColumnMigration to ADDITIVE_COLUMNS AND add the attribute
to the ORM model in models.py (fresh databases get it from create_all).
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any

from sqlalchemy import Connection, Text, inspect, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine
from sqlalchemy.types import TypeEngine

from tunecrate.domain.exceptions import SchemaMigrationError

from .models import Base, JsonList

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ColumnMigration:
    """One "add column if not present" step."""

    table: str
    column: str
    type_: TypeEngine[Any]
    server_default: str | None = None

    @property
    def qualified_name(self) -> str:
        return f"{self.table}.{self.column}"

    def ddl(self, conn: Connection) -> str:
        """Render the ALTER TABLE statement for the connection's dialect."""
        preparer = conn.dialect.identifier_preparer
        type_sql = self.type_.compile(dialect=conn.dialect)
        # Postgres can guard the race between two processes starting at once
        guard = "IF NOT EXISTS " if conn.dialect.name == "postgresql" else ""
        statement = (
            f"ALTER TABLE {preparer.quote(self.table)} "
            f"ADD COLUMN {guard}{preparer.quote(self.column)} {type_sql}"
        )
        if self.server_default is not None:
            statement += f" DEFAULT {self.server_default}"
        return statement


# Order matters only for readability - each step is independent.
ADDITIVE_COLUMNS: tuple[ColumnMigration, ...] = (
    ColumnMigration("users", "likes", JsonList, "'[]'"),
    ColumnMigration("users", "playlists", JsonList, "'[]'"),
    ColumnMigration("tracks", "owner_email", Text()),
)


class SchemaManager:
    """Ensures tables and columns exist. Runs at most once per instance."""

    def __init__(
        self,
        engine: AsyncEngine,
        migrations: tuple[ColumnMigration, ...] = ADDITIVE_COLUMNS,
    ) -> None:
        self._engine = engine
        self._migrations = migrations
        self._lock = asyncio.Lock()
        self._applied = False

    @property
    def applied(self) -> bool:
        return self._applied

    async def ensure_schema(self) -> list[str]:
        """Create missing tables and add missing columns.

        Returns:
            Qualified names ("table.column") of columns added by this run. Empty when
            the schema was already up to date or this manager already ran.

        Raises:
            SchemaMigrationError: Any DDL failure. Startup must abort.
        """
        async with self._lock:
            if self._applied:
                return []

            try:
                async with self._engine.begin() as conn:
                    added: list[str] = await conn.run_sync(self._apply)
            except SQLAlchemyError as exc:
                logger.error("Schema migration failed: %s", exc)
                raise SchemaMigrationError(f"Schema migration failed: {exc}") from exc

            self._applied = True
            if added:
                logger.info(
                    "Schema migrated, added columns: %s",
                    ", ".join(added),
                    extra={"added_columns": added},
                )
            else:
                logger.info("Schema up to date")
            return added

    def _apply(self, conn: Connection) -> list[str]:
        Base.metadata.create_all(conn, checkfirst=True)

        inspector = inspect(conn)
        added: list[str] = []
        for migration in self._migrations:
            existing = {col["name"] for col in inspector.get_columns(migration.table)}
            if migration.column in existing:
                continue
            conn.execute(text(migration.ddl(conn)))
            added.append(migration.qualified_name)
            logger.debug("Added column %s", migration.qualified_name)
        return added
