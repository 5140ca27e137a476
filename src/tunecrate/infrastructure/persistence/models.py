"""SQLAlchemy ORM models for TuneCrate."""

from datetime import UTC, datetime
from typing import Any

import sqlalchemy as sa
from sqlalchemy import JSON, Integer, String, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def utc_now() -> datetime:
    """Get current UTC time."""
    return datetime.now(UTC)


# Hey future me - SQLite doesn't preserve timezone info! Stored UTC datetimes come back
# naive. ALWAYS run DB datetimes through this before comparing with datetime.now(UTC).
def ensure_utc_aware(dt: datetime) -> datetime:
    """Ensure datetime is UTC-aware, assuming naive datetimes are UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt


# JSONB on PostgreSQL (indexable, what the existing production DB uses), plain JSON
# (TEXT under the hood) on SQLite for local dev and tests.
JsonList = JSON().with_variant(JSONB(), "postgresql")


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


# Listen up, table and column names match the pre-existing production schema (users,
# tracks, password column holds the bcrypt HASH despite the name). Don't rename them -
# SchemaManager only ever ADDS columns, it never renames or drops.
class UserModel(Base):
    """SQLAlchemy model for User accounts."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    email: Mapped[str] = mapped_column(Text, unique=True, nullable=False)
    password: Mapped[str] = mapped_column(Text, nullable=False)
    likes: Mapped[list[Any] | None] = mapped_column(
        JsonList, nullable=True, default=list, server_default=sa.text("'[]'")
    )
    playlists: Mapped[list[Any] | None] = mapped_column(
        JsonList, nullable=True, default=list, server_default=sa.text("'[]'")
    )


class TrackModel(Base):
    """SQLAlchemy model for catalog tracks."""

    __tablename__ = "tracks"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    artist: Mapped[str | None] = mapped_column(Text, nullable=True)
    url: Mapped[str] = mapped_column(Text, nullable=False)
    # Advisory only - see Track entity
    owner_email: Mapped[str | None] = mapped_column(Text, nullable=True)


# Hey future me - this is the upload LEDGER. No foreign key to tracks on purpose: the whole
# point is to survive the case where the track INSERT never happened.
class PendingUploadModel(Base):
    """SQLAlchemy model for upload ledger entries."""

    __tablename__ = "pending_uploads"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    file_name: Mapped[str] = mapped_column(String(255), nullable=False)
    public_url: Mapped[str] = mapped_column(Text, nullable=False)
    local_path: Mapped[str | None] = mapped_column(Text, nullable=True)
    storage_key: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default="pending", index=True
    )
    track_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    error: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), default=utc_now, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), default=utc_now, onupdate=utc_now, nullable=False
    )
