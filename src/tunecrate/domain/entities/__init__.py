"""Domain entities."""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from tunecrate.domain.value_objects import Preferences

LOCAL_UPLOAD_PREFIX = "/uploads/"


def normalize_email(email: str | None) -> str:
    """Lowercase and trim an email so uniqueness is case-insensitive."""
    return (email or "").strip().lower()


# Yo, User is the DOMAIN ENTITY (not DB model)! password_hash lives here because the
# account service needs it for login, but to_public_dict() never includes it - that's
# the only shape routers are allowed to return.
@dataclass
class User:
    """Account identity plus preferences."""

    id: int
    email: str
    password_hash: str = field(repr=False)
    preferences: Preferences = field(default_factory=Preferences)

    def to_public_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "email": self.email,
            "likes": self.preferences.likes_as_json(),
            "playlists": self.preferences.playlists_as_json(),
        }


@dataclass
class Track:
    """Catalog entry.

    owner_email is advisory metadata only. Nothing authorizes against it.
    """

    id: int
    title: str
    url: str
    artist: str | None = None
    owner_email: str | None = None

    @property
    def is_local(self) -> bool:
        """True when the bytes live in the local uploads directory."""
        return self.url.startswith(LOCAL_UPLOAD_PREFIX)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "artist": self.artist,
            "url": self.url,
        }


class PendingUploadStatus(str, Enum):
    """Lifecycle of an upload ledger entry."""

    PENDING = "pending"  # bytes staged/offloaded, track row not written yet
    COMMITTED = "committed"  # track row exists
    FAILED = "failed"  # pipeline gave up, bytes may still exist
    RECONCILED = "reconciled"  # sweep removed the orphaned bytes


# Hey future me - PendingUpload is the ledger that makes the "offload succeeded but the
# INSERT failed" gap VISIBLE. The pipeline writes one before touching storage and flips it
# to committed after the track row exists. Anything left pending/failed is swept by
# UploadReconciler. storage_key is bucket-relative and only set for remote uploads.
@dataclass
class PendingUpload:
    """Ledger entry for one upload attempt."""

    id: int
    file_name: str
    public_url: str
    local_path: str | None = None
    storage_key: str | None = None
    status: PendingUploadStatus = PendingUploadStatus.PENDING
    track_id: int | None = None
    error: str | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    @property
    def is_open(self) -> bool:
        return self.status in (PendingUploadStatus.PENDING, PendingUploadStatus.FAILED)


__all__ = [
    "LOCAL_UPLOAD_PREFIX",
    "PendingUpload",
    "PendingUploadStatus",
    "Track",
    "User",
    "normalize_email",
]
