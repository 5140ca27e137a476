"""API schemas (pydantic request/response models).

Request fields are mostly optional on purpose: missing values reach the services,
which raise ValidationError with a readable message instead of a pydantic error list.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class _AdminRequest(BaseModel):
    """Body that may carry the admin secret as adminPassword."""

    model_config = ConfigDict(populate_by_name=True)

    admin_password: str | None = Field(default=None, alias="adminPassword")


class CredentialsRequest(BaseModel):
    """Request schema for register and login."""

    email: str | None = Field(default=None, description="Account email")
    password: str | None = Field(default=None, description="Raw password")


class UserResponse(BaseModel):
    """Public account view. Never includes the password hash."""

    id: int
    email: str
    likes: list[str] = Field(default_factory=list)
    playlists: list[dict[str, Any]] = Field(default_factory=list)


class ReplaceLikesRequest(BaseModel):
    """Full replacement of an account's likes."""

    likes: Any = Field(default=None, description="Array of track references")


class ReplaceLikesResponse(BaseModel):
    success: bool = True
    likes: list[str]


class ReplacePlaylistsRequest(BaseModel):
    """Full replacement of an account's playlists."""

    playlists: Any = Field(
        default=None, description="Array of {name, tracks} objects"
    )


class ReplacePlaylistsResponse(BaseModel):
    success: bool = True
    playlists: list[dict[str, Any]]


class TrackResponse(BaseModel):
    """Catalog entry as returned by every track endpoint."""

    id: int
    title: str
    artist: str | None = None
    url: str


class CreateTrackRequest(_AdminRequest):
    """Create a track that points at an existing URL."""

    title: str | None = None
    artist: str | None = None
    url: str | None = None
    owner_email: str | None = Field(default=None, alias="ownerEmail")


class UpdateTrackRequest(_AdminRequest):
    """Change title/artist of a track."""

    title: str | None = None
    artist: str | None = None


class DeleteTrackRequest(_AdminRequest):
    """Optional JSON body of DELETE /tracks/{id}."""


class DeleteTrackResponse(BaseModel):
    success: bool = True


class ReconcileRequest(_AdminRequest):
    """Sweep ledger entries older than the given number of minutes."""

    # An upload can sit between "ledger opened" and "track inserted" for a while, so a
    # zero cutoff would race in-flight uploads and delete their staged files
    older_than_minutes: int = Field(default=15, ge=1, alias="olderThanMinutes")


class ReconcileResponse(BaseModel):
    checked: int
    committed: int
    reconciled: int
    errors: int


__all__ = [
    "CreateTrackRequest",
    "CredentialsRequest",
    "DeleteTrackRequest",
    "DeleteTrackResponse",
    "ReconcileRequest",
    "ReconcileResponse",
    "ReplaceLikesRequest",
    "ReplaceLikesResponse",
    "ReplacePlaylistsRequest",
    "ReplacePlaylistsResponse",
    "TrackResponse",
    "UpdateTrackRequest",
    "UserResponse",
]
