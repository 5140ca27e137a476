"""Repository implementations for domain entities."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from tunecrate.domain.entities import (
    PendingUpload,
    PendingUploadStatus,
    Track,
    User,
)
from tunecrate.domain.exceptions import DuplicateAccountError
from tunecrate.domain.ports import (
    IAccountRepository,
    IPendingUploadRepository,
    ITrackRepository,
)
from tunecrate.domain.value_objects import Playlist, Preferences

from .models import (
    PendingUploadModel,
    TrackModel,
    UserModel,
    ensure_utc_aware,
    utc_now,
)


# Ids are INTEGER columns. Anything outside that range cannot match a row, and handing it
# to the driver raises OverflowError (not a SQLAlchemyError), so it is a plain miss.
MAX_ENTITY_ID = 2**31 - 1


def _storable_id(entity_id: int) -> bool:
    return 0 < entity_id <= MAX_ENTITY_ID


def _user_from_model(model: UserModel) -> User:
    return User(
        id=model.id,
        email=model.email,
        password_hash=model.password,
        preferences=Preferences.from_storage(model.likes, model.playlists),
    )


def _track_from_model(model: TrackModel) -> Track:
    return Track(
        id=model.id,
        title=model.title,
        artist=model.artist,
        url=model.url,
        owner_email=model.owner_email,
    )


def _pending_from_model(model: PendingUploadModel) -> PendingUpload:
    return PendingUpload(
        id=model.id,
        file_name=model.file_name,
        public_url=model.public_url,
        local_path=model.local_path,
        storage_key=model.storage_key,
        status=PendingUploadStatus(model.status),
        track_id=model.track_id,
        error=model.error,
        created_at=ensure_utc_aware(model.created_at),
        updated_at=ensure_utc_aware(model.updated_at),
    )


class AccountRepository(IAccountRepository):
    """SQLAlchemy implementation of the account repository."""

    # Hey future me, this is the Repository pattern! The session is injected and NOT committed
    # here - commit happens in Database.session_scope() when the unit of work ends. We DO
    # flush() on insert though: that's how we get the autoincrement id back AND how the unique
    # email constraint fires while we can still translate it into DuplicateAccountError.
    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with session."""
        self.session = session

    async def add(self, email: str, password_hash: str) -> User:
        """Insert a new account with empty preferences."""
        model = UserModel(email=email, password=password_hash, likes=[], playlists=[])
        self.session.add(model)
        try:
            await self.session.flush()
        except IntegrityError as exc:
            # users.email is the only unique column besides the PK
            raise DuplicateAccountError(email) from exc
        return _user_from_model(model)

    async def get_by_id(self, user_id: int) -> User | None:
        """Get an account by ID."""
        if not _storable_id(user_id):
            return None
        stmt = select(UserModel).where(UserModel.id == user_id)
        result = await self.session.execute(stmt)
        model = result.scalar_one_or_none()
        return _user_from_model(model) if model else None

    async def get_by_email(self, email: str) -> User | None:
        """Get an account by normalized email."""
        stmt = select(UserModel).where(UserModel.email == email)
        result = await self.session.execute(stmt)
        model = result.scalar_one_or_none()
        return _user_from_model(model) if model else None

    async def set_likes(self, user_id: int, likes: tuple[str, ...]) -> bool:
        """Replace the likes collection."""
        if not _storable_id(user_id):
            return False
        stmt = (
            update(UserModel).where(UserModel.id == user_id).values(likes=list(likes))
        )
        result = await self.session.execute(stmt)
        return bool(result.rowcount)  # type: ignore[attr-defined]

    async def set_playlists(
        self, user_id: int, playlists: tuple[Playlist, ...]
    ) -> bool:
        """Replace the playlists collection."""
        if not _storable_id(user_id):
            return False
        stmt = (
            update(UserModel)
            .where(UserModel.id == user_id)
            .values(playlists=[playlist.to_dict() for playlist in playlists])
        )
        result = await self.session.execute(stmt)
        return bool(result.rowcount)  # type: ignore[attr-defined]


class TrackRepository(ITrackRepository):
    """SQLAlchemy implementation of the track repository."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with session."""
        self.session = session

    async def add(
        self,
        title: str,
        url: str,
        artist: str | None = None,
        owner_email: str | None = None,
    ) -> Track:
        """Insert a track and return it with its assigned id."""
        model = TrackModel(title=title, artist=artist, url=url, owner_email=owner_email)
        self.session.add(model)
        await self.session.flush()
        return _track_from_model(model)

    async def get_by_id(self, track_id: int) -> Track | None:
        """Get a track by ID."""
        if not _storable_id(track_id):
            return None
        stmt = select(TrackModel).where(TrackModel.id == track_id)
        result = await self.session.execute(stmt)
        model = result.scalar_one_or_none()
        return _track_from_model(model) if model else None

    async def get_by_url(self, url: str) -> Track | None:
        """Get the newest track pointing at url."""
        stmt = (
            select(TrackModel)
            .where(TrackModel.url == url)
            .order_by(TrackModel.id.desc())
            .limit(1)
        )
        result = await self.session.execute(stmt)
        model = result.scalar_one_or_none()
        return _track_from_model(model) if model else None

    # Yo, ids are autoincrement so id DESC == newest first, deterministic even when two
    # tracks were inserted in the same millisecond.
    async def list_all(self) -> list[Track]:
        """All tracks, newest first."""
        stmt = select(TrackModel).order_by(TrackModel.id.desc())
        result = await self.session.execute(stmt)
        return [_track_from_model(model) for model in result.scalars().all()]

    async def update_metadata(
        self, track_id: int, title: str, artist: str | None
    ) -> bool:
        """Update title/artist. The url column is never touched."""
        if not _storable_id(track_id):
            return False
        stmt = (
            update(TrackModel)
            .where(TrackModel.id == track_id)
            .values(title=title, artist=artist)
        )
        result = await self.session.execute(stmt)
        return bool(result.rowcount)  # type: ignore[attr-defined]

    async def delete(self, track_id: int) -> bool:
        """Delete a track row."""
        if not _storable_id(track_id):
            return False
        stmt = delete(TrackModel).where(TrackModel.id == track_id)
        result = await self.session.execute(stmt)
        return bool(result.rowcount)  # type: ignore[attr-defined]


class PendingUploadRepository(IPendingUploadRepository):
    """SQLAlchemy implementation of the upload ledger."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with session."""
        self.session = session

    async def add(
        self,
        file_name: str,
        public_url: str,
        local_path: str | None,
        storage_key: str | None,
    ) -> PendingUpload:
        """Open a ledger entry in pending state."""
        now = utc_now()
        model = PendingUploadModel(
            file_name=file_name,
            public_url=public_url,
            local_path=local_path,
            storage_key=storage_key,
            status=PendingUploadStatus.PENDING.value,
            created_at=now,
            updated_at=now,
        )
        self.session.add(model)
        await self.session.flush()
        return _pending_from_model(model)

    async def mark(
        self,
        entry_id: int,
        status: PendingUploadStatus,
        track_id: int | None = None,
        error: str | None = None,
    ) -> None:
        """Move an entry to a new status."""
        values: dict[str, object] = {"status": status.value, "updated_at": utc_now()}
        if track_id is not None:
            values["track_id"] = track_id
        if error is not None:
            values["error"] = error[:1000]
        stmt = (
            update(PendingUploadModel)
            .where(PendingUploadModel.id == entry_id)
            .values(**values)
        )
        await self.session.execute(stmt)

    async def get_by_id(self, entry_id: int) -> PendingUpload | None:
        """Get a ledger entry by ID."""
        stmt = select(PendingUploadModel).where(PendingUploadModel.id == entry_id)
        result = await self.session.execute(stmt)
        model = result.scalar_one_or_none()
        return _pending_from_model(model) if model else None

    async def list_open(self, older_than: datetime) -> list[PendingUpload]:
        """Pending or failed entries created before the cutoff, oldest first."""
        stmt = (
            select(PendingUploadModel)
            .where(
                PendingUploadModel.status.in_(
                    [
                        PendingUploadStatus.PENDING.value,
                        PendingUploadStatus.FAILED.value,
                    ]
                )
            )
            .where(PendingUploadModel.created_at < older_than)
            .order_by(PendingUploadModel.id)
        )
        result = await self.session.execute(stmt)
        return [_pending_from_model(model) for model in result.scalars().all()]
