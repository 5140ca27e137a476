"""Track service: the catalog CRUD operations."""

import logging

from tunecrate.domain.entities import Track, normalize_email
from tunecrate.domain.exceptions import EntityNotFoundException, ValidationError
from tunecrate.domain.ports import ITrackRepository
from tunecrate.infrastructure.storage import FileJanitor, LocalUploadStore

logger = logging.getLogger(__name__)


class TrackService:
    """Service for catalog operations.

    Authorization is NOT checked here. Routers and the upload pipeline run the access
    guard before calling any mutating method.
    """

    def __init__(
        self,
        tracks: ITrackRepository,
        store: LocalUploadStore | None = None,
        janitor: FileJanitor | None = None,
    ):
        """Initialize track service.

        Args:
            tracks: Track repository bound to the current session
            store: Local uploads directory, needed to resolve /uploads/ URLs on delete
            janitor: Background file remover used on delete
        """
        self._tracks = tracks
        self._store = store
        self._janitor = janitor

    async def list(self) -> list[Track]:
        """All tracks, newest first."""
        return await self._tracks.list_all()

    async def get(self, track_id: int) -> Track:
        track = await self._tracks.get_by_id(track_id)
        if track is None:
            raise EntityNotFoundException("Track", track_id)
        return track

    async def insert(
        self,
        title: str | None,
        url: str | None,
        artist: str | None = None,
        owner_email: str | None = None,
    ) -> Track:
        """Create a track pointing at an existing URL.

        Raises:
            ValidationError: title or url empty after trimming
        """
        title = (title or "").strip()
        url = (url or "").strip()
        if not title or not url:
            raise ValidationError("Title and url are required")
        owner = normalize_email(owner_email) or None
        track = await self._tracks.add(
            title=title, url=url, artist=_clean_artist(artist), owner_email=owner
        )
        logger.info("Created track %s", track.id, extra={"track_id": track.id})
        return track

    async def update(
        self, track_id: int, title: str | None, artist: str | None = None
    ) -> Track:
        """Change title and artist. The URL stays as it is.

        Raises:
            ValidationError: title empty after trimming
            EntityNotFoundException: no such track
        """
        title = (title or "").strip()
        if not title:
            raise ValidationError("Title is required")
        if not await self._tracks.update_metadata(track_id, title, _clean_artist(artist)):
            raise EntityNotFoundException("Track", track_id)
        return await self.get(track_id)

    # Hey future me - order matters here! Row first, file second. Callers commit the row
    # deletion and only THEN call schedule_file_removal(). If the unlink fails we only leak
    # a file (logged). The other way round a failed DELETE would leave a catalog entry
    # pointing at nothing. Remote objects are never touched here.
    async def delete(self, track_id: int) -> Track:
        """Delete a track row and return what it was."""
        track = await self.get(track_id)
        if not await self._tracks.delete(track_id):
            # Someone else deleted it between lookup and delete
            raise EntityNotFoundException("Track", track_id)
        logger.info("Deleted track %s", track_id, extra={"track_id": track_id})
        return track

    def schedule_file_removal(self, track: Track) -> bool:
        """Hand the local file of a deleted track to the janitor.

        Returns True when a removal was scheduled. Remote tracks return False.
        """
        if not track.is_local or self._store is None or self._janitor is None:
            return False
        path = self._store.path_for_url(track.url)
        if path is None:
            logger.warning("Refusing to remove file for suspicious url %s", track.url)
            return False
        self._janitor.schedule_removal(path)
        return True


def _clean_artist(artist: str | None) -> str | None:
    artist = (artist or "").strip()
    return artist or None
