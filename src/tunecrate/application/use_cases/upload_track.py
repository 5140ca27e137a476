"""Use case for uploading an audio file and cataloguing it.

Hey future me - this is the UPLOAD PIPELINE. One request walks through:
1. Received  - access guard FIRST, then title/payload validation. Any failure discards the
               transport file the web framework spooled for us.
2. Staged    - bytes written into the uploads dir under "<ms>_<base><ext>", plus a
               "pending" ledger entry.
3. Offloaded - only when object storage is configured: upsert to the bucket, then the
               staged local copy is removed no matter how the upload went.
4. Recorded  - track row inserted with the final URL.
5. Committed - ledger entry flipped to "committed".

There is NO transaction across steps (the bytes live outside the DB). If step 4 fails the
bytes stay where they are, the ledger entry stays open and UploadReconciler cleans up later.
"""

import logging
from collections.abc import Awaitable, Callable
from contextlib import AbstractAsyncContextManager
from dataclasses import dataclass

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from tunecrate.application.services.track_service import TrackService
from tunecrate.application.use_cases import UseCase
from tunecrate.domain.entities import PendingUpload, PendingUploadStatus, Track
from tunecrate.domain.exceptions import (
    AuthorizationError,
    StorageFailureError,
    ValidationError,
)
from tunecrate.domain.ports import IAccessGuard, IObjectStorage
from tunecrate.infrastructure.persistence import (
    PendingUploadRepository,
    TrackRepository,
)
from tunecrate.infrastructure.storage import LocalUploadStore, StagedFile

logger = logging.getLogger(__name__)

SessionScope = Callable[[], AbstractAsyncContextManager[AsyncSession]]


async def _no_discard() -> None:
    return None


@dataclass
class AudioUpload:
    """The file part of an upload request.

    read() returns the payload. discard() releases whatever the transport layer staged
    (FastAPI's UploadFile spools to a temp file, its close() deletes it).
    """

    filename: str | None
    content_type: str | None
    read: Callable[[], Awaitable[bytes]]
    discard: Callable[[], Awaitable[None]] = _no_discard

    @classmethod
    def from_bytes(
        cls, data: bytes, filename: str | None = None, content_type: str | None = None
    ) -> "AudioUpload":
        async def read() -> bytes:
            return data

        return cls(filename=filename, content_type=content_type, read=read)


@dataclass
class UploadTrackRequest:
    """Request to upload and catalogue one audio file."""

    title: str | None
    audio: AudioUpload | None
    artist: str | None = None
    admin_token: str | None = None
    owner_email: str | None = None


class UploadTrackUseCase(UseCase[UploadTrackRequest, Track]):
    """Runs the upload pipeline."""

    def __init__(
        self,
        session_scope: SessionScope,
        guard: IAccessGuard,
        store: LocalUploadStore,
        object_storage: IObjectStorage | None = None,
        default_content_type: str = "audio/mpeg",
    ) -> None:
        """Initialize the use case.

        Args:
            session_scope: Factory for transactional sessions (one per pipeline step)
            guard: Access guard checked before anything else
            store: Local uploads directory
            object_storage: Remote bucket, None keeps files local
            default_content_type: Sent to object storage when the client gave none
        """
        self._session_scope = session_scope
        self._guard = guard
        self._store = store
        self._object_storage = object_storage
        self._default_content_type = default_content_type

    async def execute(self, request: UploadTrackRequest) -> Track:
        """Upload the audio and create its track.

        Raises:
            AuthorizationError: admin token rejected
            ValidationError: title missing or payload missing/empty
            StorageFailureError: staging, offload or insert failed
        """
        audio = request.audio
        try:
            self._guard.require(request.admin_token)
            title = (request.title or "").strip()
            if not title:
                raise ValidationError("Title is required")
            if audio is None:
                raise ValidationError("Audio file is required (field 'file')")
            data = await audio.read()
            if not data:
                raise ValidationError("Audio file is empty")
        except (AuthorizationError, ValidationError):
            if audio is not None:
                await audio.discard()
            raise

        try:
            return await self._run(request, audio, title, data)
        finally:
            await audio.discard()

    async def _run(
        self, request: UploadTrackRequest, audio: AudioUpload, title: str, data: bytes
    ) -> Track:
        staged = await self._stage(audio, data)
        remote = self._object_storage is not None
        planned_url = (
            self._object_storage.public_url(staged.name)
            if self._object_storage is not None
            else self._store.url_for(staged.name)
        )
        entry = await self._open_ledger_entry(staged, planned_url, remote)

        url = planned_url
        if self._object_storage is not None:
            content_type = audio.content_type or self._default_content_type
            try:
                url = await self._object_storage.upload(staged.name, data, content_type)
            except StorageFailureError as e:
                await self._mark(entry, PendingUploadStatus.FAILED, error=e.message)
                raise
            finally:
                await self._discard_staged(staged)

        try:
            async with self._session_scope() as session:
                track = await TrackService(TrackRepository(session)).insert(
                    title=title,
                    url=url,
                    artist=request.artist,
                    owner_email=request.owner_email,
                )
        except SQLAlchemyError as e:
            # Bytes are already stored - log where, the ledger keeps the entry open
            logger.error(
                "Track insert failed after storing %s: %s",
                url,
                e,
                extra={"pending_upload_id": entry.id, "upload_url": url},
            )
            await self._mark(entry, PendingUploadStatus.FAILED, error=str(e))
            raise StorageFailureError(f"Could not save track: {e}") from e

        await self._mark(entry, PendingUploadStatus.COMMITTED, track_id=track.id)
        logger.info(
            "Uploaded track %s (%s)",
            track.id,
            "object storage" if remote else "local",
            extra={"track_id": track.id, "file_name": staged.name, "bytes": staged.size},
        )
        return track

    async def _stage(self, audio: AudioUpload, data: bytes) -> StagedFile:
        try:
            return await self._store.stage(audio.filename, data)
        except OSError as e:
            logger.error("Could not stage upload: %s", e)
            raise StorageFailureError(
                f"Could not write upload: {e}", backend="filesystem"
            ) from e

    async def _open_ledger_entry(
        self, staged: StagedFile, public_url: str, remote: bool
    ) -> PendingUpload:
        try:
            async with self._session_scope() as session:
                return await PendingUploadRepository(session).add(
                    file_name=staged.name,
                    public_url=public_url,
                    local_path=str(staged.path),
                    storage_key=staged.name if remote else None,
                )
        except SQLAlchemyError as e:
            # Nothing is recorded anywhere yet, so the staged bytes can go
            await self._discard_staged(staged)
            raise StorageFailureError(f"Could not record upload: {e}") from e

    async def _discard_staged(self, staged: StagedFile) -> None:
        try:
            await self._store.remove(staged.path)
        except OSError as e:
            logger.warning("Could not remove staged file %s: %s", staged.name, e)

    async def _mark(
        self,
        entry: PendingUpload,
        status: PendingUploadStatus,
        track_id: int | None = None,
        error: str | None = None,
    ) -> None:
        # A lost ledger update only delays cleanup, the reconciler re-checks by URL
        try:
            async with self._session_scope() as session:
                await PendingUploadRepository(session).mark(
                    entry.id, status, track_id=track_id, error=error
                )
        except SQLAlchemyError as e:
            logger.warning(
                "Could not mark upload %s as %s: %s", entry.id, status.value, e
            )
