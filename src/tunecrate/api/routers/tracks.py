"""Track catalog endpoints.

Hey future me - every MUTATING route here checks the admin secret first (access guard)
and only then looks at the payload. The secret comes from the adminPassword body/form
field or the X-Admin-Password header, body wins when both are sent.
"""

import logging

from fastapi import APIRouter, Depends, File, Form, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from tunecrate.api.dependencies import (
    get_access_guard,
    get_admin_header,
    get_db_session,
    get_track_service,
    get_upload_track_use_case,
)
from tunecrate.api.schemas import (
    CreateTrackRequest,
    DeleteTrackRequest,
    DeleteTrackResponse,
    TrackResponse,
    UpdateTrackRequest,
)
from tunecrate.application.services import TrackService
from tunecrate.application.use_cases import (
    AudioUpload,
    UploadTrackRequest,
    UploadTrackUseCase,
)
from tunecrate.domain.ports import IAccessGuard

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("", response_model=list[TrackResponse])
async def list_tracks(
    service: TrackService = Depends(get_track_service),
) -> list[TrackResponse]:
    """All tracks, newest first."""
    tracks = await service.list()
    return [TrackResponse(**track.to_dict()) for track in tracks]


@router.post("", response_model=TrackResponse)
async def create_track(
    body: CreateTrackRequest,
    admin_header: str | None = Depends(get_admin_header),
    guard: IAccessGuard = Depends(get_access_guard),
    service: TrackService = Depends(get_track_service),
    session: AsyncSession = Depends(get_db_session),
) -> TrackResponse:
    """Add a track that points at an existing URL."""
    guard.require(body.admin_password or admin_header)
    track = await service.insert(
        title=body.title, url=body.url, artist=body.artist, owner_email=body.owner_email
    )
    await session.commit()
    return TrackResponse(**track.to_dict())


@router.post("/upload", response_model=TrackResponse)
async def upload_track(
    title: str | None = Form(default=None),
    artist: str | None = Form(default=None),
    admin_password: str | None = Form(default=None, alias="adminPassword"),
    owner_email: str | None = Form(default=None, alias="ownerEmail"),
    file: UploadFile | None = File(default=None),
    admin_header: str | None = Depends(get_admin_header),
    use_case: UploadTrackUseCase = Depends(get_upload_track_use_case),
) -> TrackResponse:
    """Upload an audio file (multipart field "file") and catalogue it."""
    audio = None
    if file is not None:
        audio = AudioUpload(
            filename=file.filename,
            content_type=file.content_type,
            read=file.read,
            discard=file.close,
        )
    track = await use_case.execute(
        UploadTrackRequest(
            title=title,
            artist=artist,
            audio=audio,
            admin_token=admin_password or admin_header,
            owner_email=owner_email,
        )
    )
    return TrackResponse(**track.to_dict())


@router.put("/{track_id}", response_model=TrackResponse)
async def update_track(
    track_id: int,
    body: UpdateTrackRequest,
    admin_header: str | None = Depends(get_admin_header),
    guard: IAccessGuard = Depends(get_access_guard),
    service: TrackService = Depends(get_track_service),
    session: AsyncSession = Depends(get_db_session),
) -> TrackResponse:
    """Change title and artist. The URL never changes."""
    guard.require(body.admin_password or admin_header)
    track = await service.update(track_id, body.title, body.artist)
    await session.commit()
    return TrackResponse(**track.to_dict())


@router.delete("/{track_id}", response_model=DeleteTrackResponse)
async def delete_track(
    track_id: int,
    body: DeleteTrackRequest | None = None,
    admin_header: str | None = Depends(get_admin_header),
    guard: IAccessGuard = Depends(get_access_guard),
    service: TrackService = Depends(get_track_service),
    session: AsyncSession = Depends(get_db_session),
) -> DeleteTrackResponse:
    """Delete a track. Local files are removed in the background afterwards."""
    guard.require((body.admin_password if body else None) or admin_header)
    track = await service.delete(track_id)
    await session.commit()
    service.schedule_file_removal(track)
    return DeleteTrackResponse()
