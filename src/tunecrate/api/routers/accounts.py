"""Account endpoints: registration, login and preferences."""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from tunecrate.api.dependencies import get_account_service, get_db_session
from tunecrate.api.schemas import (
    CredentialsRequest,
    ReplaceLikesRequest,
    ReplaceLikesResponse,
    ReplacePlaylistsRequest,
    ReplacePlaylistsResponse,
    UserResponse,
)
from tunecrate.application.services import AccountService

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/register", response_model=UserResponse)
async def register(
    body: CredentialsRequest,
    service: AccountService = Depends(get_account_service),
    session: AsyncSession = Depends(get_db_session),
) -> UserResponse:
    """Create an account. 409 when the (lowercased) email is taken."""
    user = await service.register(body.email, body.password)
    await session.commit()
    return UserResponse(**user.to_public_dict())


# Yo, 401 with the SAME message for unknown email and wrong password. Don't "improve" the
# error text here, it would tell attackers which emails are registered.
@router.post("/login", response_model=UserResponse)
async def login(
    body: CredentialsRequest,
    service: AccountService = Depends(get_account_service),
) -> UserResponse:
    user = await service.authenticate(body.email, body.password)
    return UserResponse(**user.to_public_dict())


@router.get("/user/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: int,
    service: AccountService = Depends(get_account_service),
) -> UserResponse:
    user = await service.get_by_id(user_id)
    return UserResponse(**user.to_public_dict())


@router.put("/user/{user_id}/likes", response_model=ReplaceLikesResponse)
async def replace_likes(
    user_id: int,
    body: ReplaceLikesRequest,
    service: AccountService = Depends(get_account_service),
    session: AsyncSession = Depends(get_db_session),
) -> ReplaceLikesResponse:
    """Replace the whole likes list. [] clears it, the last write wins."""
    likes = await service.replace_likes(user_id, body.likes)
    await session.commit()
    return ReplaceLikesResponse(likes=list(likes))


@router.put("/user/{user_id}/playlists", response_model=ReplacePlaylistsResponse)
async def replace_playlists(
    user_id: int,
    body: ReplacePlaylistsRequest,
    service: AccountService = Depends(get_account_service),
    session: AsyncSession = Depends(get_db_session),
) -> ReplacePlaylistsResponse:
    """Replace the whole playlists list. [] clears it, the last write wins."""
    playlists = await service.replace_playlists(user_id, body.playlists)
    await session.commit()
    return ReplacePlaylistsResponse(
        playlists=[playlist.to_dict() for playlist in playlists]
    )
