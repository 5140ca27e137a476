"""API router initialization."""

# Hey future me, this is the MAIN API router aggregator! It gets mounted at /api in
# tunecrate.main.create_app(), so "/register" here is served as /api/register. The health
# router is NOT part of it, probes live at /health/* outside the API prefix.

from fastapi import APIRouter

from tunecrate.api.routers import accounts, health, tracks, uploads

api_router = APIRouter()

api_router.include_router(accounts.router, tags=["Accounts"])
api_router.include_router(tracks.router, prefix="/tracks", tags=["Tracks"])
api_router.include_router(uploads.router, prefix="/uploads", tags=["Uploads"])

__all__ = ["accounts", "api_router", "health", "tracks", "uploads"]
