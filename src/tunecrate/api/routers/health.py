# Hey future me - these are the Docker/Kubernetes probes:
# - /health/live  → process is up, no dependency checks
# - /health/ready → database answers and the uploads dir is writable
"""Health check endpoints for Docker/Kubernetes probes."""

from datetime import UTC, datetime
from typing import Any

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from tunecrate.infrastructure.observability import (
    HealthStatus,
    check_database_health,
    check_upload_directory_health,
)

router = APIRouter()


class LivenessStatus(BaseModel):
    """Simple liveness probe response."""

    status: str = Field(description="alive")
    timestamp: str = Field(description="ISO timestamp")


class ReadinessStatus(BaseModel):
    """Readiness probe response."""

    status: str = Field(description="ready or not_ready")
    timestamp: str = Field(description="ISO timestamp")
    object_storage: bool = Field(description="Uploads are offloaded to a bucket")
    checks: dict[str, Any] = Field(default_factory=dict)


@router.get("/live", response_model=LivenessStatus)
async def liveness_probe() -> LivenessStatus:
    """Returns 200 while the process is running."""
    return LivenessStatus(status="alive", timestamp=datetime.now(UTC).isoformat())


@router.get("/ready", response_model=ReadinessStatus)
async def readiness_probe(request: Request) -> JSONResponse:
    """Returns 200 when the database answers, 503 otherwise.

    A non-writable uploads directory only degrades readiness, remote offload
    still works without it.
    """
    state = request.app.state
    checks: dict[str, Any] = {}

    db = getattr(state, "db", None)
    db_ok = False
    if db is not None:
        db_check = await check_database_health(db)
        checks["database"] = db_check.to_dict()
        db_ok = db_check.status == HealthStatus.HEALTHY
    else:
        checks["database"] = {"status": HealthStatus.UNHEALTHY.value}

    store = getattr(state, "upload_store", None)
    if store is not None:
        checks["uploads"] = (await check_upload_directory_health(store.directory)).to_dict()

    response = ReadinessStatus(
        status="ready" if db_ok else "not_ready",
        timestamp=datetime.now(UTC).isoformat(),
        object_storage=getattr(state, "object_storage", None) is not None,
        checks=checks,
    )
    status_code = status.HTTP_200_OK if db_ok else status.HTTP_503_SERVICE_UNAVAILABLE
    return JSONResponse(content=response.model_dump(), status_code=status_code)
