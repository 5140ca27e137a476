"""Health check functionality with dependency monitoring."""

import asyncio
import logging
import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any

from tunecrate.infrastructure.persistence import Database

logger = logging.getLogger(__name__)


class HealthStatus(str, Enum):
    """Health check status."""

    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"


@dataclass
class HealthCheck:
    """Result of a health check."""

    name: str
    status: HealthStatus
    message: str | None = None
    details: dict[str, Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"status": self.status.value}
        if self.message:
            data["message"] = self.message
        if self.details:
            data["details"] = self.details
        return data


async def check_database_health(db: Database) -> HealthCheck:
    """Check database connectivity."""
    if await db.ping():
        return HealthCheck(
            name="database",
            status=HealthStatus.HEALTHY,
            message="Database connection successful",
        )
    return HealthCheck(
        name="database",
        status=HealthStatus.UNHEALTHY,
        message="Database connection failed",
    )


async def check_upload_directory_health(directory: Path) -> HealthCheck:
    """Check that the uploads directory exists and is writable."""
    writable = await asyncio.to_thread(_is_writable_dir, directory)
    if writable:
        return HealthCheck(name="uploads", status=HealthStatus.HEALTHY)
    logger.warning("Uploads directory %s is not writable", directory)
    # Remote-offloaded uploads still work for a moment, local ones don't
    return HealthCheck(
        name="uploads",
        status=HealthStatus.DEGRADED,
        message=f"{directory} is missing or not writable",
    )


def _is_writable_dir(directory: Path) -> bool:
    return directory.is_dir() and os.access(directory, os.W_OK)
