"""Tests for dependency health checks."""

from pathlib import Path

from tunecrate.infrastructure.observability import (
    HealthStatus,
    check_database_health,
    check_upload_directory_health,
)
from tunecrate.infrastructure.persistence import Database


async def test_database_health(database: Database) -> None:
    check = await check_database_health(database)
    assert check.status is HealthStatus.HEALTHY


async def test_database_down(database: Database, mocker) -> None:
    mocker.patch.object(database, "ping", return_value=False)

    check = await check_database_health(database)

    assert check.status is HealthStatus.UNHEALTHY
    assert check.to_dict()["status"] == "unhealthy"


async def test_upload_directory(tmp_path: Path) -> None:
    healthy = await check_upload_directory_health(tmp_path)
    missing = await check_upload_directory_health(tmp_path / "missing")

    assert healthy.status is HealthStatus.HEALTHY
    assert missing.status is HealthStatus.DEGRADED
