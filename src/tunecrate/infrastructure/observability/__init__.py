"""Observability infrastructure for structured logging and health checks."""

from tunecrate.infrastructure.observability.health import (
    HealthCheck,
    HealthStatus,
    check_database_health,
    check_upload_directory_health,
)
from tunecrate.infrastructure.observability.logging import (
    configure_logging,
    get_correlation_id,
    set_correlation_id,
)
from tunecrate.infrastructure.observability.middleware import RequestLoggingMiddleware

__all__ = [
    "HealthCheck",
    "HealthStatus",
    "RequestLoggingMiddleware",
    "check_database_health",
    "check_upload_directory_health",
    "configure_logging",
    "get_correlation_id",
    "set_correlation_id",
]
