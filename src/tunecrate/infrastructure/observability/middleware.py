"""Middleware for observability: request/response logging."""

import logging
import time
from collections.abc import Awaitable, Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from tunecrate.infrastructure.observability.logging import (
    get_correlation_id,
    set_correlation_id,
)

logger = logging.getLogger(__name__)

# Served audio files would drown the log
_QUIET_PREFIXES = ("/uploads/", "/health/")


# Hey future me, this logs every request with method, path, status and duration, and echoes
# the correlation ID back in X-Correlation-ID so a client can quote it in a bug report.
# Headers are never logged: X-Admin-Password travels there!
class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Middleware for logging HTTP requests and responses."""

    def __init__(self, app: ASGIApp, log_request_body: bool = False) -> None:
        """Initialize middleware.

        Args:
            app: ASGI application
            log_request_body: Whether to log the size of request bodies
        """
        super().__init__(app)
        self.log_request_body = log_request_body

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        set_correlation_id(request.headers.get("X-Correlation-ID"))

        method = request.method
        path = request.url.path
        client_ip = request.client.host if request.client else "unknown"
        quiet = path.startswith(_QUIET_PREFIXES)

        if not quiet:
            extra: dict[str, object] = {
                "method": method,
                "path": path,
                "client_ip": client_ip,
            }
            if self.log_request_body:
                extra["content_length"] = request.headers.get("content-length")
            logger.info("→ %s %s", method, path, extra=extra)

        start_time = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception as e:
            duration_ms = int((time.perf_counter() - start_time) * 1000)
            logger.exception(
                "Request failed: %s %s",
                method,
                path,
                extra={
                    "method": method,
                    "path": path,
                    "duration_ms": duration_ms,
                    "error_type": type(e).__name__,
                },
            )
            raise

        duration_ms = int((time.perf_counter() - start_time) * 1000)
        if not quiet:
            status_mark = "✓" if response.status_code < 400 else "✗"
            logger.info(
                "%s %s %s → %d (%dms)",
                status_mark,
                method,
                path,
                response.status_code,
                duration_ms,
                extra={
                    "method": method,
                    "path": path,
                    "status_code": response.status_code,
                    "duration_ms": duration_ms,
                },
            )

        response.headers["X-Correlation-ID"] = get_correlation_id()
        return response
