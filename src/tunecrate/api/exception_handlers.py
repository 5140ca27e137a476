"""Custom exception handlers for FastAPI application.

This module registers global exception handlers that convert domain exceptions
and validation errors into HTTP responses. Every error body has the same shape:

    {"error": "<stable code>", "detail": "<human readable message>"}
"""

import logging
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from tunecrate.domain.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConfigurationError,
    DomainException,
    DuplicateEntityException,
    EntityNotFoundException,
    StorageFailureError,
    ValidationError,
)

logger = logging.getLogger(__name__)

# Codes for framework-level HTTP errors (unknown route, wrong method, ...)
_HTTP_ERROR_CODES = {
    status.HTTP_401_UNAUTHORIZED: AuthenticationError.code,
    status.HTTP_403_FORBIDDEN: AuthorizationError.code,
    status.HTTP_404_NOT_FOUND: EntityNotFoundException.code,
    status.HTTP_405_METHOD_NOT_ALLOWED: "method_not_allowed",
}


def error_body(code: str, detail: Any) -> dict[str, Any]:
    return {"error": code, "detail": detail}


def _sanitize_validation_errors(errors: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Drop the raw 'input' and 'ctx' values, they can hold bytes and secrets."""
    return [
        {key: value for key, value in error.items() if key not in ("input", "ctx")}
        for error in errors
    ]


# Hey future me, this registers GLOBAL exception handlers for the entire app! Services raise
# domain exceptions, the status code is decided ONLY here. Call it during create_app(),
# before any request arrives. Starlette picks the handler of the closest class in the MRO,
# so DuplicateAccountError lands in the DuplicateEntityException handler and so on.
def register_exception_handlers(app: FastAPI) -> None:
    """Register handlers for domain, request-validation and database exceptions.

    Args:
        app: FastAPI application instance
    """

    @app.exception_handler(ValidationError)
    async def validation_exception_handler(
        request: Request, exc: ValidationError
    ) -> JSONResponse:
        """Handle domain validation exceptions with 400 Bad Request."""
        logger.info(
            "Validation error at %s: %s",
            request.url.path,
            exc.message,
            extra={"path": request.url.path, "error": exc.message},
        )
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=error_body(exc.code, exc.message),
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        """Malformed request bodies are client errors like any other validation failure."""
        errors = _sanitize_validation_errors(list(exc.errors()))
        logger.info(
            "Request validation error at %s",
            request.url.path,
            extra={"path": request.url.path, "errors": errors},
        )
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=error_body(ValidationError.code, errors),
        )

    @app.exception_handler(EntityNotFoundException)
    async def entity_not_found_exception_handler(
        request: Request, exc: EntityNotFoundException
    ) -> JSONResponse:
        """Handle entity not found exceptions with 404 Not Found."""
        logger.info(
            "Entity not found at %s: %s %s",
            request.url.path,
            exc.entity_type,
            exc.entity_id,
            extra={
                "path": request.url.path,
                "entity_type": exc.entity_type,
                "entity_id": exc.entity_id,
            },
        )
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content=error_body(exc.code, exc.message),
        )

    @app.exception_handler(DuplicateEntityException)
    async def duplicate_entity_exception_handler(
        request: Request, exc: DuplicateEntityException
    ) -> JSONResponse:
        """Handle duplicate entity exceptions with 409 Conflict."""
        logger.info(
            "Duplicate %s at %s",
            exc.entity_type,
            request.url.path,
            extra={"path": request.url.path, "entity_type": exc.entity_type},
        )
        return JSONResponse(
            status_code=status.HTTP_409_CONFLICT,
            content=error_body(exc.code, exc.message),
        )

    @app.exception_handler(AuthenticationError)
    async def authentication_exception_handler(
        request: Request, exc: AuthenticationError
    ) -> JSONResponse:
        """Handle failed logins with 401 Unauthorized."""
        logger.info("Authentication failed at %s", request.url.path)
        return JSONResponse(
            status_code=status.HTTP_401_UNAUTHORIZED,
            content=error_body(exc.code, exc.message),
        )

    @app.exception_handler(AuthorizationError)
    async def authorization_exception_handler(
        request: Request, exc: AuthorizationError
    ) -> JSONResponse:
        """Handle rejected admin secrets with 403 Forbidden."""
        # Never log the submitted token
        logger.warning(
            "Forbidden %s %s",
            request.method,
            request.url.path,
            extra={"path": request.url.path, "method": request.method},
        )
        return JSONResponse(
            status_code=status.HTTP_403_FORBIDDEN,
            content=error_body(exc.code, exc.message),
        )

    @app.exception_handler(StorageFailureError)
    async def storage_failure_exception_handler(
        request: Request, exc: StorageFailureError
    ) -> JSONResponse:
        """Handle store failures: 502 for object storage, 500 otherwise."""
        logger.error(
            "Storage failure (%s) at %s: %s",
            exc.backend,
            request.url.path,
            exc.message,
            extra={"path": request.url.path, "backend": exc.backend},
        )
        status_code = (
            status.HTTP_502_BAD_GATEWAY
            if exc.backend == "object_storage"
            else status.HTTP_500_INTERNAL_SERVER_ERROR
        )
        return JSONResponse(
            status_code=status_code, content=error_body(exc.code, exc.message)
        )

    @app.exception_handler(ConfigurationError)
    async def configuration_exception_handler(
        request: Request, exc: ConfigurationError
    ) -> JSONResponse:
        """Handle misconfiguration with 503 Service Unavailable."""
        logger.error("Configuration error at %s: %s", request.url.path, exc.message)
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content=error_body(exc.code, exc.message),
        )

    @app.exception_handler(DomainException)
    async def domain_exception_handler(
        request: Request, exc: DomainException
    ) -> JSONResponse:
        """Catch-all for domain exceptions without a dedicated handler."""
        logger.error(
            "Unhandled domain exception at %s: %s",
            request.url.path,
            exc.message,
            extra={"path": request.url.path, "error_type": type(exc).__name__},
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=error_body(exc.code, exc.message),
        )

    @app.exception_handler(SQLAlchemyError)
    async def database_exception_handler(
        request: Request, exc: SQLAlchemyError
    ) -> JSONResponse:
        """Unexpected database errors become storage failures."""
        logger.error(
            "Database error at %s: %s",
            request.url.path,
            exc,
            exc_info=exc,
            extra={"path": request.url.path},
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=error_body(StorageFailureError.code, "Database error"),
        )

    @app.exception_handler(ValueError)
    async def value_error_exception_handler(
        request: Request, exc: ValueError
    ) -> JSONResponse:
        """ValueError escaping a library call is treated as bad input."""
        logger.warning(
            "Value error at %s: %s",
            request.url.path,
            str(exc),
            extra={"path": request.url.path, "error": str(exc)},
        )
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=error_body(ValidationError.code, str(exc)),
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        """Framework HTTP errors (404 route, 405 method) in the same body shape."""
        log = logger.error if exc.status_code >= 500 else logger.info
        log(
            "HTTP error %d at %s: %s",
            exc.status_code,
            request.url.path,
            exc.detail,
            extra={
                "path": request.url.path,
                "status_code": exc.status_code,
                "detail": exc.detail,
            },
        )
        code = _HTTP_ERROR_CODES.get(exc.status_code, "http_error")
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(code, exc.detail),
            headers=getattr(exc, "headers", None),
        )

    # Hey future me - last resort. Starlette still re-raises after this runs (so the
    # traceback reaches the server log), but the client gets our JSON body instead of
    # plain-text "Internal Server Error". Never put exception text in the body here.
    @app.exception_handler(Exception)
    async def unhandled_exception_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        logger.error(
            "Unhandled error at %s: %s",
            request.url.path,
            type(exc).__name__,
            extra={"path": request.url.path, "error_type": type(exc).__name__},
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=error_body("internal_error", "Internal server error"),
        )
