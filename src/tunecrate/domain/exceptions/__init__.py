"""Domain exceptions.

Every exception carries a stable ``code`` so the API layer can return a
machine-readable category next to the human-readable message.
"""

from typing import Any


class DomainException(Exception):
    """Base exception for all domain exceptions."""

    code: str = "domain_error"

    # Hey future me, we store message as an attribute so code can inspect it without parsing
    # str(exception). This is your base class - DON'T raise it directly! Always use a specific
    # subclass so callers (and the exception handlers) can catch precisely.
    def __init__(self, message: str, *args: Any) -> None:
        super().__init__(message, *args)
        self.message = message


class EntityNotFoundException(DomainException):
    """Raised when an entity is not found."""

    code = "not_found"

    # Yo, this is for "get by ID" operations that fail - Track 123 doesn't exist, User 7 not found.
    # entity_type and entity_id are kept separately so error handlers can log them structured.
    def __init__(self, entity_type: str, entity_id: Any) -> None:
        super().__init__(f"{entity_type} with id {entity_id} not found")
        self.entity_type = entity_type
        self.entity_id = entity_id


class ValidationError(DomainException):
    """Input validation failed.

    Raised when input data is missing or malformed (empty title, likes that are
    not a list, playlist without a name). Always client-correctable.

    HTTP Status: 400
    """

    code = "validation_error"


class DuplicateEntityException(DomainException):
    """Raised when trying to create a duplicate entity."""

    code = "already_exists"

    def __init__(self, entity_type: str, entity_id: Any) -> None:
        super().__init__(f"{entity_type} with id {entity_id} already exists")
        self.entity_type = entity_type
        self.entity_id = entity_id


class DuplicateAccountError(DuplicateEntityException):
    """Registration hit an email that already exists (after normalization).

    HTTP Status: 409
    """

    def __init__(self, email: str) -> None:
        super().__init__("User", email)
        self.message = "User already exists"
        self.email = email


class AuthenticationError(DomainException):
    """Caller could not be authenticated.

    HTTP Status: 401
    """

    code = "authentication_failed"


class InvalidCredentialsError(AuthenticationError):
    """Login failed.

    Listen up - the message is deliberately the same for "no such account" and
    "wrong password". Never add the reason here, that leaks which emails exist!

    HTTP Status: 401
    """

    code = "invalid_credentials"

    def __init__(self) -> None:
        super().__init__("Invalid email or password")


class AuthorizationError(DomainException):
    """Caller is not allowed to perform the mutation (shared secret check failed).

    HTTP Status: 403
    """

    code = "forbidden"

    def __init__(self, message: str = "Forbidden. Invalid admin password.") -> None:
        super().__init__(message)


class StorageFailureError(DomainException):
    """The relational store or the object store returned an unexpected error.

    ``backend`` is "database", "object_storage" or "filesystem" so handlers can
    pick a status code and operators can grep logs.

    HTTP Status: 500 (502 for object_storage)
    """

    code = "storage_failure"

    def __init__(self, message: str, backend: str = "database") -> None:
        super().__init__(message)
        self.backend = backend


class SchemaMigrationError(DomainException):
    """DDL failed while ensuring the schema at startup. Fatal."""

    code = "schema_migration_failed"


class ConfigurationError(DomainException):
    """Application misconfiguration.

    HTTP Status: 503
    """

    code = "configuration_error"


# Short aliases used by the API layer and tests
NotFound = EntityNotFoundException
Forbidden = AuthorizationError
DuplicateAccount = DuplicateAccountError
InvalidCredentials = InvalidCredentialsError
StorageFailure = StorageFailureError

__all__ = [
    "DomainException",
    "EntityNotFoundException",
    "NotFound",
    "ValidationError",
    "DuplicateEntityException",
    "DuplicateAccountError",
    "DuplicateAccount",
    "AuthenticationError",
    "InvalidCredentialsError",
    "InvalidCredentials",
    "AuthorizationError",
    "Forbidden",
    "StorageFailureError",
    "StorageFailure",
    "SchemaMigrationError",
    "ConfigurationError",
]
