"""Infrastructure persistence layer."""

from .database import Database
from .models import Base, PendingUploadModel, TrackModel, UserModel
from .repositories import AccountRepository, PendingUploadRepository, TrackRepository
from .schema import ADDITIVE_COLUMNS, ColumnMigration, SchemaManager

__all__ = [
    # Database
    "Database",
    "Base",
    # Schema
    "ADDITIVE_COLUMNS",
    "ColumnMigration",
    "SchemaManager",
    # Models
    "PendingUploadModel",
    "TrackModel",
    "UserModel",
    # Repositories
    "AccountRepository",
    "PendingUploadRepository",
    "TrackRepository",
]
