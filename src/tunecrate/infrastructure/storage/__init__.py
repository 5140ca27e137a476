"""File storage: local uploads directory and remote object storage."""

from .local import FileJanitor, LocalUploadStore, StagedFile
from .object_storage import SupabaseStorageClient

__all__ = ["FileJanitor", "LocalUploadStore", "StagedFile", "SupabaseStorageClient"]
