"""Application use cases - Business logic orchestration."""

from abc import ABC, abstractmethod
from typing import Generic, TypeVar

# Type variables for generic use case pattern
TRequest = TypeVar("TRequest")
TResponse = TypeVar("TResponse")


class UseCase(ABC, Generic[TRequest, TResponse]):
    """Base class for all use cases following command pattern."""

    @abstractmethod
    async def execute(self, request: TRequest) -> TResponse:
        """Execute the use case with the given request."""
        pass


# Import concrete use cases (after UseCase definition to avoid circular imports)
from tunecrate.application.use_cases.upload_track import (  # noqa: E402
    AudioUpload,
    UploadTrackRequest,
    UploadTrackUseCase,
)

__all__ = [
    "UseCase",
    "AudioUpload",
    "UploadTrackRequest",
    "UploadTrackUseCase",
]
