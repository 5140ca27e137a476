"""Domain value objects."""

from tunecrate.domain.value_objects.filenames import (
    DEFAULT_AUDIO_EXTENSION,
    sanitize_base_name,
    split_upload_name,
)
from tunecrate.domain.value_objects.preferences import Playlist, Preferences

__all__ = [
    "DEFAULT_AUDIO_EXTENSION",
    "Playlist",
    "Preferences",
    "sanitize_base_name",
    "split_upload_name",
]
