"""Configuration module for TuneCrate."""

from .settings import (
    DatabaseSettings,
    ObjectStorageSettings,
    ObservabilitySettings,
    SecuritySettings,
    Settings,
    StorageSettings,
    get_settings,
)

__all__ = [
    "DatabaseSettings",
    "ObjectStorageSettings",
    "ObservabilitySettings",
    "SecuritySettings",
    "Settings",
    "StorageSettings",
    "get_settings",
]
