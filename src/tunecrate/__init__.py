"""TuneCrate - a small music catalog service with accounts, tracks and uploads."""

__version__ = "1.0.0"
