"""HTTP API for TuneCrate.

- routers/: endpoints, aggregated into `api_router` and mounted under /api
- schemas/: pydantic request/response models
- dependencies.py: dependency injection (services, guard, sessions)
- exception_handlers.py: domain exception to HTTP translation
"""

from tunecrate.api.exception_handlers import register_exception_handlers
from tunecrate.api.routers import api_router

__all__ = ["api_router", "register_exception_handlers"]
