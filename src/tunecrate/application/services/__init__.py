"""Application services."""

from tunecrate.application.services.account_service import AccountService
from tunecrate.application.services.track_service import TrackService
from tunecrate.application.services.upload_reconciler import (
    ReconcileSummary,
    UploadReconciler,
)

__all__ = ["AccountService", "ReconcileSummary", "TrackService", "UploadReconciler"]
