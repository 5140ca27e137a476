"""Upload maintenance endpoints."""

import logging
from datetime import UTC, datetime, timedelta

from fastapi import APIRouter, Depends

from tunecrate.api.dependencies import (
    get_access_guard,
    get_admin_header,
    get_upload_reconciler,
)
from tunecrate.api.schemas import ReconcileRequest, ReconcileResponse
from tunecrate.application.services import UploadReconciler
from tunecrate.domain.ports import IAccessGuard

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/reconcile", response_model=ReconcileResponse)
async def reconcile_uploads(
    body: ReconcileRequest | None = None,
    admin_header: str | None = Depends(get_admin_header),
    guard: IAccessGuard = Depends(get_access_guard),
    reconciler: UploadReconciler = Depends(get_upload_reconciler),
) -> ReconcileResponse:
    """Clean up uploads whose track row was never written.

    Only entries older than olderThanMinutes (default 15) are touched, so uploads
    still in flight are left alone.
    """
    body = body or ReconcileRequest()
    guard.require(body.admin_password or admin_header)
    cutoff = datetime.now(UTC) - timedelta(minutes=body.older_than_minutes)
    summary = await reconciler.sweep(older_than=cutoff)
    return ReconcileResponse(**summary.to_dict())
