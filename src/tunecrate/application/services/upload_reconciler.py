"""Reconciliation sweep for the pending-upload ledger.

Hey future me - the upload pipeline can store bytes (local file or remote object) and then
fail to write the track row. Those uploads stay "pending"/"failed" in the ledger. This sweep
looks at every open entry older than a cutoff and either:
- finds the track after all (row was written, only the ledger update got lost) -> committed
- or deletes the orphaned bytes and marks the entry reconciled.
Remote objects are deleted by their bucket key through the storage API. NEVER derive a key
from a public URL, that's how you end up deleting someone else's object.
"""

import logging
from collections.abc import Callable
from contextlib import AbstractAsyncContextManager
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from tunecrate.domain.entities import PendingUpload, PendingUploadStatus
from tunecrate.domain.exceptions import ConfigurationError, StorageFailureError
from tunecrate.domain.ports import IObjectStorage
from tunecrate.infrastructure.persistence import (
    PendingUploadRepository,
    TrackRepository,
)
from tunecrate.infrastructure.storage import LocalUploadStore

logger = logging.getLogger(__name__)

SessionScope = Callable[[], AbstractAsyncContextManager[AsyncSession]]


@dataclass
class ReconcileSummary:
    """Counters of one sweep."""

    checked: int = 0
    committed: int = 0
    reconciled: int = 0
    errors: int = 0

    def to_dict(self) -> dict[str, int]:
        return {
            "checked": self.checked,
            "committed": self.committed,
            "reconciled": self.reconciled,
            "errors": self.errors,
        }


class UploadReconciler:
    """Closes open ledger entries left behind by failed uploads."""

    def __init__(
        self,
        session_scope: SessionScope,
        store: LocalUploadStore,
        object_storage: IObjectStorage | None = None,
    ):
        self._session_scope = session_scope
        self._store = store
        self._object_storage = object_storage

    async def sweep(self, older_than: datetime) -> ReconcileSummary:
        """Reconcile every open entry created before older_than."""
        async with self._session_scope() as session:
            entries = await PendingUploadRepository(session).list_open(older_than)

        summary = ReconcileSummary()
        for entry in entries:
            summary.checked += 1
            try:
                if await self._reconcile(entry):
                    summary.committed += 1
                else:
                    summary.reconciled += 1
            except (
                StorageFailureError,
                ConfigurationError,
                SQLAlchemyError,
                OSError,
            ) as e:
                summary.errors += 1
                logger.warning(
                    "Could not reconcile upload %s: %s",
                    entry.id,
                    e,
                    extra={"pending_upload_id": entry.id},
                )
                await self._mark_failed(entry, str(e))

        logger.info(
            "Upload reconciliation finished: %d checked, %d committed, %d reconciled, "
            "%d errors",
            summary.checked,
            summary.committed,
            summary.reconciled,
            summary.errors,
        )
        return summary

    async def _reconcile(self, entry: PendingUpload) -> bool:
        """Return True when the track exists, False when the bytes were removed."""
        async with self._session_scope() as session:
            track = await TrackRepository(session).get_by_url(entry.public_url)
            if track is not None:
                await PendingUploadRepository(session).mark(
                    entry.id, PendingUploadStatus.COMMITTED, track_id=track.id
                )
                return True

        if entry.storage_key:
            if self._object_storage is None:
                raise ConfigurationError(
                    "Object storage is not configured, cannot delete remote object"
                )
            await self._object_storage.delete(entry.storage_key)

        if entry.local_path:
            await self._store.remove(Path(entry.local_path))

        async with self._session_scope() as session:
            await PendingUploadRepository(session).mark(
                entry.id, PendingUploadStatus.RECONCILED
            )
        logger.info(
            "Removed orphaned upload %s",
            entry.file_name,
            extra={"pending_upload_id": entry.id},
        )
        return False

    async def _mark_failed(self, entry: PendingUpload, error: str) -> None:
        try:
            async with self._session_scope() as session:
                await PendingUploadRepository(session).mark(
                    entry.id, PendingUploadStatus.FAILED, error=error
                )
        except SQLAlchemyError as e:
            logger.error("Could not update ledger entry %s: %s", entry.id, e)
