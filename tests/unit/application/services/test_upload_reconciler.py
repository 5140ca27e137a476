"""Tests for the pending-upload reconciliation sweep."""

from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest

from tunecrate.application.services import ReconcileSummary, UploadReconciler
from tunecrate.domain.entities import PendingUploadStatus
from tunecrate.domain.exceptions import StorageFailureError
from tunecrate.infrastructure.persistence import (
    Database,
    PendingUploadRepository,
    TrackRepository,
)
from tunecrate.infrastructure.storage import LocalUploadStore, SupabaseStorageClient

PUBLIC_PREFIX = "https://demo.supabase.co/storage/v1/object/public/music/"


def later() -> datetime:
    return datetime.now(UTC) + timedelta(minutes=1)


async def open_entry(
    database: Database,
    file_name: str,
    public_url: str,
    local_path: Path | None = None,
    storage_key: str | None = None,
) -> int:
    async with database.session_scope() as session:
        entry = await PendingUploadRepository(session).add(
            file_name=file_name,
            public_url=public_url,
            local_path=str(local_path) if local_path else None,
            storage_key=storage_key,
        )
    return entry.id


async def status_of(database: Database, entry_id: int) -> PendingUploadStatus:
    async with database.session_scope() as session:
        entry = await PendingUploadRepository(session).get_by_id(entry_id)
    assert entry is not None
    return entry.status


async def test_orphaned_local_file_is_removed(
    database: Database, upload_store: LocalUploadStore
) -> None:
    staged = await upload_store.stage("lost.mp3", b"bytes")
    entry_id = await open_entry(
        database, staged.name, upload_store.url_for(staged.name), staged.path
    )

    summary = await UploadReconciler(database.session_scope, upload_store).sweep(later())

    assert summary == ReconcileSummary(checked=1, reconciled=1)
    assert not staged.path.exists()
    assert await status_of(database, entry_id) == PendingUploadStatus.RECONCILED


async def test_entry_whose_track_exists_is_committed(
    database: Database, upload_store: LocalUploadStore
) -> None:
    staged = await upload_store.stage("kept.mp3", b"bytes")
    url = upload_store.url_for(staged.name)
    entry_id = await open_entry(database, staged.name, url, staged.path)
    async with database.session_scope() as session:
        track = await TrackRepository(session).add(title="Kept", url=url)

    summary = await UploadReconciler(database.session_scope, upload_store).sweep(later())

    assert summary.committed == 1
    assert staged.path.exists()
    async with database.session_scope() as session:
        entry = await PendingUploadRepository(session).get_by_id(entry_id)
    assert entry is not None
    assert entry.status == PendingUploadStatus.COMMITTED
    assert entry.track_id == track.id


async def test_orphaned_remote_object_is_deleted_by_key(
    database: Database,
    upload_store: LocalUploadStore,
    object_storage: SupabaseStorageClient,
    fake_object_store,
) -> None:
    fake_object_store.objects["1_remote.mp3"] = b"bytes"
    await open_entry(
        database,
        "1_remote.mp3",
        PUBLIC_PREFIX + "1_remote.mp3",
        upload_store.directory / "1_remote.mp3",
        storage_key="1_remote.mp3",
    )

    summary = await UploadReconciler(
        database.session_scope, upload_store, object_storage
    ).sweep(later())

    assert summary.reconciled == 1
    assert fake_object_store.objects == {}
    deletes = fake_object_store.requests_with("DELETE")
    assert [r.url.path for r in deletes] == ["/storage/v1/object/music/1_remote.mp3"]


async def test_remote_entry_without_storage_client_counts_as_error(
    database: Database, upload_store: LocalUploadStore
) -> None:
    entry_id = await open_entry(
        database, "2_x.mp3", PUBLIC_PREFIX + "2_x.mp3", storage_key="2_x.mp3"
    )

    summary = await UploadReconciler(database.session_scope, upload_store).sweep(later())

    assert summary == ReconcileSummary(checked=1, errors=1)
    assert await status_of(database, entry_id) == PendingUploadStatus.FAILED


async def test_storage_failure_keeps_entry_open_for_next_sweep(
    database: Database,
    upload_store: LocalUploadStore,
    object_storage: SupabaseStorageClient,
    mocker,
) -> None:
    entry_id = await open_entry(
        database, "3_x.mp3", PUBLIC_PREFIX + "3_x.mp3", storage_key="3_x.mp3"
    )
    mocker.patch.object(
        object_storage,
        "delete",
        side_effect=StorageFailureError("boom", backend="object_storage"),
    )
    reconciler = UploadReconciler(database.session_scope, upload_store, object_storage)

    first = await reconciler.sweep(later())
    second = await reconciler.sweep(later())

    assert first.errors == 1
    assert second.checked == 1
    assert await status_of(database, entry_id) == PendingUploadStatus.FAILED


async def test_recent_and_closed_entries_are_ignored(
    database: Database, upload_store: LocalUploadStore
) -> None:
    entry_id = await open_entry(database, "4_x.mp3", "/uploads/4_x.mp3")
    async with database.session_scope() as session:
        await PendingUploadRepository(session).mark(
            entry_id, PendingUploadStatus.COMMITTED, track_id=1
        )
    await open_entry(database, "5_x.mp3", "/uploads/5_x.mp3")

    reconciler = UploadReconciler(database.session_scope, upload_store)
    summary = await reconciler.sweep(datetime.now(UTC) - timedelta(hours=1))

    assert summary.checked == 0
    assert (await reconciler.sweep(later())).checked == 1


@pytest.mark.parametrize("missing_file", [True, False])
async def test_local_file_already_gone_still_reconciles(
    database: Database, upload_store: LocalUploadStore, missing_file: bool
) -> None:
    path = upload_store.directory / "6_x.mp3"
    if not missing_file:
        path.write_bytes(b"x")
    entry_id = await open_entry(database, "6_x.mp3", "/uploads/6_x.mp3", path)

    await UploadReconciler(database.session_scope, upload_store).sweep(later())

    assert not path.exists()
    assert await status_of(database, entry_id) == PendingUploadStatus.RECONCILED
