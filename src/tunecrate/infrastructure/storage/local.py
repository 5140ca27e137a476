"""Local upload directory: staging, local serving and file removal."""

import asyncio
import logging
import threading
import time
from dataclasses import dataclass
from pathlib import Path

from tunecrate.domain.entities import LOCAL_UPLOAD_PREFIX
from tunecrate.domain.value_objects import DEFAULT_AUDIO_EXTENSION, split_upload_name

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StagedFile:
    """A payload written to the uploads directory."""

    name: str
    path: Path
    size: int


class LocalUploadStore:
    """Writes uploads into one shared directory.

    Hey future me - every request writes its OWN file, so there's no locking around the
    directory. Names are "<ms-timestamp>_<sanitized-base><ext>". The timestamp comes from a
    process-wide counter that never hands out the same millisecond twice, and the file is
    opened with "xb" (exclusive create), so even two processes can't clobber each other -
    the loser just bumps the counter and retries.
    """

    _clock_lock = threading.Lock()
    _last_stamp = 0

    def __init__(
        self, directory: Path, default_extension: str = DEFAULT_AUDIO_EXTENSION
    ) -> None:
        self.directory = Path(directory)
        self.default_extension = default_extension

    def ensure_directory(self) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)

    @classmethod
    def _next_stamp(cls) -> int:
        with cls._clock_lock:
            stamp = max(time.time_ns() // 1_000_000, cls._last_stamp + 1)
            cls._last_stamp = stamp
            return stamp

    def build_name(self, original_name: str | None) -> str:
        base, extension = split_upload_name(original_name, self.default_extension)
        return f"{self._next_stamp()}_{base}{extension}"

    @staticmethod
    def url_for(name: str) -> str:
        """Local-serving URL for a staged file name."""
        return LOCAL_UPLOAD_PREFIX + name

    def path_for_url(self, url: str) -> Path | None:
        """Map a local-serving URL back to its file. None for remote or unsafe URLs."""
        if not url.startswith(LOCAL_UPLOAD_PREFIX):
            return None
        name = url[len(LOCAL_UPLOAD_PREFIX) :]
        # Only plain file names inside the directory - never follow "../" or subpaths
        if not name or "/" in name or "\\" in name or name in (".", ".."):
            return None
        return self.directory / name

    async def stage(self, original_name: str | None, data: bytes) -> StagedFile:
        """Write data under a fresh collision-resistant name."""
        return await asyncio.to_thread(self._stage_sync, original_name, data)

    def _stage_sync(self, original_name: str | None, data: bytes) -> StagedFile:
        self.ensure_directory()
        while True:
            name = self.build_name(original_name)
            path = self.directory / name
            try:
                with path.open("xb") as fh:
                    fh.write(data)
            except FileExistsError:
                logger.debug("Staging name %s taken, retrying", name)
                continue
            except OSError:
                # Partially written file must not survive
                path.unlink(missing_ok=True)
                raise
            return StagedFile(name=name, path=path, size=len(data))

    async def remove(self, path: Path) -> bool:
        """Delete path. Returns False when it was already gone."""
        return await asyncio.to_thread(self._remove_sync, path)

    @staticmethod
    def _remove_sync(path: Path) -> bool:
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        return True


class FileJanitor:
    """Best-effort background file removal.

    Listen up - track deletion must answer fast and must NEVER fail because a file couldn't
    be removed. So removal is fired as a task and errors only end up in the log. We keep a
    reference to every task (asyncio only keeps weak refs!) and drain() them at shutdown.
    """

    def __init__(self, store: LocalUploadStore) -> None:
        self._store = store
        self._tasks: set[asyncio.Task[None]] = set()

    @property
    def pending(self) -> int:
        return len(self._tasks)

    def schedule_removal(self, path: Path) -> None:
        task = asyncio.create_task(self._remove(path))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _remove(self, path: Path) -> None:
        try:
            removed = await self._store.remove(path)
        except OSError as e:
            logger.warning("Could not remove %s: %s", path, e)
            return
        if removed:
            logger.info("Removed file %s", path.name)
        else:
            logger.debug("File %s was already gone", path.name)

    async def drain(self) -> None:
        """Wait for every scheduled removal to finish."""
        if self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
