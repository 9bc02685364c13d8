"""Media Upload Coordinator — uploads article media and discards replaced files.

Uploads within a group (images, videos) run concurrently; the groups run
one after another: featured media, then images, then videos. A failing
upload cancels the rest of its group and aborts the batch with
``MediaUploadError``. Files that were already stored are left in place;
rolling back the owning article is the caller's job.

Discards are best-effort: failures are logged and never raised.
"""

import asyncio
import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime, timezone

from app.application.interfaces import FileDeleter, FileUploader
from app.domain.entities import MediaFile
from app.domain.exceptions import MediaUploadError

logger = logging.getLogger(__name__)


@dataclass
class IncomingFile:
    """A raw file taken from the request."""

    content: bytes
    filename: str
    mimetype: str = "application/octet-stream"

    @property
    def size(self) -> int:
        return len(self.content)

    @property
    def is_empty(self) -> bool:
        return not self.content


@dataclass
class MediaBatch:
    featured: IncomingFile | None = None
    images: list[IncomingFile] = field(default_factory=list)
    videos: list[IncomingFile] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        files = [self.featured] if self.featured else []
        return all(f.is_empty for f in files + self.images + self.videos)


@dataclass
class UploadedMedia:
    featured: MediaFile | None = None
    images: list[MediaFile] = field(default_factory=list)
    videos: list[MediaFile] = field(default_factory=list)

    @property
    def count(self) -> int:
        return (1 if self.featured else 0) + len(self.images) + len(self.videos)


class MediaUploadCoordinator:
    """Coordinates uploads to, and deletions from, the storage backend."""

    def __init__(self, uploader: FileUploader, deleter: FileDeleter):
        self._uploader = uploader
        self._deleter = deleter

    async def upload(self, batch: MediaBatch) -> UploadedMedia:
        """Upload every non-empty file of the batch and return the stored records."""
        result = UploadedMedia()
        if batch.is_empty:
            return result
        if batch.featured is not None and not batch.featured.is_empty:
            result.featured = await self._upload_one(batch.featured)
        result.images = await self._upload_group(batch.images)
        result.videos = await self._upload_group(batch.videos)
        return result

    async def discard(self, files: Iterable[MediaFile], reason: str) -> int:
        """Delete files from storage, best-effort. Returns how many were removed."""
        targets = [f for f in files if f is not None]
        if not targets:
            return 0
        # _discard_one never raises, so no sibling is ever cancelled here
        async with asyncio.TaskGroup() as group:
            tasks = [group.create_task(self._discard_one(f, reason)) for f in targets]
        removed = sum(1 for task in tasks if task.result())
        logger.info("Discarded %d/%d file(s) (%s)", removed, len(targets), reason)
        return removed

    # ── Internals ────────────────────────────────────────────────────

    async def _upload_group(self, files: list[IncomingFile]) -> list[MediaFile]:
        pending = [f for f in files if not f.is_empty]
        if not pending:
            return []
        try:
            async with asyncio.TaskGroup() as group:
                tasks = [group.create_task(self._upload_one(f)) for f in pending]
        except ExceptionGroup as failed:
            # Siblings are cancelled and awaited by the group; surface the first failure
            raise failed.exceptions[0]
        return [task.result() for task in tasks]

    async def _upload_one(self, file: IncomingFile) -> MediaFile:
        try:
            stored = await self._uploader.upload_file(file.content, file.filename, file.mimetype)
        except MediaUploadError:
            raise
        except Exception as exc:
            raise MediaUploadError(file.filename, str(exc) or type(exc).__name__) from exc

        now = datetime.now(timezone.utc)
        return MediaFile(
            id=stored.id,
            url=stored.url,
            filename=file.filename,
            mimetype=file.mimetype,
            size=file.size,
            path=stored.path or "",
            created_at=now,
            updated_at=now,
        )

    async def _discard_one(self, file: MediaFile, reason: str) -> bool:
        try:
            await self._deleter.delete_file(file.id)
        except Exception as exc:
            logger.error("Failed to delete file %s (%s): %s", file.id, reason, exc)
            return False
        return True
