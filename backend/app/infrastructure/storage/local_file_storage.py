"""Local filesystem storage for article media.

Storage layout:
    <upload_dir>/media/<file_id>/<sanitised filename>

The file ID is a UUID; the public URL is ``<media_base_url>/<file_id>/<name>``.
"""

import logging
import re
import shutil
import uuid
from pathlib import Path

from app.application.interfaces import FileDeleter, FileUploader, StoredMedia
from app.domain.exceptions import EntityNotFoundError

logger = logging.getLogger(__name__)

_FILE_ID_PATTERN = re.compile(r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$")


def _sanitise(name: str, max_len: int = 80) -> str:
    """Replace non-word characters with underscores and truncate, keeping the extension."""
    path = Path(name)
    stem = re.sub(r"[^\w\-]", "_", path.stem)[:max_len].strip("_") or "unnamed"
    suffix = re.sub(r"[^\w.]", "", path.suffix)[:10]
    return f"{stem}{suffix}"


class LocalMediaStorage(FileUploader, FileDeleter):
    """Infrastructure adapter storing uploads on the local disk."""

    def __init__(self, upload_dir: str, media_base_url: str = "/media"):
        self._root = Path(upload_dir) / "media"
        self._root.mkdir(parents=True, exist_ok=True)
        self._base_url = media_base_url.rstrip("/")

    async def upload_file(self, content: bytes, filename: str, mimetype: str) -> StoredMedia:
        """Write ``content`` under a fresh file ID."""
        file_id = str(uuid.uuid4())
        stored_name = _sanitise(filename)

        file_dir = self._root / file_id
        file_dir.mkdir(parents=True, exist_ok=False)
        dest_path = file_dir / stored_name
        dest_path.write_bytes(content)

        logger.info("Stored media: %s (%s, %d bytes)", dest_path, mimetype, len(content))

        return StoredMedia(
            id=file_id,
            url=f"{self._base_url}/{file_id}/{stored_name}",
            path=str(dest_path),
        )

    async def delete_file(self, file_id: str) -> None:
        """Remove a stored file and its directory.

        Raises ``EntityNotFoundError`` if no file is stored under ``file_id``.
        """
        if not _FILE_ID_PATTERN.match(file_id):
            raise ValueError(f"Invalid media file ID: {file_id!r}")

        file_dir = self._root / file_id
        if not file_dir.is_dir():
            raise EntityNotFoundError("MediaFile", file_id)

        shutil.rmtree(file_dir)
        logger.info("Deleted media from disk: %s", file_dir)
