"""Ports for the media storage backend — upload and delete are separate concerns."""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass
class StoredMedia:
    """What the storage backend hands back after an upload."""

    id: str
    url: str
    path: str | None = None


class FileUploader(ABC):
    """Stores raw bytes and returns an addressable record."""

    @abstractmethod
    async def upload_file(self, content: bytes, filename: str, mimetype: str) -> StoredMedia:
        ...


class FileDeleter(ABC):
    """Removes a previously uploaded file by its storage ID."""

    @abstractmethod
    async def delete_file(self, file_id: str) -> None:
        """Delete the file. Raises if the backend could not remove it."""
        ...
