"""Domain entity for uploaded media (images, videos, featured media)."""

from dataclasses import dataclass, field
from datetime import datetime, timezone


@dataclass
class MediaFile:
    """A file held by the storage backend and attached to one article."""

    id: str
    url: str
    filename: str
    mimetype: str
    size: int
    path: str = ""
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
