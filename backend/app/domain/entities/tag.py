"""Domain entity for tags — shared labels linked to many articles."""

from dataclasses import dataclass, field
from datetime import datetime, timezone


@dataclass
class Tag:
    """A bilingual label. Tags have no owner and outlive the articles they are linked to."""

    name: str
    id: str | None = None
    name_ar: str | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def reference(cls, tag_id: str) -> "Tag":
        """A bare reference by ID; name and timestamps are not known yet."""
        return cls(name="", id=tag_id)
