"""Domain entities — pure Python business objects, no framework dependencies."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

from app.domain.entities.media_file import MediaFile
from app.domain.entities.tag import Tag
from app.domain.exceptions import InvalidStatusTransitionError


class ArticleStatus(str, Enum):
    """Lifecycle states of an article."""

    DRAFT = "draft"
    PUBLISHED = "published"
    ARCHIVED = "archived"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Article:
    """Core domain entity representing a bilingual news article.

    ``author_id`` / ``author_email`` are fixed at creation. ``published_at``
    is set on the first transition to published and never cleared.
    """

    title: str
    title_ar: str
    author_id: str
    author_email: str
    id: str | None = None
    content: str | None = None
    content_ar: str | None = None
    summary: str | None = None
    summary_ar: str | None = None
    category_id: str | None = None
    status: ArticleStatus = ArticleStatus.DRAFT
    tags: list[Tag] = field(default_factory=list)
    images: list[MediaFile] = field(default_factory=list)
    videos: list[MediaFile] = field(default_factory=list)
    featured_media: MediaFile | None = None
    slug: str | None = None
    slug_ar: str | None = None
    views: int = 0
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)
    published_at: datetime | None = None

    @property
    def tag_ids(self) -> list[str]:
        return [t.id for t in self.tags if t.id]

    @property
    def media_files(self) -> list[MediaFile]:
        """All attached files: featured first, then images, then videos."""
        files = [self.featured_media] if self.featured_media else []
        return files + list(self.images) + list(self.videos)

    def is_owned_by(self, user_id: str) -> bool:
        return self.author_id == user_id

    # ── Lifecycle ────────────────────────────────────────────────────

    def publish(self) -> None:
        """Transition to published from any status; ``published_at`` is only set the first time."""
        self.status = ArticleStatus.PUBLISHED
        if self.published_at is None:
            self.published_at = _utcnow()
        self.updated_at = _utcnow()

    def unpublish(self) -> None:
        if self.status != ArticleStatus.PUBLISHED:
            raise InvalidStatusTransitionError(self.id, self.status.value, "unpublish")
        self.status = ArticleStatus.DRAFT
        self.updated_at = _utcnow()

    def archive(self) -> None:
        if self.status == ArticleStatus.ARCHIVED:
            raise InvalidStatusTransitionError(self.id, self.status.value, "archive")
        self.status = ArticleStatus.ARCHIVED
        self.updated_at = _utcnow()

    def restore(self) -> None:
        """Bring an archived article back to draft."""
        if self.status != ArticleStatus.ARCHIVED:
            raise InvalidStatusTransitionError(self.id, self.status.value, "unarchive")
        self.status = ArticleStatus.DRAFT
        self.updated_at = _utcnow()

    # ── Tags ─────────────────────────────────────────────────────────

    def add_tags(self, tags: list[Tag]) -> list[Tag]:
        """Link tags not yet present. Returns the ones actually added."""
        known = set(self.tag_ids)
        added: list[Tag] = []
        for tag in tags:
            if tag.id in known:
                continue
            known.add(tag.id)
            self.tags.append(tag)
            added.append(tag)
        if added:
            self.updated_at = _utcnow()
        return added

    def remove_tag(self, tag_id: str) -> bool:
        """Unlink a tag. The Tag entity itself is left alone."""
        remaining = [t for t in self.tags if t.id != tag_id]
        if len(remaining) == len(self.tags):
            return False
        self.tags = remaining
        self.updated_at = _utcnow()
        return True
