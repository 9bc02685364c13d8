"""Article Mutation Merger — computes the net state of an article for an update.

Pure: no I/O, never mutates the existing article.
"""

import dataclasses
from dataclasses import dataclass, field
from datetime import datetime, timezone

from app.application.schemas import ArticleUpdate
from app.application.services.form_parsing import parse_id_list
from app.application.services.media_upload import UploadedMedia
from app.domain.entities import Article, MediaFile, Tag

_SCALAR_FIELDS = (
    "title",
    "title_ar",
    "content",
    "content_ar",
    "summary",
    "summary_ar",
    "category_id",
)


@dataclass
class RemovalSet:
    """IDs the caller asked to detach from the article."""

    images: list[str] = field(default_factory=list)
    videos: list[str] = field(default_factory=list)
    tags: list[str] = field(default_factory=list)

    @classmethod
    def from_update(cls, changes: ArticleUpdate) -> "RemovalSet":
        return cls(
            images=parse_id_list(changes.removed_images),
            videos=parse_id_list(changes.removed_videos),
            tags=parse_id_list(changes.removed_tags),
        )


class ArticleMutationMerger:
    """Merges a partial update, removal lists and fresh uploads into an article."""

    def files_to_discard(self, existing: Article, removals: RemovalSet) -> list[MediaFile]:
        """Existing images/videos named in the removal lists.

        IDs that do not belong to the article are ignored.
        """
        removed_images = set(removals.images)
        removed_videos = set(removals.videos)
        return [f for f in existing.images if f.id in removed_images] + [
            f for f in existing.videos if f.id in removed_videos
        ]

    def merge(
        self,
        existing: Article,
        changes: ArticleUpdate,
        removals: RemovalSet,
        incoming_tag_ids: list[str],
        uploaded: UploadedMedia,
    ) -> Article:
        """Return a new Article carrying the merged state.

        - images / videos: retained (existing minus removed), then uploaded
        - tags: retained (existing minus removed), then incoming IDs not
          already on the article, as bare references
        - featured media: the new upload if any, else the existing one
        - scalar fields: overwritten only when present in ``changes``
        """
        overrides = {
            name: getattr(changes, name)
            for name in _SCALAR_FIELDS
            if getattr(changes, name) is not None
        }
        if overrides.get("category_id") == "":
            overrides["category_id"] = None

        return dataclasses.replace(
            existing,
            **overrides,
            images=self._merge_files(existing.images, removals.images, uploaded.images),
            videos=self._merge_files(existing.videos, removals.videos, uploaded.videos),
            tags=self._merge_tags(existing.tags, removals.tags, incoming_tag_ids),
            featured_media=uploaded.featured or existing.featured_media,
            updated_at=datetime.now(timezone.utc),
        )

    @staticmethod
    def _merge_files(
        existing: list[MediaFile], removed_ids: list[str], uploaded: list[MediaFile]
    ) -> list[MediaFile]:
        removed = set(removed_ids)
        return [f for f in existing if f.id not in removed] + list(uploaded)

    @staticmethod
    def _merge_tags(existing: list[Tag], removed_ids: list[str], incoming_ids: list[str]) -> list[Tag]:
        removed = set(removed_ids)
        known = {t.id for t in existing}
        retained = [t for t in existing if t.id not in removed]
        added = [Tag.reference(tag_id) for tag_id in dict.fromkeys(incoming_ids) if tag_id not in known]
        return retained + added
