"""Tag Resolver — turns tag IDs and inline tag specs into Tag entities."""

import logging
import uuid
from datetime import datetime, timezone

from app.application.interfaces import TagRepository
from app.application.services.form_parsing import TagSpec
from app.domain.entities import Tag
from app.domain.exceptions import ArticleWorkflowError, TagNotFoundError

logger = logging.getLogger(__name__)


class TagResolver:
    """Resolves existing tags by ID and creates new ones from inline specs.

    New tags are never matched against existing ones by name: two specs
    named "Economy" produce two distinct tags.
    """

    def __init__(self, repository: TagRepository):
        self._repository = repository

    async def resolve(
        self,
        existing_tag_ids: list[str],
        inline_specs: list[TagSpec] | None = None,
    ) -> list[Tag]:
        """Return the unified tag list — existing tags first, then newly created ones.

        Raises ``TagNotFoundError`` if any ID is unknown; in that case no new
        tag is created.
        """
        inline_specs = inline_specs or []
        for spec in inline_specs:
            if not spec.name or not spec.name.strip():
                raise ArticleWorkflowError.bad_request("Each tag must have a name")

        # Sequential: repositories may share one session, which is not concurrency-safe
        existing = [await self._require(tag_id) for tag_id in dict.fromkeys(existing_tag_ids)]
        created = [await self._create(spec) for spec in inline_specs]
        if created:
            logger.info("Created %d new tag(s): %s", len(created), [t.name for t in created])

        return list(existing) + list(created)

    async def _require(self, tag_id: str) -> Tag:
        tag = await self._repository.get_by_id(tag_id)
        if tag is None:
            raise TagNotFoundError(tag_id)
        return tag

    async def _create(self, spec: TagSpec) -> Tag:
        now = datetime.now(timezone.utc)
        tag = Tag(
            id=str(uuid.uuid4()),
            name=spec.name,
            name_ar=spec.name_ar,
            created_at=now,
            updated_at=now,
        )
        return await self._repository.create(tag)
