"""Application service (use case) orchestrating the admin article workflows.

Create (compensating):
    Skeleton persist → Resolve tags → Upload media → Persist enriched → Re-fetch
    Any failure after the skeleton exists deletes the skeleton before the
    error is surfaced. Media already uploaded is not rolled back.

Update (best-effort cleanup):
    Fetch → Authorize → Discard removed files → Upload → Discard replaced
    featured media → Merge → Persist → Re-fetch
"""

import asyncio
import dataclasses
import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from datetime import datetime, timezone

from app.application.interfaces import ArticleRepository
from app.application.schemas import ArticleCreate, ArticleUpdate
from app.application.services.article_merger import ArticleMutationMerger, RemovalSet
from app.application.services.authorization import (
    ALL_ROLES,
    STAFF_ROLES,
    ensure_owner_or_staff,
    require_role,
)
from app.application.services.form_parsing import TagSpec, parse_id_list, parse_inline_tags
from app.application.services.media_upload import MediaBatch, MediaUploadCoordinator
from app.application.services.tag_resolver import TagResolver
from app.domain.entities import (
    ArchiveResult,
    Article,
    ArticleListQuery,
    ArticlePage,
    ArticleSearchQuery,
    ArticleSearchResult,
    ArticleStatus,
    ArticleWithRelated,
    Tag,
    User,
)
from app.domain.exceptions import (
    ArticleWorkflowError,
    EntityNotFoundError,
    ErrorKind,
    InvalidStatusTransitionError,
    MediaUploadError,
)
from app.infrastructure.logging.colored_logger import WorkflowLogger, WorkflowStage

logger = logging.getLogger(__name__)
wlog = WorkflowLogger("ArticleWorkflow")

_AUTH_KINDS = frozenset({ErrorKind.UNAUTHORIZED, ErrorKind.FORBIDDEN})


def _normalise(exc: Exception) -> ArticleWorkflowError | None:
    """Map known failures onto the workflow taxonomy; ``None`` for unexpected ones."""
    if isinstance(exc, ArticleWorkflowError):
        return exc
    if isinstance(exc, EntityNotFoundError):
        return ArticleWorkflowError.not_found(str(exc))
    if isinstance(exc, (InvalidStatusTransitionError, MediaUploadError)):
        return ArticleWorkflowError.bad_request(str(exc))
    return None


@contextmanager
def _failure_boundary(
    operation: str,
    fallback: ErrorKind,
    passthrough: frozenset[ErrorKind] = _AUTH_KINDS,
    with_detail: bool = True,
) -> Iterator[None]:
    """Re-raise ``passthrough`` kinds as they are; flatten everything else into ``fallback``."""
    try:
        yield
    except Exception as exc:
        known = _normalise(exc)
        if known is not None and known.kind in passthrough:
            if known is exc:
                raise
            raise known from exc

        if known is None:
            logger.exception("%s: unexpected error", operation)
            detail = str(exc) or type(exc).__name__
        else:
            logger.warning("%s: %s", operation, known.message)
            detail = known.message

        message = f"{operation}: {detail}" if with_detail else operation
        raise ArticleWorkflowError(fallback, message) from exc


class ArticleService:
    """Orchestrates article business logic. Depends on ports only (DI).

    Every entry point takes the caller explicitly as its first argument.
    """

    def __init__(
        self,
        repository: ArticleRepository,
        tag_resolver: TagResolver,
        media: MediaUploadCoordinator,
        merger: ArticleMutationMerger | None = None,
        related_limit: int = 4,
    ):
        self._repository = repository
        self._tag_resolver = tag_resolver
        self._media = media
        self._merger = merger or ArticleMutationMerger()
        self._related_limit = related_limit

    # ── Create ───────────────────────────────────────────────────────

    async def create_article(
        self,
        user: User | None,
        data: ArticleCreate,
        media: MediaBatch | None = None,
    ) -> Article:
        media = media or MediaBatch()
        with _failure_boundary("Failed to create article", ErrorKind.BAD_REQUEST):
            author = require_role(user, *ALL_ROLES)
            # Input errors surface before anything is persisted
            tag_ids = parse_id_list(data.tag_ids)
            tag_specs = parse_inline_tags(data.tags)

            wlog.separator(f"Create article: {data.title[:40]}")
            with wlog.timed_step(WorkflowStage.SKELETON, "Persisting skeleton article"):
                skeleton = await self._repository.create(self._build_skeleton(author, data))
            wlog.detail("Skeleton persisted", id=skeleton.id)

            try:
                await self._enrich(skeleton, tag_ids, tag_specs, media)
            except asyncio.CancelledError:
                await asyncio.shield(self._compensate(skeleton.id))
                raise
            except Exception:
                await self._compensate(skeleton.id)
                raise

            article = await self._require_article(skeleton.id)
            wlog.step_complete(WorkflowStage.COMPLETE, "Article created", id=article.id)
            return article

    def _build_skeleton(self, author: User, data: ArticleCreate) -> Article:
        now = datetime.now(timezone.utc)
        return Article(
            title=data.title,
            title_ar=data.title_ar,
            content=data.content,
            content_ar=data.content_ar,
            summary=data.summary,
            summary_ar=data.summary_ar,
            category_id=data.category_id,
            status=data.status,
            author_id=author.id,
            author_email=author.email,
            published_at=now if data.status == ArticleStatus.PUBLISHED else None,
            created_at=now,
            updated_at=now,
        )

    async def _enrich(
        self,
        skeleton: Article,
        tag_ids: list[str],
        tag_specs: list[TagSpec],
        media: MediaBatch,
    ) -> None:
        with wlog.timed_step(
            WorkflowStage.TAGS, "Resolving tags", existing=len(tag_ids), inline=len(tag_specs)
        ):
            tags = await self._tag_resolver.resolve(tag_ids, tag_specs)

        with wlog.timed_step(WorkflowStage.UPLOAD, "Uploading media"):
            uploaded = await self._media.upload(media)

        enriched = dataclasses.replace(
            skeleton,
            tags=tags,
            featured_media=uploaded.featured,
            images=uploaded.images,
            videos=uploaded.videos,
            updated_at=datetime.now(timezone.utc),
        )
        with wlog.timed_step(
            WorkflowStage.PERSIST, "Attaching tags and media", tags=len(tags), files=uploaded.count
        ):
            await self._repository.update(enriched)

    async def _compensate(self, article_id: str) -> None:
        """Delete the skeleton article. A failure here is logged, never raised."""
        wlog.step_start(WorkflowStage.COMPENSATE, "Deleting skeleton article", id=article_id)
        try:
            await self._repository.delete(article_id)
        except Exception as exc:
            wlog.step_error(WorkflowStage.COMPENSATE, "Compensation failed", error=exc)
            logger.error(
                "Compensation failed: orphaned skeleton article %s could not be deleted: %s",
                article_id,
                exc,
            )
            return
        wlog.step_complete(WorkflowStage.COMPENSATE, "Skeleton article deleted", id=article_id)

    # ── Update ───────────────────────────────────────────────────────

    async def update_article(
        self,
        user: User | None,
        article_id: str,
        data: ArticleUpdate,
        media: MediaBatch | None = None,
    ) -> Article:
        media = media or MediaBatch()
        with _failure_boundary(
            "Failed to update article",
            ErrorKind.BAD_REQUEST,
            passthrough=_AUTH_KINDS | {ErrorKind.NOT_FOUND},
        ):
            caller = require_role(user, *ALL_ROLES)
            existing = await self._require_article(article_id)
            ensure_owner_or_staff(caller, existing, "Only the author owner can update this article")

            removals = RemovalSet.from_update(data)
            incoming_tag_ids = parse_id_list(data.tags)

            wlog.separator(f"Update article: {article_id}")
            discarded = self._merger.files_to_discard(existing, removals)
            if discarded:
                with wlog.timed_step(WorkflowStage.CLEANUP, "Discarding removed files", files=len(discarded)):
                    await self._media.discard(discarded, reason=f"removed from article {article_id}")

            with wlog.timed_step(WorkflowStage.UPLOAD, "Uploading new media"):
                uploaded = await self._media.upload(media)

            if uploaded.featured is not None and existing.featured_media is not None:
                await self._media.discard(
                    [existing.featured_media],
                    reason=f"featured media replaced on article {article_id}",
                )

            merged = self._merger.merge(existing, data, removals, incoming_tag_ids, uploaded)
            with wlog.timed_step(
                WorkflowStage.PERSIST,
                "Saving merged article",
                images=len(merged.images),
                videos=len(merged.videos),
                tags=len(merged.tags),
            ):
                await self._repository.update(merged)

            article = await self._require_article(article_id)
            wlog.step_complete(WorkflowStage.COMPLETE, "Article updated", id=article_id)
            return article

    # ── Read ─────────────────────────────────────────────────────────

    async def get_article(self, user: User | None, article_id: str) -> ArticleWithRelated:
        with _failure_boundary(
            "An unexpected error occurred while fetching the article",
            ErrorKind.INTERNAL,
            passthrough=_AUTH_KINDS | {ErrorKind.NOT_FOUND},
            with_detail=False,
        ):
            caller = require_role(user, *ALL_ROLES)
            article = await self._require_article(article_id)
            ensure_owner_or_staff(caller, article, "You are not authorized to access this article.")

            related: list[Article] = []
            if article.status == ArticleStatus.PUBLISHED:
                related = await self._repository.get_related(article, limit=self._related_limit)
            return ArticleWithRelated(article=article, related=related)

    async def list_articles(self, user: User | None, query: ArticleListQuery) -> ArticlePage:
        """List articles; authors are always scoped to their own."""
        with _failure_boundary(
            "Failed to fetch articles",
            ErrorKind.INTERNAL,
            passthrough=_AUTH_KINDS | {ErrorKind.BAD_REQUEST},
            with_detail=False,
        ):
            caller = require_role(user, *ALL_ROLES)
            filters = query.filters
            if caller.is_author:
                if filters.author_id and filters.author_id != caller.id:
                    raise ArticleWorkflowError.forbidden("Authors can only view their own articles")
                filters = dataclasses.replace(filters, author_id=caller.id)

            page = await self._repository.list_articles(dataclasses.replace(query, filters=filters))

            if caller.is_author:
                own = [a for a in page.data if a.author_id == caller.id]
                dropped = len(page.data) - len(own)
                if dropped:
                    logger.warning("Dropped %d foreign article(s) from author listing", dropped)
                    page = ArticlePage(
                        data=own,
                        total=max(page.total - dropped, len(own)),
                        page=page.page,
                        limit=page.limit,
                    )
            return page

    async def search_articles(
        self, user: User | None, query: ArticleSearchQuery
    ) -> ArticleSearchResult:
        with _failure_boundary(
            "An unexpected error occurred while searching articles",
            ErrorKind.INTERNAL,
            with_detail=False,
        ):
            require_role(user, *ALL_ROLES)
            return await self._repository.search(query)

    # ── Lifecycle ────────────────────────────────────────────────────

    async def publish_article(self, user: User | None, article_id: str) -> Article:
        return await self._transition(user, article_id, "publish", Article.publish)

    async def unpublish_article(self, user: User | None, article_id: str) -> Article:
        return await self._transition(user, article_id, "unpublish", Article.unpublish)

    async def unarchive_article(self, user: User | None, article_id: str) -> Article:
        return await self._transition(user, article_id, "unarchive", Article.restore)

    async def _transition(
        self,
        user: User | None,
        article_id: str,
        action: str,
        apply: Callable[[Article], None],
    ) -> Article:
        with _failure_boundary(
            f"Failed to {action} article",
            ErrorKind.INTERNAL,
            passthrough=_AUTH_KINDS | {ErrorKind.NOT_FOUND, ErrorKind.BAD_REQUEST},
            with_detail=False,
        ):
            require_role(user, *STAFF_ROLES)
            article = await self._require_article(article_id)
            previous = article.status
            apply(article)
            updated = await self._repository.update(article)
            logger.info(
                "Article %s: %s (%s → %s)", article_id, action, previous.value, updated.status.value
            )
            return updated

    async def archive_articles(self, user: User | None, article_ids: list[str]) -> ArchiveResult:
        """Archive a batch. Missing or already archived articles are skipped."""
        with _failure_boundary("Failed to archive articles", ErrorKind.BAD_REQUEST):
            require_role(user, *STAFF_ROLES)
            unique_ids = list(dict.fromkeys(i for i in article_ids if i))
            if not unique_ids:
                raise ArticleWorkflowError.bad_request("No article IDs provided")

            archived = 0
            for article_id in unique_ids:
                article = await self._repository.get_by_id(article_id)
                if article is None:
                    logger.warning("Skipping archive of unknown article %s", article_id)
                    continue
                if article.status == ArticleStatus.ARCHIVED:
                    logger.info("Article %s is already archived", article_id)
                    continue
                article.archive()
                await self._repository.update(article)
                archived += 1

            if archived == 0:
                raise ArticleWorkflowError.bad_request("No eligible articles to archive")

            logger.info("Archived %d of %d article(s)", archived, len(unique_ids))
            return ArchiveResult(total_processed=len(unique_ids), archived=archived)

    # ── Delete ───────────────────────────────────────────────────────

    async def delete_article(self, user: User | None, article_id: str) -> None:
        """Delete an article. Its media is removed from storage only while it is a draft."""
        with _failure_boundary(
            "Failed to delete article and associated files",
            ErrorKind.INTERNAL,
            passthrough=_AUTH_KINDS | {ErrorKind.NOT_FOUND},
            with_detail=False,
        ):
            require_role(user, *STAFF_ROLES)
            article = await self._require_article(article_id)

            files = article.media_files
            if article.status == ArticleStatus.DRAFT and files:
                with wlog.timed_step(WorkflowStage.CLEANUP, "Deleting draft media", files=len(files)):
                    await self._media.discard(files, reason=f"draft article {article_id} deleted")
            elif files:
                logger.info(
                    "Article %s is %s; keeping its %d media file(s) in storage",
                    article_id,
                    article.status.value,
                    len(files),
                )

            await self._repository.delete(article_id)
            logger.info("Deleted article %s", article_id)

    # ── Tags ─────────────────────────────────────────────────────────

    async def assign_tags(self, user: User | None, article_id: str, tag_ids: list[str] | str) -> Article:
        """Link existing tags to an article. Unknown tag IDs fail the whole call."""
        with _failure_boundary(
            "Failed to assign tags",
            ErrorKind.BAD_REQUEST,
            passthrough=_AUTH_KINDS | {ErrorKind.NOT_FOUND},
        ):
            caller = require_role(user, *ALL_ROLES)
            ids = parse_id_list(tag_ids)
            if not ids:
                raise ArticleWorkflowError.bad_request("No tag IDs provided")

            article = await self._require_article(article_id)
            ensure_owner_or_staff(caller, article, "Only the author owner can change tags on this article")

            tags: list[Tag] = await self._tag_resolver.resolve(ids)
            added = article.add_tags(tags)
            if added:
                await self._repository.update(article)
                logger.info("Assigned %d tag(s) to article %s", len(added), article_id)
            return await self._require_article(article_id)

    async def remove_tag(self, user: User | None, article_id: str, tag_id: str) -> None:
        """Unlink a tag from an article. The tag itself is kept."""
        with _failure_boundary(
            "Failed to remove tag from article",
            ErrorKind.INTERNAL,
            passthrough=_AUTH_KINDS | {ErrorKind.NOT_FOUND},
            with_detail=False,
        ):
            caller = require_role(user, *ALL_ROLES)
            article = await self._require_article(article_id)
            ensure_owner_or_staff(caller, article, "Only the author owner can change tags on this article")

            if not article.remove_tag(tag_id):
                raise ArticleWorkflowError.not_found(
                    f"Tag {tag_id} is not assigned to article {article_id}"
                )
            await self._repository.update(article)

    # ── Helpers ──────────────────────────────────────────────────────

    async def _require_article(self, article_id: str) -> Article:
        article = await self._repository.get_by_id(article_id)
        if article is None:
            raise ArticleWorkflowError.not_found("Article not found")
        return article
