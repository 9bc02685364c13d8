"""Concrete article repository backed by SQLAlchemy."""

import re
import uuid

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.application.interfaces import ArticleRepository
from app.domain.entities import (
    Article,
    ArticleListQuery,
    ArticlePage,
    ArticleSearchQuery,
    ArticleSearchResult,
    ArticleStatus,
    MediaFile,
    Tag,
)
from app.domain.exceptions import EntityNotFoundError
from app.infrastructure.database.models import ArticleMediaModel, ArticleModel, TagModel

_SORT_COLUMNS = {
    "createdAt": ArticleModel.created_at,
    "updatedAt": ArticleModel.updated_at,
    "publishedAt": ArticleModel.published_at,
    "title": ArticleModel.title,
    "views": ArticleModel.views,
}

_SEARCH_COLUMNS = (
    ArticleModel.title,
    ArticleModel.title_ar,
    ArticleModel.summary,
    ArticleModel.summary_ar,
    ArticleModel.content,
    ArticleModel.content_ar,
)


def slugify(text: str) -> str:
    """Lower-case, hyphen-separated slug. Non-Latin letters are kept."""
    cleaned = re.sub(r"[^\w\s-]", "", text.lower()).strip()
    return re.sub(r"[\s_-]+", "-", cleaned).strip("-")


def _slug_for(title: str, article_id: str) -> str:
    base = slugify(title)
    suffix = article_id[:8]
    return f"{base}-{suffix}" if base else suffix


class SQLAlchemyArticleRepository(ArticleRepository):
    """Implements the ArticleRepository port using SQLAlchemy async sessions."""

    def __init__(self, session: AsyncSession):
        self._session = session

    # ── Mapping ──────────────────────────────────────────────────────

    def _to_entity(self, model: ArticleModel) -> Article:
        """Map ORM model → domain entity."""
        featured: MediaFile | None = None
        images: list[MediaFile] = []
        videos: list[MediaFile] = []
        for media in model.media:
            file = self._media_to_entity(media)
            if media.role == "featured":
                featured = file
            elif media.role == "video":
                videos.append(file)
            else:
                images.append(file)

        return Article(
            id=model.id,
            title=model.title,
            title_ar=model.title_ar,
            slug=model.slug,
            slug_ar=model.slug_ar,
            content=model.content,
            content_ar=model.content_ar,
            summary=model.summary,
            summary_ar=model.summary_ar,
            category_id=model.category_id,
            status=ArticleStatus(model.status),
            author_id=model.author_id,
            author_email=model.author_email,
            views=model.views or 0,
            tags=[self._tag_to_entity(t) for t in model.tags],
            featured_media=featured,
            images=images,
            videos=videos,
            created_at=model.created_at,
            updated_at=model.updated_at,
            published_at=model.published_at,
        )

    @staticmethod
    def _tag_to_entity(model: TagModel) -> Tag:
        return Tag(
            id=model.id,
            name=model.name,
            name_ar=model.name_ar,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    @staticmethod
    def _media_to_entity(model: ArticleMediaModel) -> MediaFile:
        return MediaFile(
            id=model.id,
            url=model.url,
            filename=model.filename,
            mimetype=model.mimetype,
            size=model.size,
            path=model.path or "",
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    def _apply_scalars(self, model: ArticleModel, entity: Article) -> None:
        model.title = entity.title
        model.title_ar = entity.title_ar
        model.slug = _slug_for(entity.title, model.id)
        model.slug_ar = _slug_for(entity.title_ar, model.id)
        model.content = entity.content
        model.content_ar = entity.content_ar
        model.summary = entity.summary
        model.summary_ar = entity.summary_ar
        model.category_id = entity.category_id
        model.status = entity.status.value
        model.views = entity.views
        model.updated_at = entity.updated_at
        model.published_at = entity.published_at

    # ── Write Operations ─────────────────────────────────────────────

    async def create(self, article: Article) -> Article:
        model = ArticleModel(
            id=article.id or str(uuid.uuid4()),
            author_id=article.author_id,
            author_email=article.author_email,
            created_at=article.created_at,
            tags=[],
            media=[],
        )
        self._apply_scalars(model, article)
        if article.tags:
            model.tags = await self._load_tags(article.tag_ids)
        model.media = self._build_media(article, {})
        self._session.add(model)
        await self._session.flush()
        return self._to_entity(model)

    async def update(self, article: Article) -> Article:
        model = await self._session.get(ArticleModel, article.id)
        if model is None:
            raise EntityNotFoundError("Article", article.id)

        self._apply_scalars(model, article)
        model.tags = await self._load_tags(article.tag_ids)
        model.media = self._build_media(article, {m.id: m for m in model.media})
        await self._session.flush()
        return self._to_entity(model)

    async def delete(self, article_id: str) -> bool:
        model = await self._session.get(ArticleModel, article_id)
        if model is None:
            return False
        await self._session.delete(model)
        await self._session.flush()
        return True

    async def _load_tags(self, tag_ids: list[str]) -> list[TagModel]:
        """Resolve tag IDs to models, preserving order. Unknown IDs raise."""
        unique_ids = list(dict.fromkeys(tag_ids))
        if not unique_ids:
            return []
        result = await self._session.execute(select(TagModel).where(TagModel.id.in_(unique_ids)))
        found = {t.id: t for t in result.scalars().all()}
        for tag_id in unique_ids:
            if tag_id not in found:
                raise EntityNotFoundError("Tag", tag_id)
        return [found[tag_id] for tag_id in unique_ids]

    def _build_media(
        self, article: Article, existing: dict[str, ArticleMediaModel]
    ) -> list[ArticleMediaModel]:
        """Reconcile the article's files with stored rows, reusing rows by ID."""
        entries: list[tuple[str, int, MediaFile]] = []
        if article.featured_media is not None:
            entries.append(("featured", 0, article.featured_media))
        entries += [("image", i, f) for i, f in enumerate(article.images)]
        entries += [("video", i, f) for i, f in enumerate(article.videos)]

        rows: list[ArticleMediaModel] = []
        seen: set[str] = set()
        for role, position, file in entries:
            if file.id in seen:
                continue
            seen.add(file.id)
            row = existing.get(file.id) or ArticleMediaModel(
                id=file.id,
                url=file.url,
                filename=file.filename,
                mimetype=file.mimetype,
                size=file.size,
                path=file.path,
                created_at=file.created_at,
            )
            row.role = role
            row.position = position
            rows.append(row)
        return rows

    # ── Read Operations ──────────────────────────────────────────────

    async def get_by_id(self, article_id: str) -> Article | None:
        model = await self._session.get(ArticleModel, article_id)
        return self._to_entity(model) if model else None

    async def list_articles(self, query: ArticleListQuery) -> ArticlePage:
        stmt = select(ArticleModel)
        filters = query.filters
        if filters.status is not None:
            stmt = stmt.where(ArticleModel.status == filters.status.value)
        if filters.category_id:
            stmt = stmt.where(ArticleModel.category_id == filters.category_id)
        if filters.author_id:
            stmt = stmt.where(ArticleModel.author_id == filters.author_id)
        if filters.tag_id:
            stmt = stmt.where(ArticleModel.tags.any(TagModel.id == filters.tag_id))

        total = await self._count(stmt)

        column = _SORT_COLUMNS.get(query.sort_by, ArticleModel.created_at)
        ordering = column.asc() if query.sort_order == "asc" else column.desc()
        page = max(query.page, 1)
        stmt = stmt.order_by(ordering, ArticleModel.id).offset((page - 1) * query.limit).limit(query.limit)

        result = await self._session.execute(stmt)
        return ArticlePage(
            data=[self._to_entity(m) for m in result.scalars().all()],
            total=total,
            page=page,
            limit=query.limit,
        )

    async def search(self, query: ArticleSearchQuery) -> ArticleSearchResult:
        stmt = select(ArticleModel)
        if query.status is not None:
            stmt = stmt.where(ArticleModel.status == query.status.value)
        for term in query.query.split():
            pattern = f"%{term}%"
            stmt = stmt.where(or_(*(col.ilike(pattern) for col in _SEARCH_COLUMNS)))

        total = await self._count(stmt)
        page = max(query.page, 1)
        stmt = (
            stmt.order_by(ArticleModel.created_at.desc(), ArticleModel.id)
            .offset((page - 1) * query.page_size)
            .limit(query.page_size)
        )
        result = await self._session.execute(stmt)
        return ArticleSearchResult(
            articles=[self._to_entity(m) for m in result.scalars().all()],
            total_results=total,
        )

    async def get_related(self, article: Article, limit: int = 4) -> list[Article]:
        conditions = []
        if article.category_id:
            conditions.append(ArticleModel.category_id == article.category_id)
        if article.tag_ids:
            conditions.append(ArticleModel.tags.any(TagModel.id.in_(article.tag_ids)))
        if not conditions:
            return []

        stmt = (
            select(ArticleModel)
            .where(
                ArticleModel.status == ArticleStatus.PUBLISHED.value,
                ArticleModel.id != article.id,
                or_(*conditions),
            )
            .order_by(ArticleModel.published_at.desc(), ArticleModel.id)
            .limit(limit)
        )
        result = await self._session.execute(stmt)
        return [self._to_entity(m) for m in result.scalars().all()]

    async def _count(self, stmt) -> int:
        result = await self._session.execute(select(func.count()).select_from(stmt.subquery()))
        return result.scalar_one()
