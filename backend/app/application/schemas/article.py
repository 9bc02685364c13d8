"""Pydantic DTOs (Data Transfer Objects) for the admin Article feature.

Wire names are camelCase (``titleAr``, ``tagIds``); Python attributes stay
snake_case via the alias generator.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from app.domain.entities import ArticleStatus


class _CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


def _blank_to_none(value: str | None) -> str | None:
    if isinstance(value, str) and not value.strip():
        return None
    return value


# ── Commands ─────────────────────────────────────────────────────────


class ArticleCreate(_CamelModel):
    """Text fields of a create request. Files travel separately as a MediaBatch.

    ``tags`` is the raw inline-tag JSON; ``tag_ids`` is an array or a
    comma-separated string of existing tag IDs. Both are parsed by the service.
    """

    title: str = Field(..., min_length=1, max_length=255, examples=["Example English Title"])
    title_ar: str = Field(..., min_length=1, max_length=255)
    content: str | None = None
    content_ar: str | None = None
    summary: str | None = None
    summary_ar: str | None = None
    category_id: str | None = None
    status: ArticleStatus = ArticleStatus.DRAFT
    tags: str | list[str] | None = Field(
        None, examples=['[{"name":"Technology","nameAr":"تكنولوجيا"}]']
    )
    tag_ids: str | list[str] | None = None

    @field_validator("category_id")
    @classmethod
    def _empty_category(cls, value: str | None) -> str | None:
        return _blank_to_none(value)


class ArticleUpdate(_CamelModel):
    """Partial update — ``None`` means "leave as is".

    ``tags`` holds IDs of existing tags to link; the ``removed_*`` fields
    accept an array, a JSON string or a comma-separated string.
    """

    title: str | None = Field(None, min_length=1, max_length=255)
    title_ar: str | None = Field(None, min_length=1, max_length=255)
    content: str | None = None
    content_ar: str | None = None
    summary: str | None = None
    summary_ar: str | None = None
    category_id: str | None = None
    tags: str | list[str] | None = None
    removed_images: str | list[str] | None = None
    removed_videos: str | list[str] | None = None
    removed_tags: str | list[str] | None = None


class ArchiveArticlesRequest(_CamelModel):
    article_ids: list[str] = Field(..., min_length=1)


class AssignTagsRequest(_CamelModel):
    tag_ids: list[str] = Field(..., min_length=1)


# ── Responses ────────────────────────────────────────────────────────


class TagSchema(_CamelModel):
    id: str
    name: str
    name_ar: str | None = None


class MediaRefSchema(_CamelModel):
    id: str
    url: str


class ArticleResponse(_CamelModel):
    """Full article representation returned to the admin client."""

    id: str
    title: str
    title_ar: str
    content: str | None = None
    content_ar: str | None = None
    summary: str | None = None
    summary_ar: str | None = None
    author_id: str
    author_email: str
    category_id: str | None = None
    status: ArticleStatus
    tags: list[TagSchema] = Field(default_factory=list)
    images: list[MediaRefSchema] = Field(default_factory=list)
    videos: list[MediaRefSchema] = Field(default_factory=list)
    featured_media: MediaRefSchema | None = None
    slug: str | None = None
    slug_ar: str | None = None
    views: int = 0
    created_at: datetime
    updated_at: datetime
    published_at: datetime | None = None


class RelatedArticleSchema(_CamelModel):
    id: str
    title: str
    title_ar: str
    summary: str | None = None
    summary_ar: str | None = None
    category_id: str | None = None
    slug: str | None = None
    slug_ar: str | None = None
    views: int = 0
    featured_media: MediaRefSchema | None = None
    tags: list[TagSchema] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime
    published_at: datetime | None = None


class ArticleDetailResponse(ArticleResponse):
    related_articles: list[RelatedArticleSchema] = Field(default_factory=list)


class ArticleListItem(_CamelModel):
    """Compact article row used by list and search results."""

    id: str
    title: str
    title_ar: str
    summary: str | None = None
    summary_ar: str | None = None
    category_id: str | None = None
    author_id: str
    author_email: str
    status: ArticleStatus
    views: int = 0
    slug: str | None = None
    slug_ar: str | None = None
    tags: list[TagSchema] = Field(default_factory=list)
    featured_media: MediaRefSchema | None = None
    created_at: datetime
    published_at: datetime | None = None


class PaginationMetadata(_CamelModel):
    total: int
    page: int
    limit: int
    total_pages: int


class PaginatedArticleResponse(_CamelModel):
    data: list[ArticleListItem]
    metadata: PaginationMetadata


class SearchArticlesResponse(_CamelModel):
    articles: list[ArticleListItem]
    page: int
    page_size: int
    total_results: int
    total_pages: int


class ArchiveArticlesResponse(_CamelModel):
    total_processed: int
    archived: int
