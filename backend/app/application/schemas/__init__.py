from .article import (
    ArchiveArticlesRequest,
    ArchiveArticlesResponse,
    ArticleCreate,
    ArticleDetailResponse,
    ArticleListItem,
    ArticleResponse,
    ArticleUpdate,
    AssignTagsRequest,
    MediaRefSchema,
    PaginatedArticleResponse,
    PaginationMetadata,
    RelatedArticleSchema,
    SearchArticlesResponse,
    TagSchema,
)

__all__ = [
    "ArchiveArticlesRequest",
    "ArchiveArticlesResponse",
    "ArticleCreate",
    "ArticleDetailResponse",
    "ArticleListItem",
    "ArticleResponse",
    "ArticleUpdate",
    "AssignTagsRequest",
    "MediaRefSchema",
    "PaginatedArticleResponse",
    "PaginationMetadata",
    "RelatedArticleSchema",
    "SearchArticlesResponse",
    "TagSchema",
]
