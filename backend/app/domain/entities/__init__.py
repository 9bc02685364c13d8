from .tag import Tag
from .media_file import MediaFile
from .user import User, UserRole
from .article import Article, ArticleStatus
from .article_query import (
    ArchiveResult,
    ArticleFilters,
    ArticleListQuery,
    ArticlePage,
    ArticleSearchQuery,
    ArticleSearchResult,
    ArticleWithRelated,
)

__all__ = [
    "Tag",
    "MediaFile",
    "User",
    "UserRole",
    "Article",
    "ArticleStatus",
    "ArchiveResult",
    "ArticleFilters",
    "ArticleListQuery",
    "ArticlePage",
    "ArticleSearchQuery",
    "ArticleSearchResult",
    "ArticleWithRelated",
]
