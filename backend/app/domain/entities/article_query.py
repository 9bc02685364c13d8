"""Domain value objects for listing, searching and batch-processing articles."""

import math
from dataclasses import dataclass, field

from app.domain.entities.article import Article, ArticleStatus


@dataclass
class ArticleFilters:
    """Filters applied when listing articles. ``None`` means "no filter"."""

    status: ArticleStatus | None = None
    category_id: str | None = None
    tag_id: str | None = None
    author_id: str | None = None


@dataclass
class ArticleListQuery:
    """A page request over the article list."""

    filters: ArticleFilters = field(default_factory=ArticleFilters)
    page: int = 1
    limit: int = 10
    sort_by: str = "createdAt"
    sort_order: str = "desc"  # "asc" | "desc"


@dataclass
class ArticlePage:
    """One page of articles plus pagination metadata."""

    data: list[Article]
    total: int
    page: int
    limit: int

    @property
    def total_pages(self) -> int:
        if self.limit <= 0:
            return 0
        return math.ceil(self.total / self.limit)


@dataclass
class ArticleSearchQuery:
    """Free-text search across titles, summaries and content in both languages."""

    query: str = ""
    status: ArticleStatus | None = None
    page: int = 1
    page_size: int = 10


@dataclass
class ArticleSearchResult:
    articles: list[Article]
    total_results: int


@dataclass
class ArchiveResult:
    """Outcome of a batch archive — partial success is a normal result."""

    total_processed: int
    archived: int


@dataclass
class ArticleWithRelated:
    """An article together with related published articles."""

    article: Article
    related: list[Article] = field(default_factory=list)
