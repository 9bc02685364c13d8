"""Abstract repository interfaces (ports) — define the contract, not the implementation."""

from abc import ABC, abstractmethod

from app.domain.entities import (
    Article,
    ArticleListQuery,
    ArticlePage,
    ArticleSearchQuery,
    ArticleSearchResult,
)


class ArticleRepository(ABC):
    """Port for article persistence — implemented in the infrastructure layer."""

    @abstractmethod
    async def get_by_id(self, article_id: str) -> Article | None:
        """Retrieve a single article by its ID."""
        ...

    @abstractmethod
    async def create(self, article: Article) -> Article:
        """Persist a new article and return it with the generated ID."""
        ...

    @abstractmethod
    async def update(self, article: Article) -> Article:
        """Persist the full state of an existing article.

        Tags may be bare references (``Tag.reference``); implementations
        must resolve them and raise ``EntityNotFoundError`` for unknown IDs.
        """
        ...

    @abstractmethod
    async def delete(self, article_id: str) -> bool:
        """Delete an article. Returns True if deleted, False if not found."""
        ...

    @abstractmethod
    async def list_articles(self, query: ArticleListQuery) -> ArticlePage:
        """Retrieve a filtered, sorted page of articles."""
        ...

    @abstractmethod
    async def search(self, query: ArticleSearchQuery) -> ArticleSearchResult:
        """Free-text search over both language variants."""
        ...

    @abstractmethod
    async def get_related(self, article: Article, limit: int = 4) -> list[Article]:
        """Published articles sharing the category or a tag with ``article``."""
        ...
