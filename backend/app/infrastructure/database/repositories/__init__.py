from .article_repository import SQLAlchemyArticleRepository
from .tag_repository import SQLAlchemyTagRepository

__all__ = [
    "SQLAlchemyArticleRepository",
    "SQLAlchemyTagRepository",
]
