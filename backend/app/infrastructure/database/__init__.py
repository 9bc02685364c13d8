from .base import Base
from .session import engine, async_session_factory, get_db_session
from .models import ArticleMediaModel, ArticleModel, TagModel

__all__ = [
    "Base",
    "engine",
    "async_session_factory",
    "get_db_session",
    "ArticleMediaModel",
    "ArticleModel",
    "TagModel",
]
