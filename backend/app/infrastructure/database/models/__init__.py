from .article import ArticleMediaModel, ArticleModel, TagModel, article_tags

__all__ = [
    "ArticleMediaModel",
    "ArticleModel",
    "TagModel",
    "article_tags",
]
