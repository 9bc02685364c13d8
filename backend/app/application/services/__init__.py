from .article_merger import ArticleMutationMerger, RemovalSet
from .article_service import ArticleService
from .form_parsing import TagSpec, parse_id_list, parse_inline_tags
from .media_upload import IncomingFile, MediaBatch, MediaUploadCoordinator, UploadedMedia
from .tag_resolver import TagResolver

__all__ = [
    "ArticleMutationMerger",
    "ArticleService",
    "IncomingFile",
    "MediaBatch",
    "MediaUploadCoordinator",
    "RemovalSet",
    "TagResolver",
    "TagSpec",
    "UploadedMedia",
    "parse_id_list",
    "parse_inline_tags",
]
