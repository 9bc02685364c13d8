from .article_repository import ArticleRepository
from .tag_repository import TagRepository
from .media_storage import FileDeleter, FileUploader, StoredMedia

__all__ = [
    "ArticleRepository",
    "TagRepository",
    "FileDeleter",
    "FileUploader",
    "StoredMedia",
]
