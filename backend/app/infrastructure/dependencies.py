"""FastAPI dependency injection — wires infrastructure to application layer."""

import logging
from collections.abc import AsyncGenerator

from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import get_settings
from app.application.services import (
    ArticleMutationMerger,
    ArticleService,
    MediaUploadCoordinator,
    TagResolver,
)
from app.domain.entities import User, UserRole
from app.infrastructure.database.session import get_db_session
from app.infrastructure.database.repositories import (
    SQLAlchemyArticleRepository,
    SQLAlchemyTagRepository,
)
from app.infrastructure.storage.local_file_storage import LocalMediaStorage

logger = logging.getLogger(__name__)


async def get_current_user(
    user_id: str | None = Header(None, alias="X-User-Id"),
    email: str | None = Header(None, alias="X-User-Email"),
    role: str | None = Header(None, alias="X-User-Role"),
) -> User | None:
    """Resolve the caller from identity headers set by the upstream gateway.

    Returns ``None`` when the caller is anonymous or the headers are
    incomplete; the service layer turns that into 401.
    """
    if not user_id or not role:
        return None
    try:
        user_role = UserRole(role.strip().upper())
    except ValueError:
        logger.warning("Rejecting unknown role header %r for user %s", role, user_id)
        return None
    return User(id=user_id.strip(), email=(email or "").strip(), role=user_role)


def get_media_storage() -> LocalMediaStorage:
    settings = get_settings()
    return LocalMediaStorage(upload_dir=settings.upload_dir, media_base_url=settings.media_base_url)


async def get_article_service(
    session: AsyncSession = Depends(get_db_session),
) -> AsyncGenerator[ArticleService, None]:
    """Provides an ArticleService with repositories, tag resolution and media storage wired up."""
    settings = get_settings()
    storage = get_media_storage()
    yield ArticleService(
        repository=SQLAlchemyArticleRepository(session),
        tag_resolver=TagResolver(SQLAlchemyTagRepository(session)),
        media=MediaUploadCoordinator(uploader=storage, deleter=storage),
        merger=ArticleMutationMerger(),
        related_limit=settings.related_articles_limit,
    )
