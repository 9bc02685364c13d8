"""Concrete tag repository backed by SQLAlchemy."""

import uuid

from sqlalchemy.ext.asyncio import AsyncSession

from app.application.interfaces import TagRepository
from app.domain.entities import Tag
from app.infrastructure.database.models import TagModel


class SQLAlchemyTagRepository(TagRepository):
    """Implements the TagRepository port using SQLAlchemy async sessions."""

    def __init__(self, session: AsyncSession):
        self._session = session

    def _to_entity(self, model: TagModel) -> Tag:
        return Tag(
            id=model.id,
            name=model.name,
            name_ar=model.name_ar,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    async def get_by_id(self, tag_id: str) -> Tag | None:
        model = await self._session.get(TagModel, tag_id)
        return self._to_entity(model) if model else None

    async def create(self, tag: Tag) -> Tag:
        model = TagModel(
            id=tag.id or str(uuid.uuid4()),
            name=tag.name,
            name_ar=tag.name_ar,
            created_at=tag.created_at,
            updated_at=tag.updated_at,
        )
        self._session.add(model)
        await self._session.flush()
        return self._to_entity(model)
