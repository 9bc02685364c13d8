"""Abstract repository interface (port) for tags."""

from abc import ABC, abstractmethod

from app.domain.entities import Tag


class TagRepository(ABC):
    """Port for tag persistence — implemented in the infrastructure layer."""

    @abstractmethod
    async def get_by_id(self, tag_id: str) -> Tag | None:
        """Retrieve a single tag by its ID."""
        ...

    @abstractmethod
    async def create(self, tag: Tag) -> Tag:
        """Persist a new tag."""
        ...
