"""Domain entity for the authenticated caller."""

from dataclasses import dataclass
from enum import Enum


class UserRole(str, Enum):
    """Roles recognised by the admin surface."""

    AUTHOR = "AUTHOR"
    EDITOR = "EDITOR"
    ADMIN = "ADMIN"


@dataclass(frozen=True)
class User:
    id: str
    email: str
    role: UserRole

    @property
    def is_author(self) -> bool:
        return self.role == UserRole.AUTHOR
