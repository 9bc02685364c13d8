"""Domain-specific exceptions — framework-independent."""

from enum import Enum


class ErrorKind(str, Enum):
    """Error categories the article workflows surface to callers."""

    UNAUTHORIZED = "unauthorized"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"
    BAD_REQUEST = "bad_request"
    INTERNAL = "internal"


class EntityNotFoundError(Exception):
    """Raised when a requested entity does not exist."""

    def __init__(self, entity_type: str, entity_id: int | str, message: str | None = None):
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(message or f"{entity_type} with id '{entity_id}' not found")


class TagNotFoundError(EntityNotFoundError):
    """Raised when a tag referenced by ID cannot be resolved."""

    def __init__(self, tag_id: str):
        super().__init__("Tag", tag_id, f"Tag with ID {tag_id} not found")


class InvalidStatusTransitionError(Exception):
    """Raised when a lifecycle transition is not allowed from the current status."""

    def __init__(self, article_id: str | None, current: str, action: str):
        self.article_id = article_id
        self.current = current
        self.action = action
        super().__init__(f"Cannot {action} article '{article_id}' while it is {current}")


class MediaUploadError(Exception):
    """Raised when one or more files of an upload batch could not be stored."""

    def __init__(self, filename: str, reason: str):
        self.filename = filename
        self.reason = reason
        super().__init__(f"Failed to upload '{filename}': {reason}")


class ArticleWorkflowError(Exception):
    """The single error type raised by article workflows.

    Carries an explicit ``kind`` so callers branch on the category
    instead of on the exception class.
    """

    def __init__(self, kind: ErrorKind, message: str):
        self.kind = kind
        self.message = message
        super().__init__(message)

    @classmethod
    def unauthorized(cls, message: str = "Authentication required") -> "ArticleWorkflowError":
        return cls(ErrorKind.UNAUTHORIZED, message)

    @classmethod
    def forbidden(
        cls, message: str = "You are not authorized to perform this action."
    ) -> "ArticleWorkflowError":
        return cls(ErrorKind.FORBIDDEN, message)

    @classmethod
    def not_found(cls, message: str) -> "ArticleWorkflowError":
        return cls(ErrorKind.NOT_FOUND, message)

    @classmethod
    def bad_request(cls, message: str) -> "ArticleWorkflowError":
        return cls(ErrorKind.BAD_REQUEST, message)

    def __repr__(self) -> str:
        return f"ArticleWorkflowError(kind={self.kind.value!r}, message={self.message!r})"
