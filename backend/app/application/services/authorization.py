"""Role and ownership checks on an explicitly passed caller."""

from app.domain.entities import Article, User, UserRole
from app.domain.exceptions import ArticleWorkflowError

ALL_ROLES = (UserRole.AUTHOR, UserRole.EDITOR, UserRole.ADMIN)
STAFF_ROLES = (UserRole.EDITOR, UserRole.ADMIN)


def require_user(user: User | None) -> User:
    if user is None:
        raise ArticleWorkflowError.unauthorized()
    return user


def require_role(user: User | None, *roles: UserRole) -> User:
    """Ensure the caller is authenticated and holds one of ``roles``."""
    user = require_user(user)
    if user.role not in roles:
        raise ArticleWorkflowError.forbidden()
    return user


def ensure_owner_or_staff(user: User, article: Article, message: str) -> None:
    """Authors may only act on their own articles; editors and admins on any."""
    if user.role == UserRole.AUTHOR and not article.is_owned_by(user.id):
        raise ArticleWorkflowError.forbidden(message)
