# Importing every model registers its table on Base.metadata (Alembic, tests)
from newsdesk.backend.models.article import Article, ArticleStatus
from newsdesk.backend.models.base import Base
from newsdesk.backend.models.category import Category
from newsdesk.backend.models.comment import Comment
from newsdesk.backend.models.user import ROLE_LEVELS, User, UserRole

__all__ = [
    "ROLE_LEVELS",
    "Article",
    "ArticleStatus",
    "Base",
    "Category",
    "Comment",
    "User",
    "UserRole",
]
