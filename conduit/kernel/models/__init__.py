"""
Kernel Data Models

SQLAlchemy models for users, articles, comments and the two association
edges (favorites, follows).
"""

from conduit.kernel.models.base import Base, TimestampMixin, generate_uuid
from conduit.kernel.models.user import User
from conduit.kernel.models.article import Article, ArticleTag, ArticleFavorite
from conduit.kernel.models.comment import Comment
from conduit.kernel.models.follow import Follow

__all__ = [
    "Base",
    "TimestampMixin",
    "generate_uuid",
    "User",
    "Article",
    "ArticleTag",
    "ArticleFavorite",
    "Comment",
    "Follow",
]
