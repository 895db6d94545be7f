"""
Kernel Layer

Domain models, identity, storage engines and the mutation protocol.

Invariants:
- Ownership-gated writes classify their outcome from one atomic observation
- Association edges are toggled idempotently; a pair never exists twice
- Authentication failures are always reported as Unauthorized
"""

from conduit.kernel.models import (
    Article,
    ArticleFavorite,
    ArticleTag,
    Comment,
    Follow,
    User,
)

__all__ = [
    "Article",
    "ArticleFavorite",
    "ArticleTag",
    "Comment",
    "Follow",
    "User",
]
