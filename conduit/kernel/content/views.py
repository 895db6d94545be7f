"""
Read models for articles, comments and profiles.

Rows are joined with their author and decorated with the viewer-relative
flags (``favorited``, ``following``) in a single query per page; tags are
fetched with one extra query for the whole page.
"""

import uuid
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional, Sequence

from sqlalchemy import Select, exists, false, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from conduit.kernel.models import Article, ArticleFavorite, ArticleTag, Comment, Follow, User


@dataclass
class ProfileView:
    username: str
    bio: str
    image: Optional[str]
    following: bool


@dataclass
class ArticleView:
    id: uuid.UUID
    slug: str
    title: str
    description: str
    body: str
    created_at: datetime
    updated_at: datetime
    favorited: bool
    favorites_count: int
    author: ProfileView
    tag_list: List[str] = field(default_factory=list)


@dataclass
class CommentView:
    id: int
    body: str
    created_at: datetime
    updated_at: datetime
    author: ProfileView


def following_flag(author_id, viewer_id: Optional[uuid.UUID]):
    """Column expression: does the viewer follow ``author_id``."""
    if viewer_id is None:
        return false()
    return exists().where(
        Follow.followed_user_id == author_id,
        Follow.following_user_id == viewer_id,
    )


def _profile(user: User, following) -> ProfileView:
    return ProfileView(
        username=user.username,
        bio=user.bio,
        image=user.image,
        following=bool(following),
    )


class ContentViews:
    """Builds views for one viewer (``None`` for anonymous callers)."""

    def __init__(self, session: AsyncSession, viewer_id: Optional[uuid.UUID] = None):
        self.session = session
        self.viewer_id = viewer_id

    def article_query(self) -> Select:
        """Articles joined with author and flags; callers add filters and ordering."""
        favorites_count = (
            select(func.count())
            .where(ArticleFavorite.article_id == Article.id)
            .correlate(Article)
            .scalar_subquery()
        )
        if self.viewer_id is None:
            favorited = false()
        else:
            favorited = exists().where(
                ArticleFavorite.article_id == Article.id,
                ArticleFavorite.user_id == self.viewer_id,
            )
        return (
            select(
                Article,
                User,
                favorites_count.label("favorites_count"),
                favorited.label("favorited"),
                following_flag(Article.author_id, self.viewer_id).label("following"),
            )
            .join(User, User.id == Article.author_id)
        )

    async def _tags(self, article_ids: Sequence[uuid.UUID]) -> Dict[uuid.UUID, List[str]]:
        tags: Dict[uuid.UUID, List[str]] = defaultdict(list)
        if not article_ids:
            return tags
        result = await self.session.execute(
            select(ArticleTag.article_id, ArticleTag.tag)
            .where(ArticleTag.article_id.in_(article_ids))
            .order_by(ArticleTag.tag)
        )
        for article_id, tag in result:
            tags[article_id].append(tag)
        return tags

    async def articles(self, stmt: Select) -> List[ArticleView]:
        """Execute a statement built from ``article_query`` into views."""
        # rows may have been rewritten by Core UPDATEs the identity map never saw
        stmt = stmt.execution_options(populate_existing=True)
        rows = (await self.session.execute(stmt)).all()
        tags = await self._tags([row.Article.id for row in rows])
        views = []
        for row in rows:
            article = row.Article
            views.append(ArticleView(
                id=article.id,
                slug=article.slug,
                title=article.title,
                description=article.description,
                body=article.body,
                created_at=article.created_at,
                updated_at=article.updated_at,
                favorited=bool(row.favorited),
                favorites_count=int(row.favorites_count or 0),
                author=_profile(row.User, row.following),
                tag_list=tags.get(article.id, []),
            ))
        return views

    async def article_by_id(self, article_id: uuid.UUID) -> Optional[ArticleView]:
        views = await self.articles(self.article_query().where(Article.id == article_id))
        return views[0] if views else None

    async def article_by_slug(self, slug: str) -> Optional[ArticleView]:
        views = await self.articles(self.article_query().where(Article.slug == slug))
        return views[0] if views else None

    def comment_query(self) -> Select:
        return (
            select(
                Comment,
                User,
                following_flag(Comment.author_id, self.viewer_id).label("following"),
            )
            .join(User, User.id == Comment.author_id)
        )

    async def comments(self, stmt: Select) -> List[CommentView]:
        rows = (await self.session.execute(stmt)).all()
        return [
            CommentView(
                id=row.Comment.id,
                body=row.Comment.body,
                created_at=row.Comment.created_at,
                updated_at=row.Comment.updated_at,
                author=_profile(row.User, row.following),
            )
            for row in rows
        ]

    async def profile(self, username: str) -> Optional[ProfileView]:
        stmt = select(User, following_flag(User.id, self.viewer_id).label("following")).where(
            User.username == username
        )
        row = (await self.session.execute(stmt)).one_or_none()
        if row is None:
            return None
        return _profile(row.User, row.following)
