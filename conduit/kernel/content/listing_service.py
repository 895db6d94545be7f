"""
Article listing and the personal feed.
"""

import uuid
from dataclasses import dataclass
from typing import List, Optional

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from conduit.config import get_settings
from conduit.kernel.content.views import ArticleView, ContentViews
from conduit.kernel.models import Article, ArticleFavorite, ArticleTag, Follow, User


@dataclass
class ArticlePage:
    articles: List[ArticleView]
    # matching articles across all pages, not just this one
    articles_count: int


class ListingService:
    """Read-only article queries with optional filters and paging."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.default_page_size = get_settings().default_page_size

    async def _page(
        self,
        views: ContentViews,
        stmt: Select,
        limit: Optional[int],
        offset: Optional[int],
    ) -> ArticlePage:
        count_stmt = select(func.count()).select_from(
            stmt.with_only_columns(Article.id).order_by(None).subquery()
        )
        total = (await self.session.execute(count_stmt)).scalar_one()

        page = (
            stmt.order_by(Article.created_at.desc(), Article.id)
            .limit(self.default_page_size if limit is None else limit)
            .offset(offset or 0)
        )
        return ArticlePage(articles=await views.articles(page), articles_count=total)

    async def list_articles(
        self,
        viewer_id: Optional[uuid.UUID] = None,
        tag: Optional[str] = None,
        author: Optional[str] = None,
        favorited: Optional[str] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> ArticlePage:
        """
        Most recent articles first, optionally filtered.

        Args:
            viewer_id: Caller, drives the ``favorited``/``following`` flags
            tag: Only articles carrying this tag
            author: Only articles by this username
            favorited: Only articles favorited by this username
            limit: Page size (default from settings)
            offset: Articles to skip
        """
        views = ContentViews(self.session, viewer_id)
        stmt = views.article_query()

        if tag is not None:
            stmt = stmt.where(
                Article.id.in_(select(ArticleTag.article_id).where(ArticleTag.tag == tag))
            )
        if author is not None:
            stmt = stmt.where(User.username == author)
        if favorited is not None:
            fan = aliased(User)
            stmt = stmt.where(
                Article.id.in_(
                    select(ArticleFavorite.article_id)
                    .join(fan, fan.id == ArticleFavorite.user_id)
                    .where(fan.username == favorited)
                )
            )

        return await self._page(views, stmt, limit, offset)

    async def feed(
        self,
        viewer_id: uuid.UUID,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> ArticlePage:
        """Articles by authors ``viewer_id`` follows, most recent first."""
        views = ContentViews(self.session, viewer_id)
        stmt = views.article_query().where(
            Article.author_id.in_(
                select(Follow.followed_user_id).where(Follow.following_user_id == viewer_id)
            )
        )
        return await self._page(views, stmt, limit, offset)
