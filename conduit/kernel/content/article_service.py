"""
Article service: create, read, update, delete and favorite articles.
"""

import uuid
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from conduit.database import commit_or_fail
from conduit.kernel.content.slug import slugify
from conduit.kernel.content.views import ArticleView, ContentViews
from conduit.kernel.errors import NotFoundError
from conduit.kernel.models import Article, ArticleTag
from conduit.kernel.mutations import AssociationToggler, ConditionalMutationExecutor
from conduit.kernel.storage import EdgeRef, LockedRow, ResourceRef, RowLookup, SqlStorage
from conduit.kernel.storage.constraints import on_constraint
from conduit.logging_config import get_logger

logger = get_logger(__name__)

SLUG_CONSTRAINT = "articles_slug_key"


def article_ref(slug: str) -> ResourceRef:
    return ResourceRef(table="articles", key={"slug": slug}, owner_column="author_id")


def favorite_edge(user_id: uuid.UUID, slug: str) -> EdgeRef:
    return EdgeRef(
        table="article_favorites",
        subject_column="user_id",
        object_column="article_id",
        subject=user_id,
        object=RowLookup("articles", {"slug": slug}),
    )


class ArticleService:
    """
    Service for article operations.

    Ownership-gated writes go through the ConditionalMutationExecutor and
    favorites through the AssociationToggler; plain inserts and reads use
    the session directly.
    """

    def __init__(self, session: AsyncSession):
        self.session = session
        storage = SqlStorage(session)
        self.executor = ConditionalMutationExecutor(storage)
        self.toggler = AssociationToggler(storage)

    def views(self, viewer_id: Optional[uuid.UUID]) -> ContentViews:
        return ContentViews(self.session, viewer_id)

    async def _view(self, article_id: uuid.UUID, viewer_id: Optional[uuid.UUID]) -> ArticleView:
        view = await self.views(viewer_id).article_by_id(article_id)
        if view is None:
            # deleted between the write and the read-back
            raise NotFoundError()
        return view

    async def create_article(
        self,
        author_id: uuid.UUID,
        title: str,
        description: str,
        body: str,
        tag_list: Optional[List[str]] = None,
    ) -> ArticleView:
        """
        Create an article with a slug derived from its title.

        Raises:
            UnprocessableEntityError: another article already has the slug
        """
        slug = slugify(title)
        article = Article(
            author_id=author_id,
            slug=slug,
            title=title,
            description=description,
            body=body,
        )
        article.tags = [ArticleTag(tag=tag) for tag in sorted(set(tag_list or []))]
        self.session.add(article)

        await on_constraint(
            self.session.flush,
            {SLUG_CONSTRAINT: ("slug", f"duplicate article slug: {slug}")},
        )
        await commit_or_fail(self.session)
        logger.info("Article %s created by %s", slug, author_id)
        return await self._view(article.id, author_id)

    async def get_article(self, slug: str, viewer_id: Optional[uuid.UUID] = None) -> ArticleView:
        view = await self.views(viewer_id).article_by_slug(slug)
        if view is None:
            raise NotFoundError("Article not found")
        return view

    async def update_article(
        self,
        actor_id: uuid.UUID,
        slug: str,
        title: Optional[str] = None,
        description: Optional[str] = None,
        body: Optional[str] = None,
    ) -> ArticleView:
        """
        Partially update an article owned by ``actor_id``.

        A new title also renames the slug. The row is locked before the
        new values are derived.

        Raises:
            NotFoundError: no article has ``slug``
            ForbiddenError: the article belongs to someone else
            UnprocessableEntityError: the new slug collides with another article
        """
        def derive(locked: LockedRow):
            values = {
                name: value
                for name, value in (("title", title), ("description", description), ("body", body))
                if value is not None
            }
            if title is not None:
                values["slug"] = slugify(title)
            return values

        outcome = await self.executor.update(
            article_ref(slug),
            actor_id,
            derive,
            {SLUG_CONSTRAINT: ("slug", "duplicate article slug: {slug}")},
        )
        row = outcome.unwrap()
        await commit_or_fail(self.session)
        return await self._view(row["id"], actor_id)

    async def delete_article(self, actor_id: uuid.UUID, slug: str) -> None:
        """
        Delete an article owned by ``actor_id``.

        Raises:
            NotFoundError: no article has ``slug``
            ForbiddenError: the article belongs to someone else
        """
        outcome = await self.executor.delete(article_ref(slug), actor_id)
        outcome.unwrap()
        await commit_or_fail(self.session)
        logger.info("Article %s deleted by %s", slug, actor_id)

    async def favorite_article(self, user_id: uuid.UUID, slug: str) -> ArticleView:
        state = await self.toggler.add(favorite_edge(user_id, slug))
        await commit_or_fail(self.session)
        return await self._view(state.object, user_id)

    async def unfavorite_article(self, user_id: uuid.UUID, slug: str) -> ArticleView:
        state = await self.toggler.remove(favorite_edge(user_id, slug))
        await commit_or_fail(self.session)
        return await self._view(state.object, user_id)

    async def get_tags(self) -> List[str]:
        """All tags in use, sorted."""
        result = await self.session.execute(
            select(ArticleTag.tag).distinct().order_by(ArticleTag.tag)
        )
        return list(result.scalars().all())
