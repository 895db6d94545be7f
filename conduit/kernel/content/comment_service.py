"""
Comment service.
"""

import uuid
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from conduit.database import commit_or_fail
from conduit.kernel.content.views import CommentView, ContentViews
from conduit.kernel.errors import NotFoundError
from conduit.kernel.models import Article, Comment
from conduit.kernel.mutations import ConditionalMutationExecutor
from conduit.kernel.storage import ResourceRef, RowLookup, SqlStorage
from conduit.kernel.storage.constraints import violation_from
from conduit.logging_config import get_logger

logger = get_logger(__name__)


def comment_ref(slug: str, comment_id: int) -> ResourceRef:
    """A comment addressed through its article's slug."""
    return ResourceRef(
        table="comments",
        key={"id": comment_id, "article_id": RowLookup("articles", {"slug": slug})},
        owner_column="author_id",
    )


class CommentService:
    """Service for listing, adding and deleting article comments."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.executor = ConditionalMutationExecutor(SqlStorage(session))

    async def _article_id(self, slug: str) -> uuid.UUID:
        article_id = (
            await self.session.execute(select(Article.id).where(Article.slug == slug))
        ).scalar_one_or_none()
        if article_id is None:
            raise NotFoundError("Article not found")
        return article_id

    async def list_comments(self, slug: str, viewer_id: Optional[uuid.UUID] = None) -> List[CommentView]:
        article_id = await self._article_id(slug)
        views = ContentViews(self.session, viewer_id)
        return await views.comments(
            views.comment_query()
            .where(Comment.article_id == article_id)
            .order_by(Comment.created_at, Comment.id)
        )

    async def add_comment(self, author_id: uuid.UUID, slug: str, body: str) -> CommentView:
        article_id = await self._article_id(slug)
        comment = Comment(article_id=article_id, author_id=author_id, body=body)
        self.session.add(comment)
        try:
            await self.session.flush()
        except IntegrityError as exc:
            if violation_from(exc).kind == "foreign_key":
                # the article was deleted after it was looked up
                raise NotFoundError("Article not found") from exc
            raise
        await commit_or_fail(self.session)

        views = ContentViews(self.session, author_id)
        comments = await views.comments(views.comment_query().where(Comment.id == comment.id))
        if not comments:
            raise NotFoundError("Article not found")
        return comments[0]

    async def delete_comment(self, actor_id: uuid.UUID, slug: str, comment_id: int) -> None:
        """
        Delete a comment owned by ``actor_id``.

        A comment id that exists under a different article is NotFound for
        this slug.
        """
        outcome = await self.executor.delete(comment_ref(slug, comment_id), actor_id)
        outcome.unwrap()
        await commit_or_fail(self.session)
        logger.info("Comment %s on %s deleted by %s", comment_id, slug, actor_id)
