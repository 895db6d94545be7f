"""
Comment model.
"""

import uuid

from sqlalchemy import BigInteger, ForeignKey, Integer, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from conduit.kernel.models.base import Base, TimestampMixin


class Comment(Base, TimestampMixin):
    """A comment on an article, deletable only by its author."""

    __tablename__ = "comments"

    # BigInteger on PostgreSQL, INTEGER on SQLite so it stays the rowid alias
    id: Mapped[int] = mapped_column(
        BigInteger().with_variant(Integer, "sqlite"),
        primary_key=True,
        autoincrement=True,
    )
    article_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        ForeignKey("articles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    author_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    body: Mapped[str] = mapped_column(
        Text,
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<Comment {self.id} article={self.article_id}>"
