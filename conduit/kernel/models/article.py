"""
Article models: the article itself, its tags and its favorites.
"""

import uuid
from datetime import datetime
from typing import List

from sqlalchemy import DateTime, ForeignKey, Index, String, Text, UniqueConstraint, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from conduit.kernel.models.base import Base, TimestampMixin, generate_uuid


class Article(Base, TimestampMixin):
    """An article owned by its author."""

    __tablename__ = "articles"
    __table_args__ = (
        UniqueConstraint("slug", name="articles_slug_key"),
        Index("ix_articles_created_at", "created_at"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        primary_key=True,
        default=generate_uuid,
    )
    author_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    slug: Mapped[str] = mapped_column(
        String(512),
        nullable=False,
    )
    title: Mapped[str] = mapped_column(
        String(512),
        nullable=False,
    )
    description: Mapped[str] = mapped_column(
        Text,
        nullable=False,
    )
    body: Mapped[str] = mapped_column(
        Text,
        nullable=False,
    )

    tags: Mapped[List["ArticleTag"]] = relationship(
        "ArticleTag",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="ArticleTag.tag",
    )

    def __repr__(self) -> str:
        return f"<Article {self.slug}>"


class ArticleTag(Base):
    """One tag of an article; the tag list is the sorted set of these rows."""

    __tablename__ = "article_tags"

    article_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        ForeignKey("articles.id", ondelete="CASCADE"),
        primary_key=True,
    )
    tag: Mapped[str] = mapped_column(
        String(255),
        primary_key=True,
        index=True,
    )


class ArticleFavorite(Base):
    """Favorite edge between a user and an article."""

    __tablename__ = "article_favorites"

    article_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        ForeignKey("articles.id", ondelete="CASCADE"),
        primary_key=True,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
        index=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
