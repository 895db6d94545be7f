"""
Follow edge between two users.
"""

import uuid
from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column

from conduit.kernel.models.base import Base


class Follow(Base):
    """``following_user_id`` follows ``followed_user_id``."""

    __tablename__ = "follows"
    __table_args__ = (
        CheckConstraint(
            "following_user_id <> followed_user_id",
            name="user_cannot_follow_self",
        ),
    )

    following_user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
    )
    followed_user_id: Mapped[uuid.UUID] = mapped_column(
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
