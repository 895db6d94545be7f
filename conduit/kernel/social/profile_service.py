"""
Profiles and the follow graph.
"""

import uuid
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from conduit.database import commit_or_fail
from conduit.kernel.content.views import ContentViews, ProfileView
from conduit.kernel.errors import NotFoundError
from conduit.kernel.mutations import AssociationToggler
from conduit.kernel.storage import EdgeRef, RowLookup, SqlStorage
from conduit.logging_config import get_logger

logger = get_logger(__name__)

SELF_FOLLOW_CONSTRAINT = "user_cannot_follow_self"


def follow_edge(follower_id: uuid.UUID, username: str) -> EdgeRef:
    return EdgeRef(
        table="follows",
        subject_column="following_user_id",
        object_column="followed_user_id",
        subject=follower_id,
        object=RowLookup("users", {"username": username}),
        forbidden_on=(SELF_FOLLOW_CONSTRAINT,),
    )


class ProfileService:
    """Service for reading profiles and following/unfollowing users."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.toggler = AssociationToggler(SqlStorage(session))

    async def get_profile(self, username: str, viewer_id: Optional[uuid.UUID] = None) -> ProfileView:
        profile = await ContentViews(self.session, viewer_id).profile(username)
        if profile is None:
            raise NotFoundError("Profile not found")
        return profile

    async def follow(self, follower_id: uuid.UUID, username: str) -> ProfileView:
        """
        Follow ``username``. Following someone already followed is a no-op.

        Raises:
            NotFoundError: no such user
            ForbiddenError: a user cannot follow themselves
        """
        await self.toggler.add(follow_edge(follower_id, username))
        await commit_or_fail(self.session)
        logger.debug("%s follows %s", follower_id, username)
        return await self.get_profile(username, follower_id)

    async def unfollow(self, follower_id: uuid.UUID, username: str) -> ProfileView:
        await self.toggler.remove(follow_edge(follower_id, username))
        await commit_or_fail(self.session)
        return await self.get_profile(username, follower_id)
