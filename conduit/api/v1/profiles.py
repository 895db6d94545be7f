"""
Profile endpoints.
"""

from fastapi import APIRouter

from conduit.api.deps import CurrentPrincipal, DbSession, OptionalPrincipal
from conduit.kernel.social.profile_service import ProfileService
from conduit.schemas.profile import Profile, ProfileBody

router = APIRouter()


@router.get("/{username}", response_model=ProfileBody)
async def get_profile(username: str, principal: OptionalPrincipal, db: DbSession):
    viewer_id = principal.user_id if principal else None
    profile = await ProfileService(db).get_profile(username, viewer_id)
    return ProfileBody(profile=Profile.model_validate(profile))


@router.post("/{username}/follow", response_model=ProfileBody)
async def follow_user(username: str, principal: CurrentPrincipal, db: DbSession):
    """Follow a user. Following an already followed user succeeds unchanged."""
    profile = await ProfileService(db).follow(principal.user_id, username)
    return ProfileBody(profile=Profile.model_validate(profile))


@router.delete("/{username}/follow", response_model=ProfileBody)
async def unfollow_user(username: str, principal: CurrentPrincipal, db: DbSession):
    profile = await ProfileService(db).unfollow(principal.user_id, username)
    return ProfileBody(profile=Profile.model_validate(profile))
