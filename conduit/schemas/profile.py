"""
Profile schemas.
"""

from typing import Optional

from pydantic import BaseModel

from conduit.schemas.common import CamelModel


class Profile(CamelModel):
    """Public view of a user, relative to the caller."""

    username: str
    bio: str
    image: Optional[str] = None
    following: bool = False


class ProfileBody(BaseModel):
    profile: Profile
