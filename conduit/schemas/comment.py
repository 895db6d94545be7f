"""
Comment schemas.
"""

from datetime import datetime
from typing import List

from pydantic import BaseModel, Field

from conduit.schemas.common import CamelModel
from conduit.schemas.profile import Profile


class AddComment(CamelModel):
    body: str = Field(..., min_length=1)


class Comment(CamelModel):
    id: int
    created_at: datetime
    updated_at: datetime
    body: str
    author: Profile


class AddCommentBody(BaseModel):
    comment: AddComment


class CommentBody(BaseModel):
    comment: Comment


class MultipleComments(BaseModel):
    comments: List[Comment]
