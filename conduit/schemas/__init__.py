"""
Pydantic schemas for API request/response validation.
"""

from conduit.schemas.common import CamelModel, DetailResponse, ErrorResponse, HealthResponse
from conduit.schemas.user import (
    LoginUser,
    LoginUserBody,
    NewUser,
    NewUserBody,
    UpdateUser,
    UpdateUserBody,
    UserBody,
    UserWithToken,
)
from conduit.schemas.profile import Profile, ProfileBody
from conduit.schemas.article import (
    Article,
    ArticleBody,
    CreateArticle,
    CreateArticleBody,
    MultipleArticles,
    TagsBody,
    UpdateArticle,
    UpdateArticleBody,
)
from conduit.schemas.comment import AddComment, AddCommentBody, Comment, CommentBody, MultipleComments

__all__ = [
    "CamelModel",
    "DetailResponse",
    "ErrorResponse",
    "HealthResponse",
    "LoginUser",
    "LoginUserBody",
    "NewUser",
    "NewUserBody",
    "UpdateUser",
    "UpdateUserBody",
    "UserBody",
    "UserWithToken",
    "Profile",
    "ProfileBody",
    "Article",
    "ArticleBody",
    "CreateArticle",
    "CreateArticleBody",
    "MultipleArticles",
    "TagsBody",
    "UpdateArticle",
    "UpdateArticleBody",
    "AddComment",
    "AddCommentBody",
    "Comment",
    "CommentBody",
    "MultipleComments",
]
