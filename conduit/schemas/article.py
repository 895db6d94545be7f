"""
Article schemas.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from conduit.schemas.common import CamelModel
from conduit.schemas.profile import Profile


class CreateArticle(CamelModel):
    """Article creation request."""

    title: str = Field(..., min_length=1, max_length=512)
    description: str
    body: str
    tag_list: List[str] = Field(default_factory=list)


class UpdateArticle(CamelModel):
    """Partial article update. Tags cannot be changed after creation."""

    title: Optional[str] = Field(None, min_length=1, max_length=512)
    description: Optional[str] = None
    body: Optional[str] = None


class Article(CamelModel):
    slug: str
    title: str
    description: str
    body: str
    tag_list: List[str]
    created_at: datetime
    updated_at: datetime
    favorited: bool
    favorites_count: int
    author: Profile


class CreateArticleBody(BaseModel):
    article: CreateArticle


class UpdateArticleBody(BaseModel):
    article: UpdateArticle


class ArticleBody(BaseModel):
    article: Article


class MultipleArticles(CamelModel):
    articles: List[Article]
    articles_count: int


class TagsBody(BaseModel):
    tags: List[str]
