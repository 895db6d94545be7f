"""
Content: articles, comments, tags and listings.
"""

from conduit.kernel.content.article_service import ArticleService
from conduit.kernel.content.comment_service import CommentService
from conduit.kernel.content.listing_service import ArticlePage, ListingService
from conduit.kernel.content.slug import slugify
from conduit.kernel.content.views import ArticleView, CommentView, ContentViews, ProfileView

__all__ = [
    "ArticleService",
    "CommentService",
    "ListingService",
    "ArticlePage",
    "slugify",
    "ArticleView",
    "CommentView",
    "ContentViews",
    "ProfileView",
]
