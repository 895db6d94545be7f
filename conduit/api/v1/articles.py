"""
Article endpoints: CRUD, favorites, listing, feed and tags.
"""

from typing import Optional

from fastapi import APIRouter, Query, Response, status

from conduit.api.deps import CurrentPrincipal, DbSession, OptionalPrincipal
from conduit.kernel.content.article_service import ArticleService
from conduit.kernel.content.listing_service import ArticlePage, ListingService
from conduit.schemas.article import (
    Article,
    ArticleBody,
    CreateArticleBody,
    MultipleArticles,
    TagsBody,
    UpdateArticleBody,
)

router = APIRouter()


def _multiple(page: ArticlePage) -> MultipleArticles:
    return MultipleArticles(
        articles=[Article.model_validate(view) for view in page.articles],
        articles_count=page.articles_count,
    )


@router.get("/articles", response_model=MultipleArticles)
async def list_articles(
    principal: OptionalPrincipal,
    db: DbSession,
    tag: Optional[str] = None,
    author: Optional[str] = None,
    favorited: Optional[str] = None,
    limit: Optional[int] = Query(None, ge=0),
    offset: Optional[int] = Query(None, ge=0),
):
    """List articles, most recent first, optionally filtered by tag, author or favoriter."""
    page = await ListingService(db).list_articles(
        viewer_id=principal.user_id if principal else None,
        tag=tag,
        author=author,
        favorited=favorited,
        limit=limit,
        offset=offset,
    )
    return _multiple(page)


# Declared before /articles/{slug} so "feed" is not taken for a slug
@router.get("/articles/feed", response_model=MultipleArticles)
async def feed_articles(
    principal: CurrentPrincipal,
    db: DbSession,
    limit: Optional[int] = Query(None, ge=0),
    offset: Optional[int] = Query(None, ge=0),
):
    """Articles by followed authors, most recent first."""
    page = await ListingService(db).feed(principal.user_id, limit=limit, offset=offset)
    return _multiple(page)


@router.post("/articles", response_model=ArticleBody, status_code=status.HTTP_201_CREATED)
async def create_article(data: CreateArticleBody, principal: CurrentPrincipal, db: DbSession):
    article = data.article
    view = await ArticleService(db).create_article(
        author_id=principal.user_id,
        title=article.title,
        description=article.description,
        body=article.body,
        tag_list=article.tag_list,
    )
    return ArticleBody(article=Article.model_validate(view))


@router.get("/articles/{slug}", response_model=ArticleBody)
async def get_article(slug: str, principal: OptionalPrincipal, db: DbSession):
    view = await ArticleService(db).get_article(slug, principal.user_id if principal else None)
    return ArticleBody(article=Article.model_validate(view))


@router.put("/articles/{slug}", response_model=ArticleBody)
async def update_article(
    slug: str,
    data: UpdateArticleBody,
    principal: CurrentPrincipal,
    db: DbSession,
):
    """Update an article you authored. A new title also changes the slug."""
    changes = data.article
    view = await ArticleService(db).update_article(
        principal.user_id,
        slug,
        title=changes.title,
        description=changes.description,
        body=changes.body,
    )
    return ArticleBody(article=Article.model_validate(view))


@router.delete("/articles/{slug}", status_code=status.HTTP_200_OK)
async def delete_article(slug: str, principal: CurrentPrincipal, db: DbSession):
    await ArticleService(db).delete_article(principal.user_id, slug)
    return Response(status_code=status.HTTP_200_OK)


@router.post("/articles/{slug}/favorite", response_model=ArticleBody)
async def favorite_article(slug: str, principal: CurrentPrincipal, db: DbSession):
    view = await ArticleService(db).favorite_article(principal.user_id, slug)
    return ArticleBody(article=Article.model_validate(view))


@router.delete("/articles/{slug}/favorite", response_model=ArticleBody)
async def unfavorite_article(slug: str, principal: CurrentPrincipal, db: DbSession):
    view = await ArticleService(db).unfavorite_article(principal.user_id, slug)
    return ArticleBody(article=Article.model_validate(view))


@router.get("/tags", response_model=TagsBody)
async def get_tags(db: DbSession):
    return TagsBody(tags=await ArticleService(db).get_tags())
