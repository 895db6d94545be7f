"""
API routes.
"""

from fastapi import APIRouter

from conduit.api.v1 import articles, comments, profiles, users

router = APIRouter()

router.include_router(users.router, tags=["Users"])
router.include_router(profiles.router, prefix="/profiles", tags=["Profiles"])
router.include_router(comments.router, prefix="/articles", tags=["Comments"])
router.include_router(articles.router, tags=["Articles"])
