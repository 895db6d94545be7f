"""
Comment endpoints, nested under an article's slug.
"""

from fastapi import APIRouter, Response, status

from conduit.api.deps import CurrentPrincipal, DbSession, OptionalPrincipal
from conduit.kernel.content.comment_service import CommentService
from conduit.schemas.comment import AddCommentBody, Comment, CommentBody, MultipleComments

router = APIRouter()


@router.get("/{slug}/comments", response_model=MultipleComments)
async def list_comments(slug: str, principal: OptionalPrincipal, db: DbSession):
    views = await CommentService(db).list_comments(slug, principal.user_id if principal else None)
    return MultipleComments(comments=[Comment.model_validate(view) for view in views])


@router.post("/{slug}/comments", response_model=CommentBody)
async def add_comment(slug: str, data: AddCommentBody, principal: CurrentPrincipal, db: DbSession):
    view = await CommentService(db).add_comment(principal.user_id, slug, data.comment.body)
    return CommentBody(comment=Comment.model_validate(view))


@router.delete("/{slug}/comments/{comment_id}")
async def delete_comment(slug: str, comment_id: int, principal: CurrentPrincipal, db: DbSession):
    """Delete a comment you wrote; 403 for someone else's, 404 if it is not on this article."""
    await CommentService(db).delete_comment(principal.user_id, slug, comment_id)
    return Response(status_code=status.HTTP_200_OK)
