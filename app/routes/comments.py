"""
Comment routes. Counter upkeep on the blog happens inside the core.
"""
from fastapi import APIRouter, Depends

from ..auth import actor_for, get_required_user
from ..dependencies import BlogCore, get_core
from ..models.user import User
from ..responses import success
from ..schemas.comment import CommentCreate, CommentReportRequest, comment_to_dict, thread_comments

router = APIRouter(prefix="/api/comments", tags=["comments"])


@router.get("/blog/{blog_id}")
def list_comments(blog_id: int, core: BlogCore = Depends(get_core)):
    """Visible comments of a blog, replies nested under their parent."""
    comments = core.comments.list_comments(blog_id)
    return success(thread_comments(comments))


@router.post("", status_code=201)
def create_comment(
    data: CommentCreate,
    current_user: User = Depends(get_required_user),
    core: BlogCore = Depends(get_core),
):
    comment = core.comments.add_comment(
        data.blog_id, actor_for(current_user), data.content, data.parent_id
    )
    return success(comment_to_dict(comment), message="Comment created successfully")


@router.delete("/{comment_id}")
def delete_comment(
    comment_id: int,
    current_user: User = Depends(get_required_user),
    core: BlogCore = Depends(get_core),
):
    """Delete a comment and its replies (author or admin)."""
    removed = core.comments.delete_comment(comment_id, actor_for(current_user))
    return success({"removed": removed}, message="Comment deleted successfully")


@router.post("/{comment_id}/report")
def report_comment(
    comment_id: int,
    data: CommentReportRequest,
    current_user: User = Depends(get_required_user),
    core: BlogCore = Depends(get_core),
):
    """Flag a comment for moderation. Each user can report a comment once."""
    comment = core.comments.report_comment(comment_id, actor_for(current_user), data.reason)
    return success(
        {"id": comment.id, "is_reported": comment.is_reported},
        message="Comment reported successfully",
    )
