"""
Admin moderation routes for blogs and comments, plus dashboard stats.
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query

from ..auth import actor_for, require_admin
from ..dependencies import BlogCore, get_core
from ..models.user import User
from ..responses import paginated, success
from ..schemas.blog import ReviewRequest, blog_to_dict
from ..schemas.comment import ModerateCommentRequest, moderated_comment_to_dict

router = APIRouter(prefix="/api/admin", tags=["admin"])


@router.get("/blogs")
def list_all_blogs(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    status: Optional[str] = None,
    author: Optional[int] = None,
    search: Optional[str] = None,
    admin: User = Depends(require_admin),
    core: BlogCore = Depends(get_core),
):
    """All blogs in any status."""
    posts, total = core.posts.list_all(
        page=page, per_page=limit, status=status, author_id=author, search=search
    )
    return paginated([blog_to_dict(p, include_content=False) for p in posts], total, page, limit)


@router.get("/blogs/pending")
def pending_blogs(
    admin: User = Depends(require_admin),
    core: BlogCore = Depends(get_core),
):
    """The review queue, newest first."""
    posts, _ = core.posts.list_all(per_page=50, status="pending")
    return success([blog_to_dict(p) for p in posts])


@router.put("/blogs/{blog_id}/review")
def review_blog(
    blog_id: int,
    review: ReviewRequest,
    admin: User = Depends(require_admin),
    core: BlogCore = Depends(get_core),
):
    """Approve or reject a blog. Rejections need a reason."""
    blog = core.workflow.review_blog(blog_id, actor_for(admin), review.status, review.admin_notes)
    return success({"blog": blog_to_dict(blog)}, message=f"Blog {blog.status} successfully")


@router.put("/blogs/{blog_id}/featured")
def toggle_featured(
    blog_id: int,
    admin: User = Depends(require_admin),
    core: BlogCore = Depends(get_core),
):
    blog = core.workflow.toggle_featured(blog_id, actor_for(admin))
    return success(
        {"id": blog.id, "title": blog.title, "is_featured": blog.is_featured},
        message=f"Blog {'featured' if blog.is_featured else 'unfeatured'} successfully",
    )


@router.put("/blogs/{blog_id}/visibility")
def toggle_visibility(
    blog_id: int,
    admin: User = Depends(require_admin),
    core: BlogCore = Depends(get_core),
):
    blog = core.workflow.toggle_visibility(blog_id, actor_for(admin))
    return success(
        {"id": blog.id, "title": blog.title, "status": blog.status},
        message=f"Blog {'hidden' if blog.status == 'hidden' else 'shown'} successfully",
    )


@router.delete("/blogs/{blog_id}")
def delete_blog(
    blog_id: int,
    admin: User = Depends(require_admin),
    core: BlogCore = Depends(get_core),
):
    result = core.workflow.delete_blog(blog_id, actor_for(admin))
    return success(
        {
            "comments_removed": result.comments_removed,
            "likes_removed": result.likes_removed,
            "complete": result.complete,
        },
        message="Blog deleted successfully",
    )


# ============================================================
# COMMENTS
# ============================================================

@router.get("/comments/reported")
def reported_comments(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    admin: User = Depends(require_admin),
    core: BlogCore = Depends(get_core),
):
    """Comments flagged by enough readers, newest first."""
    comments, total = core.comments.list_reported(actor_for(admin), page=page, per_page=limit)
    return paginated([moderated_comment_to_dict(c) for c in comments], total, page, limit)


@router.put("/comments/{comment_id}/moderate")
def moderate_comment(
    comment_id: int,
    data: ModerateCommentRequest,
    admin: User = Depends(require_admin),
    core: BlogCore = Depends(get_core),
):
    comment = core.comments.moderate_comment(comment_id, actor_for(admin), data.action)
    return success(
        moderated_comment_to_dict(comment),
        message=f"Comment {'hidden' if comment.is_hidden else 'shown'} successfully",
    )


# ============================================================
# DASHBOARD
# ============================================================

@router.get("/stats")
def dashboard_stats(
    admin: User = Depends(require_admin),
    core: BlogCore = Depends(get_core),
):
    """Site totals, the five most recent blogs and the top authors."""
    stats = core.stats.counts()
    recent, _ = core.posts.list_all(per_page=5)
    stats["recent_blogs"] = [blog_to_dict(p, include_content=False) for p in recent]
    stats["top_authors"] = core.stats.top_authors(limit=5)
    return success(stats)
