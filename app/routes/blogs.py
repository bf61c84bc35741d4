"""
Blog routes: public listings, reading (with view counting), authoring and likes.
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request

from ..auth import actor_for, get_current_user, get_required_user
from ..config import get_settings
from ..dependencies import BlogCore, get_core, get_view_tracker
from ..limiter import limiter
from ..models.user import User
from ..responses import paginated, success
from ..schemas.blog import BlogCreate, BlogUpdate, LikeRequest, blog_to_dict
from ..services.errors import NotFound, ValidationError
from ..services.moderation import BlogDraft
from ..view_tracker import ViewTracker, track_view

settings = get_settings()

router = APIRouter(prefix="/api/blogs", tags=["blogs"])


def _summaries(posts) -> list:
    return [blog_to_dict(p, include_content=False) for p in posts]


# ============================================================
# LISTINGS
# ============================================================

@router.get("")
def list_blogs(
    page: int = Query(1, ge=1),
    limit: int = Query(settings.page_size_default, ge=1, le=settings.page_size_max),
    tag: Optional[str] = None,
    author: Optional[int] = None,
    search: Optional[str] = None,
    sort_by: str = "created_at",
    sort_order: str = Query("desc", pattern="^(asc|desc)$"),
    core: BlogCore = Depends(get_core),
):
    """Approved blogs with filtering, sorting and pagination."""
    posts, total = core.posts.list_published(
        page=page,
        per_page=limit,
        tag=tag,
        author_id=author,
        search=search,
        sort_by=sort_by,
        descending=sort_order == "desc",
    )
    return paginated(_summaries(posts), total, page, limit)


@router.get("/trending")
def trending_blogs(
    limit: int = Query(settings.trending_default_limit, ge=1, le=settings.page_size_max),
    core: BlogCore = Depends(get_core),
):
    """Approved blogs ranked by trending score."""
    return success(_summaries(core.posts.trending(limit)))


@router.get("/latest")
def latest_blogs(
    limit: int = Query(10, ge=1, le=settings.page_size_max),
    core: BlogCore = Depends(get_core),
):
    return success(_summaries(core.posts.latest(limit)))


@router.get("/featured")
def featured_blogs(
    limit: int = Query(5, ge=1, le=settings.page_size_max),
    core: BlogCore = Depends(get_core),
):
    return success(_summaries(core.posts.featured(limit)))


@router.get("/search")
def search_blogs(
    q: str = "",
    limit: int = Query(20, ge=1, le=settings.page_size_max),
    core: BlogCore = Depends(get_core),
):
    if not q.strip():
        raise ValidationError("Search query is required", field="q")
    posts, _ = core.posts.list_published(per_page=limit, search=q.strip())
    return success(_summaries(posts), meta={"query": q.strip()})


@router.get("/mine")
def my_blogs(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=settings.page_size_max),
    status: Optional[str] = None,
    current_user: User = Depends(get_required_user),
    core: BlogCore = Depends(get_core),
):
    """The current user's blogs in any status."""
    posts, total = core.posts.list_all(page=page, per_page=limit, status=status, author_id=current_user.id)
    return paginated(_summaries(posts), total, page, limit)


# ============================================================
# READING
# ============================================================

@router.get("/by-id/{blog_id}")
def get_blog_by_id(
    blog_id: int,
    current_user: Optional[User] = Depends(get_current_user),
    core: BlogCore = Depends(get_core),
):
    """Any status, for its author and admins (editing, previews)."""
    blog = core.workflow.get_blog(blog_id, actor_for(current_user))
    return success({"blog": blog_to_dict(blog)})


@router.get("/{slug}")
def get_blog_by_slug(
    slug: str,
    request: Request,
    current_user: Optional[User] = Depends(get_current_user),
    core: BlogCore = Depends(get_core),
    tracker: ViewTracker = Depends(get_view_tracker),
):
    """
    Read an approved blog.

    The first read per session, address and blog within the view window
    counts as a view.
    """
    blog = core.posts.find_one(slug=slug, status="approved")
    if blog is None:
        raise NotFound("Blog", slug)

    key = tracker.key_for(
        request.headers.get("X-Session-Id"),
        request.client.host if request.client else None,
        blog.id,
    )
    track_view(tracker, key, core.workflow, blog.id)

    is_liked = False
    if current_user is not None:
        is_liked = core.likes.likes.find(blog.id, current_user.id) is not None

    return success({"blog": blog_to_dict(blog), "is_liked": is_liked})


# ============================================================
# AUTHORING
# ============================================================

@router.post("", status_code=201)
def create_blog(
    data: BlogCreate,
    current_user: User = Depends(get_required_user),
    core: BlogCore = Depends(get_core),
):
    """Create a blog. Authors get draft or pending; admins may publish directly."""
    blog = core.workflow.create_blog(actor_for(current_user), BlogDraft(**data.model_dump()))
    return success({"blog": blog_to_dict(blog)}, message="Blog created successfully")


@router.put("/{blog_id}")
def update_blog(
    blog_id: int,
    data: BlogUpdate,
    current_user: User = Depends(get_required_user),
    core: BlogCore = Depends(get_core),
):
    """Update a blog (owner or admin)."""
    blog = core.workflow.update_blog(blog_id, actor_for(current_user), data.model_dump(exclude_unset=True))
    return success({"blog": blog_to_dict(blog)}, message="Blog updated successfully")


@router.delete("/{blog_id}")
def delete_blog(
    blog_id: int,
    current_user: User = Depends(get_required_user),
    core: BlogCore = Depends(get_core),
):
    """Delete a blog with its comments and likes (owner or admin)."""
    result = core.workflow.delete_blog(blog_id, actor_for(current_user))
    return success(
        {
            "comments_removed": result.comments_removed,
            "likes_removed": result.likes_removed,
            "complete": result.complete,
        },
        message="Blog deleted successfully",
    )


@router.post("/{blog_id}/like")
@limiter.limit(settings.like_rate_limit)
def toggle_like(
    request: Request,
    blog_id: int,
    data: Optional[LikeRequest] = None,
    current_user: User = Depends(get_required_user),
    core: BlogCore = Depends(get_core),
):
    """Like an approved blog, or take the like back."""
    kind = data.type if data else "like"
    liked, like_count = core.likes.toggle_like(blog_id, actor_for(current_user), kind)
    return success(
        {"liked": liked, "like_count": like_count},
        message="Blog liked" if liked else "Blog unliked",
    )
