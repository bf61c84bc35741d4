"""
Blog request bodies and the response shape.

Computed fields (metrics block, formatted publish date) are produced here,
at the serialization boundary, and never stored.
"""
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel

from ..services.scoring import EngagementMetrics, as_utc


class BlogCreate(BaseModel):
    title: str
    content: str
    excerpt: Optional[str] = None
    tags: List[str] = []
    category: Optional[str] = None
    featured_image: str = ""
    status: str = "draft"
    is_comment_enabled: bool = True
    is_featured: bool = False


class BlogUpdate(BaseModel):
    title: Optional[str] = None
    content: Optional[str] = None
    excerpt: Optional[str] = None
    tags: Optional[List[str]] = None
    category: Optional[str] = None
    featured_image: Optional[str] = None
    status: Optional[str] = None
    admin_notes: Optional[str] = None
    is_comment_enabled: Optional[bool] = None
    is_featured: Optional[bool] = None
    is_pinned: Optional[bool] = None


class ReviewRequest(BaseModel):
    status: str
    admin_notes: Optional[str] = None


class LikeRequest(BaseModel):
    type: str = "like"


def iso(value: Optional[datetime]) -> Optional[str]:
    return as_utc(value).isoformat() if value else None


def format_publish_date(published_at: Optional[datetime]) -> Optional[str]:
    """'January 5, 2026' style date, or None for unpublished posts"""
    if not published_at:
        return None
    return f"{published_at:%B} {published_at.day}, {published_at.year}"


def author_to_dict(user) -> Optional[dict]:
    if user is None:
        return None
    return {"id": user.id, "display_name": user.display_name}


def blog_to_dict(blog, include_content: bool = True) -> dict:
    """Convert a Blog row to a response dictionary."""
    data = {
        "id": blog.id,
        "title": blog.title,
        "slug": blog.slug,
        "excerpt": blog.excerpt,
        "status": blog.status,
        "author_id": blog.author_id,
        "author": author_to_dict(blog.author),
        "tags": blog.tags or [],
        "category": blog.category,
        "featured_image": blog.featured_image,
        "published_at": iso(blog.published_at),
        "formatted_publish_date": format_publish_date(blog.published_at),
        "metrics": EngagementMetrics.of(blog).to_dict(),
        "trending_score": round(blog.trending_score or 0.0, 4),
        "reading_time": blog.reading_time,
        "is_featured": blog.is_featured,
        "is_pinned": blog.is_pinned,
        "is_comment_enabled": blog.is_comment_enabled,
        "admin_notes": blog.admin_notes,
        "reviewed_by": blog.reviewed_by,
        "reviewed_at": iso(blog.reviewed_at),
        "created_at": iso(blog.created_at),
        "updated_at": iso(blog.updated_at),
    }
    if include_content:
        data["content"] = blog.content
    return data
