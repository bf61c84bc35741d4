"""
SQLAlchemy implementations of the blog core's collaborator contracts.

Every write commits on its own; the core relies on per-row atomicity only.
Driver and constraint failures surface as ``StorageError``.
"""
from functools import wraps
from typing import List, Optional

from sqlalchemy import String, case, cast, func, or_, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from .logging_config import db_logger
from .models.blog import Blog
from .models.comment import Comment, CommentReport
from .models.like import Like
from .models.user import User
from .services.errors import StorageError


def storage_errors(func):
    """Roll back and re-raise SQLAlchemy failures as StorageError."""
    @wraps(func)
    def wrapper(self, *args, **kwargs):
        try:
            return func(self, *args, **kwargs)
        except IntegrityError as e:
            self.db.rollback()
            db_logger.warning(f"{func.__qualname__} hit a constraint", error_message=str(e.orig))
            raise StorageError("Conflicting record", {"operation": func.__qualname__}) from e
        except SQLAlchemyError as e:
            self.db.rollback()
            db_logger.error(f"{func.__qualname__} failed", error=e)
            raise StorageError("Storage operation failed", {"operation": func.__qualname__}) from e
    return wrapper


class SqlPostStore:
    """PostStore over the ``blogs`` table."""

    SORTABLE = {
        "created_at": Blog.created_at,
        "published_at": Blog.published_at,
        "trending_score": Blog.trending_score,
        "views": Blog.views,
        "likes": Blog.likes,
        "title": Blog.title,
    }

    def __init__(self, db: Session):
        self.db = db

    def new_post(self, **fields) -> Blog:
        return Blog(**fields)

    @storage_errors
    def find_by_id(self, post_id: int) -> Optional[Blog]:
        return self.db.get(Blog, post_id)

    @storage_errors
    def find_one(self, **filters) -> Optional[Blog]:
        return self.db.query(Blog).filter_by(**filters).first()

    @storage_errors
    def save(self, post: Blog) -> Blog:
        self.db.add(post)
        self.db.commit()
        self.db.refresh(post)
        return post

    @storage_errors
    def delete_by_id(self, post_id: int) -> None:
        self.db.query(Blog).filter(Blog.id == post_id).delete(synchronize_session="fetch")
        self.db.commit()

    @storage_errors
    def count_by_slug_status(self, slug: str, status: str, exclude_id: Optional[int]) -> int:
        query = self.db.query(func.count(Blog.id)).filter(Blog.slug == slug, Blog.status == status)
        if exclude_id is not None:
            query = query.filter(Blog.id != exclude_id)
        return query.scalar()

    # ============================================================
    # LISTINGS
    # ============================================================

    def _published(self):
        return self.db.query(Blog).filter(Blog.status == "approved")

    @storage_errors
    def list_published(
        self,
        page: int = 1,
        per_page: int = 12,
        tag: Optional[str] = None,
        author_id: Optional[int] = None,
        search: Optional[str] = None,
        sort_by: str = "created_at",
        descending: bool = True,
    ):
        """Approved posts, filtered and paginated. Returns (posts, total)."""
        query = self._published()
        if tag:
            # tags are a JSON array; match the quoted element
            query = query.filter(cast(Blog.tags, String).contains(f'"{tag.lower()}"', autoescape=True))
        if author_id:
            query = query.filter(Blog.author_id == author_id)
        if search:
            pattern = f"%{search}%"
            query = query.filter(or_(Blog.title.ilike(pattern), Blog.content.ilike(pattern)))

        column = self.SORTABLE.get(sort_by, Blog.created_at)
        total = query.count()
        posts = (
            query.order_by(column.desc() if descending else column.asc())
            .offset((page - 1) * per_page)
            .limit(per_page)
            .all()
        )
        return posts, total

    @storage_errors
    def trending(self, limit: int = 10) -> List[Blog]:
        return (
            self._published()
            .order_by(Blog.trending_score.desc(), Blog.created_at.desc())
            .limit(limit)
            .all()
        )

    @storage_errors
    def latest(self, limit: int = 10) -> List[Blog]:
        return (
            self._published()
            .order_by(Blog.published_at.desc(), Blog.created_at.desc())
            .limit(limit)
            .all()
        )

    @storage_errors
    def featured(self, limit: int = 5) -> List[Blog]:
        return (
            self._published()
            .filter(Blog.is_featured.is_(True))
            .order_by(Blog.created_at.desc())
            .limit(limit)
            .all()
        )

    @storage_errors
    def list_all(
        self,
        page: int = 1,
        per_page: int = 20,
        status: Optional[str] = None,
        author_id: Optional[int] = None,
        search: Optional[str] = None,
    ):
        """Any status, newest first. Returns (posts, total)."""
        query = self.db.query(Blog)
        if status:
            query = query.filter(Blog.status == status)
        if author_id:
            query = query.filter(Blog.author_id == author_id)
        if search:
            pattern = f"%{search}%"
            query = query.filter(or_(Blog.title.ilike(pattern), Blog.content.ilike(pattern)))
        total = query.count()
        posts = query.order_by(Blog.created_at.desc()).offset((page - 1) * per_page).limit(per_page).all()
        return posts, total


class SqlCommentStore:
    """CommentStore over the ``comments`` table."""

    def __init__(self, db: Session):
        self.db = db

    @storage_errors
    def add(self, blog_id: int, author_id: int, content: str, parent_id: Optional[int] = None) -> Comment:
        comment = Comment(blog_id=blog_id, author_id=author_id, content=content, parent_id=parent_id)
        self.db.add(comment)
        self.db.commit()
        self.db.refresh(comment)
        return comment

    @storage_errors
    def find_by_id(self, comment_id: int) -> Optional[Comment]:
        return self.db.get(Comment, comment_id)

    @storage_errors
    def save(self, comment: Comment) -> Comment:
        self.db.add(comment)
        self.db.commit()
        self.db.refresh(comment)
        return comment

    def _drop_reports(self, comment_ids) -> None:
        self.db.query(CommentReport).filter(CommentReport.comment_id.in_(comment_ids)).delete(
            synchronize_session="fetch"
        )

    @storage_errors
    def delete(self, comment: Comment) -> int:
        """Delete a comment with its replies and their reports; returns comments removed."""
        thread = select(Comment.id).where(Comment.parent_id == comment.id)
        self._drop_reports(thread)
        self._drop_reports([comment.id])
        replies = self.db.query(Comment).filter(Comment.parent_id == comment.id).delete(synchronize_session="fetch")
        self.db.delete(comment)
        self.db.commit()
        return replies + 1

    @storage_errors
    def list_for_blog(self, blog_id: int) -> List[Comment]:
        return (
            self.db.query(Comment)
            .filter(Comment.blog_id == blog_id, Comment.is_hidden.is_(False))
            .order_by(Comment.created_at.asc(), Comment.id.asc())
            .all()
        )

    @storage_errors
    def delete_all_by_blog(self, blog_id: int) -> int:
        self._drop_reports(select(Comment.id).where(Comment.blog_id == blog_id))
        removed = self.db.query(Comment).filter(Comment.blog_id == blog_id).delete(synchronize_session="fetch")
        self.db.commit()
        return removed

    # ============================================================
    # REPORTS
    # ============================================================

    @storage_errors
    def find_report(self, comment_id: int, user_id: int) -> Optional[CommentReport]:
        return (
            self.db.query(CommentReport)
            .filter(CommentReport.comment_id == comment_id, CommentReport.user_id == user_id)
            .first()
        )

    @storage_errors
    def add_report(self, comment_id: int, user_id: int, reason: str) -> int:
        """Store a report; returns how many reports the comment now has."""
        self.db.add(CommentReport(comment_id=comment_id, user_id=user_id, reason=reason))
        self.db.commit()
        return self.db.query(func.count(CommentReport.id)).filter(CommentReport.comment_id == comment_id).scalar()

    @storage_errors
    def list_reported(self, page: int = 1, per_page: int = 20):
        """Reported comments, newest first. Returns (comments, total)."""
        query = self.db.query(Comment).filter(Comment.is_reported.is_(True))
        total = query.count()
        comments = (
            query.order_by(Comment.created_at.desc(), Comment.id.desc())
            .offset((page - 1) * per_page)
            .limit(per_page)
            .all()
        )
        return comments, total


class SqlLikeStore:
    """LikeStore over the ``likes`` table."""

    def __init__(self, db: Session):
        self.db = db

    @storage_errors
    def find(self, blog_id: int, user_id: int) -> Optional[Like]:
        return self.db.query(Like).filter(Like.blog_id == blog_id, Like.user_id == user_id).first()

    @storage_errors
    def add(self, blog_id: int, user_id: int, kind: str = "like") -> Like:
        like = Like(blog_id=blog_id, user_id=user_id, type=kind)
        self.db.add(like)
        self.db.commit()
        return like

    @storage_errors
    def delete(self, like: Like) -> None:
        self.db.delete(like)
        self.db.commit()

    @storage_errors
    def delete_all_by_blog(self, blog_id: int) -> int:
        removed = self.db.query(Like).filter(Like.blog_id == blog_id).delete(synchronize_session="fetch")
        self.db.commit()
        return removed


class SqlUserStats:
    """UserStats over the ``users`` table."""

    def __init__(self, db: Session):
        self.db = db

    @storage_errors
    def increment_blog_count(self, author_id: int, delta: int) -> None:
        updated = User.total_blogs + delta
        self.db.query(User).filter(User.id == author_id).update(
            {User.total_blogs: case((updated < 0, 0), else_=updated)},
            synchronize_session="fetch",
        )
        self.db.commit()


class SqlDashboardStats:
    """Site-wide totals for the admin dashboard."""

    def __init__(self, db: Session):
        self.db = db

    @storage_errors
    def counts(self) -> dict:
        by_status = dict(self.db.query(Blog.status, func.count(Blog.id)).group_by(Blog.status).all())
        return {
            "total_users": self.db.query(func.count(User.id)).scalar(),
            "total_blogs": sum(by_status.values()),
            "total_comments": self.db.query(func.count(Comment.id)).scalar(),
            "total_likes": self.db.query(func.count(Like.id)).scalar(),
            "reported_comments": self.db.query(func.count(Comment.id)).filter(Comment.is_reported.is_(True)).scalar(),
            "blogs_by_status": by_status,
            "pending_blogs": by_status.get("pending", 0),
            "published_blogs": by_status.get("approved", 0),
        }

    @storage_errors
    def top_authors(self, limit: int = 5) -> List[dict]:
        """Authors ranked by approved blogs, with the views those blogs gathered."""
        rows = (
            self.db.query(
                User.id,
                User.display_name,
                func.count(Blog.id).label("blog_count"),
                func.coalesce(func.sum(Blog.views), 0).label("total_views"),
            )
            .join(Blog, Blog.author_id == User.id)
            .filter(Blog.status == "approved")
            .group_by(User.id, User.display_name)
            .order_by(func.count(Blog.id).desc())
            .limit(limit)
            .all()
        )
        return [
            {"id": r.id, "display_name": r.display_name, "blog_count": r.blog_count, "total_views": r.total_views}
            for r in rows
        ]
