"""
Moderation workflow for blog posts.

Author writes (create/update), admin decisions (review, feature, hide/show),
deletion with cascade, and view counting. Every write goes through
``ContentStateMachine`` so the transition rules and the save pipeline apply
uniformly.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ..logging_config import core_logger, timed
from .content import (
    normalize_tags,
    validate_category,
    validate_content,
    validate_excerpt,
    validate_title,
)
from .engagement import PostCounters
from .errors import NotFound, PermissionDenied, ValidationError
from .ports import Actor, PostStore, UserStats
from .state_machine import (
    APPROVED,
    DRAFT,
    HIDDEN,
    PENDING,
    REJECTED,
    STATUSES,
    ContentStateMachine,
)

REVIEW_DECISIONS = (APPROVED, REJECTED)
REJECTION_MIN_LENGTH = 10
ADMIN_NOTES_MAX_LENGTH = 500

EDITABLE_FIELDS = frozenset({
    "title",
    "content",
    "excerpt",
    "tags",
    "category",
    "featured_image",
    "is_comment_enabled",
    "status",
    "admin_notes",
    "is_featured",
    "is_pinned",
})
ADMIN_FIELDS = frozenset({"admin_notes", "is_featured", "is_pinned"})


@dataclass
class BlogDraft:
    """Fields an author submits when creating a post"""
    title: str
    content: str
    excerpt: Optional[str] = None
    tags: List[str] = field(default_factory=list)
    category: Optional[str] = None
    featured_image: str = ""
    status: str = DRAFT
    is_comment_enabled: bool = True
    is_featured: bool = False


@dataclass
class CascadeResult:
    """What a delete managed to remove"""
    blog_id: int
    comments_removed: int = 0
    likes_removed: int = 0
    failed_steps: List[str] = field(default_factory=list)

    @property
    def complete(self) -> bool:
        return not self.failed_steps


class ModerationWorkflow:
    """
    Admin and author operations on blog posts.

    Collaborators:
        posts: PostStore
        comments / likes: anything with ``delete_all_by_blog(blog_id)``
        users: UserStats, keeps the author's ``total_blogs`` aggregate
    """

    def __init__(
        self,
        posts: PostStore,
        comments,
        likes,
        users: UserStats,
        machine: ContentStateMachine,
        counters: Optional[PostCounters] = None,
    ):
        self.posts = posts
        self.comments = comments
        self.likes = likes
        self.users = users
        self.machine = machine
        self.counters = counters or PostCounters(posts, machine)

    # ============================================================
    # HELPERS
    # ============================================================

    def _load(self, post_id: int):
        post = self.posts.find_by_id(post_id)
        if post is None:
            raise NotFound("Blog", post_id)
        return post

    @staticmethod
    def _require_admin(actor: Actor):
        if not actor.is_admin:
            raise PermissionDenied("Admin access required")

    @staticmethod
    def _check_notes(decision: str, notes: Optional[str]) -> str:
        notes = (notes or "").strip()
        if len(notes) > ADMIN_NOTES_MAX_LENGTH:
            raise ValidationError(
                f"Admin notes cannot exceed {ADMIN_NOTES_MAX_LENGTH} characters",
                field="admin_notes",
            )
        if decision == REJECTED and len(notes) < REJECTION_MIN_LENGTH:
            raise ValidationError(
                f"Rejection reason must be at least {REJECTION_MIN_LENGTH} characters",
                field="admin_notes",
            )
        return notes

    # ============================================================
    # AUTHOR OPERATIONS
    # ============================================================

    def create_blog(self, actor: Actor, draft: BlogDraft):
        """
        Create a post owned by ``actor``.

        Non-admins may only create drafts or submit straight for review.
        Admins may publish directly, which stamps ``published_at``.
        """
        title = validate_title(draft.title)
        content = validate_content(draft.content)
        excerpt = validate_excerpt(draft.excerpt)
        tags = normalize_tags(draft.tags)
        category = validate_category(draft.category)

        requested = draft.status or DRAFT
        if requested not in STATUSES:
            raise ValidationError(f"Status must be one of: {', '.join(STATUSES)}", field="status")
        if not actor.is_admin and requested not in (DRAFT, PENDING):
            raise PermissionDenied("Only admins can publish or moderate blogs")
        if draft.is_featured and not actor.is_admin:
            raise PermissionDenied("Only admins can feature blogs")

        post = self.posts.new_post(
            title=title,
            slug=None,
            content=content,
            excerpt=excerpt,
            author_id=actor.id,
            featured_image=draft.featured_image or "",
            tags=tags,
            category=category,
            status=DRAFT,
            published_at=None,
            views=0,
            likes=0,
            comments=0,
            shares=0,
            reading_time=1,
            trending_score=0.0,
            admin_notes="",
            reviewed_by=None,
            reviewed_at=None,
            is_comment_enabled=draft.is_comment_enabled,
            is_featured=draft.is_featured,
            is_pinned=False,
            created_at=None,
        )
        if requested != DRAFT:
            self.machine.apply_transition(post, requested, actor)

        post = self.machine.save(post, previous_status=None, title_changed=True, content_changed=True)
        self.users.increment_blog_count(actor.id, 1)

        core_logger.info("Blog created", blog_id=post.id, author_id=actor.id, status=post.status)
        return post

    def update_blog(self, post_id: int, actor: Actor, changes: Dict[str, Any]):
        """
        Apply a partial update. Keys with ``None`` values are ignored.

        Raises:
            NotFound, PermissionDenied, ValidationError, InvalidTransition
        """
        post = self._load(post_id)
        if not actor.is_admin and not actor.owns(post):
            raise PermissionDenied("Not authorized to update this blog")

        changes = {k: v for k, v in changes.items() if v is not None}
        unknown = set(changes) - EDITABLE_FIELDS
        if unknown:
            raise ValidationError(f"Unknown fields: {', '.join(sorted(unknown))}")
        if not actor.is_admin and ADMIN_FIELDS & set(changes):
            raise PermissionDenied("Only admins can change featured, pinned or review fields")

        previous_status = post.status
        title_changed = content_changed = False

        if "title" in changes:
            title = validate_title(changes["title"])
            title_changed = title != post.title
            post.title = title
        if "content" in changes:
            content = validate_content(changes["content"])
            content_changed = content != post.content
            post.content = content
        if "excerpt" in changes:
            post.excerpt = validate_excerpt(changes["excerpt"])
        if "tags" in changes:
            post.tags = normalize_tags(changes["tags"])
        if "category" in changes:
            post.category = validate_category(changes["category"])
        for flag in ("featured_image", "is_comment_enabled", "is_featured", "is_pinned"):
            if flag in changes:
                setattr(post, flag, changes[flag])

        status = changes.get("status")
        if status is not None and (status != previous_status or not actor.is_admin):
            notes = changes.get("admin_notes")
            reviewer_id = None
            if actor.is_admin and status in REVIEW_DECISIONS:
                notes = self._check_notes(status, notes)
                reviewer_id = actor.id
            self.machine.apply_transition(post, status, actor, reviewer_id=reviewer_id, notes=notes)
        elif "admin_notes" in changes:
            post.admin_notes = self._check_notes(post.status, changes["admin_notes"])

        return self.machine.save(
            post,
            previous_status=previous_status,
            title_changed=title_changed,
            content_changed=content_changed,
        )

    def get_blog(self, post_id: int, actor: Optional[Actor] = None):
        """Approved posts are public; anything else only to its author or an admin."""
        post = self._load(post_id)
        if post.status != APPROVED:
            if actor is None or not (actor.is_admin or actor.owns(post)):
                raise PermissionDenied("Not authorized to view this blog")
        return post

    # ============================================================
    # ADMIN OPERATIONS
    # ============================================================

    def review_blog(self, post_id: int, actor: Actor, decision: str, notes: Optional[str] = None):
        """
        Approve or reject a post.

        The current status is not required to be pending; re-reviewing an
        approved or rejected post is allowed as far as the transition table
        permits.
        """
        self._require_admin(actor)
        if decision not in REVIEW_DECISIONS:
            raise ValidationError("Status must be either approved or rejected", field="status")
        notes = self._check_notes(decision, notes)

        post = self._load(post_id)
        previous_status = post.status
        self.machine.apply_transition(post, decision, actor, reviewer_id=actor.id, notes=notes)
        post = self.machine.save(post, previous_status=previous_status)

        core_logger.info(
            f"Blog {decision}",
            blog_id=post.id,
            reviewer_id=actor.id,
            previous_status=previous_status,
        )
        return post

    def toggle_featured(self, post_id: int, actor: Actor):
        self._require_admin(actor)
        post = self._load(post_id)
        post.is_featured = not post.is_featured
        return self.machine.save(post, previous_status=post.status)

    def toggle_visibility(self, post_id: int, actor: Actor):
        """Hidden posts are re-published; anything else is hidden."""
        self._require_admin(actor)
        post = self._load(post_id)
        previous_status = post.status
        target = APPROVED if previous_status == HIDDEN else HIDDEN
        self.machine.apply_transition(post, target, actor)
        return self.machine.save(post, previous_status=previous_status)

    @timed(core_logger)
    def delete_blog(self, post_id: int, actor: Actor) -> CascadeResult:
        """
        Delete a post with its comments and likes.

        Cleanup runs as independent steps without a transaction. A failing
        comment, like or author-counter step is logged and the rest still
        runs; the final post delete propagates its errors.
        """
        post = self._load(post_id)
        if not actor.is_admin and not actor.owns(post):
            raise PermissionDenied("Not authorized to delete this blog")

        author_id = post.author_id
        result = CascadeResult(blog_id=post_id)

        try:
            result.comments_removed = self.comments.delete_all_by_blog(post_id)
        except Exception as e:
            result.failed_steps.append("comments")
            core_logger.error("Failed to delete blog comments", error=e, blog_id=post_id)

        try:
            result.likes_removed = self.likes.delete_all_by_blog(post_id)
        except Exception as e:
            result.failed_steps.append("likes")
            core_logger.error("Failed to delete blog likes", error=e, blog_id=post_id)

        try:
            self.users.increment_blog_count(author_id, -1)
        except Exception as e:
            result.failed_steps.append("author_stats")
            core_logger.error("Failed to update author blog count", error=e, author_id=author_id)

        self.posts.delete_by_id(post_id)

        core_logger.info(
            "Blog deleted",
            blog_id=post_id,
            actor_id=actor.id,
            comments_removed=result.comments_removed,
            likes_removed=result.likes_removed,
            failed_steps=result.failed_steps,
        )
        return result

    # ============================================================
    # READER OPERATIONS
    # ============================================================

    def increment_view(self, post_id: int):
        """
        Count one view.

        Whether this view should count at all (dedupe window) is the caller's
        decision.
        """
        return self.counters.adjust(post_id, "views", 1)
