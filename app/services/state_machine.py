"""
Blog lifecycle: status transitions and the explicit save pipeline.

    draft -> pending -> approved / rejected
    approved <-> hidden, rejected -> pending (resubmit) or approved

No status is terminal. Which targets an actor may pick depends on the role
(and, for non-admins, on owning the post). Every save goes through ``save``,
which re-derives slug, reading time and trending score in a fixed order
before handing the row to the store.
"""
from datetime import datetime, timezone
from typing import Callable, Dict, FrozenSet, Optional

from ..logging_config import core_logger
from .content import make_excerpt, reading_time
from .errors import InvalidTransition, PermissionDenied, ValidationError
from .ports import Actor, PostStore
from .scoring import score_post
from .slugs import allocate_slug

DRAFT = "draft"
PENDING = "pending"
APPROVED = "approved"
REJECTED = "rejected"
HIDDEN = "hidden"
STATUSES = (DRAFT, PENDING, APPROVED, REJECTED, HIDDEN)

# Only admins may ever put a post into these
ADMIN_ONLY_STATUSES = frozenset({APPROVED, REJECTED, HIDDEN})

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ContentStateMachine:
    """
    Validates and applies status changes, then persists through one pipeline.

    The machine mutates the post in memory; nothing is written until
    ``save`` is called.
    """

    OWNER_TRANSITIONS: Dict[str, FrozenSet[str]] = {
        DRAFT: frozenset({PENDING}),
        PENDING: frozenset(),
        APPROVED: frozenset(),
        REJECTED: frozenset({PENDING}),
        HIDDEN: frozenset(),
    }

    ADMIN_TRANSITIONS: Dict[str, FrozenSet[str]] = {
        DRAFT: frozenset({APPROVED, REJECTED, HIDDEN}),
        PENDING: frozenset({APPROVED, REJECTED}),
        APPROVED: frozenset({HIDDEN, REJECTED}),
        REJECTED: frozenset({APPROVED, HIDDEN}),
        HIDDEN: frozenset({APPROVED}),
    }

    def __init__(self, posts: PostStore, clock: Clock = utcnow):
        self.posts = posts
        self.clock = clock

    def allowed_targets(self, post, actor: Actor) -> FrozenSet[str]:
        """Statuses ``actor`` may move ``post`` to from where it is now."""
        allowed = frozenset()
        if actor.is_admin:
            allowed |= self.ADMIN_TRANSITIONS.get(post.status, frozenset())
        if actor.owns(post):
            allowed |= self.OWNER_TRANSITIONS.get(post.status, frozenset())
        return allowed

    def apply_transition(
        self,
        post,
        target: str,
        actor: Actor,
        reviewer_id: Optional[int] = None,
        notes: Optional[str] = None,
    ):
        """
        Move ``post`` to ``target`` on behalf of ``actor``.

        A target equal to the current status is accepted and leaves the status
        alone (re-review); review stamps and notes are still applied.

        Raises:
            ValidationError: unknown status, or rejection without a reason
            PermissionDenied: non-admin asking for an admin-only status, or
                acting on someone else's post
            InvalidTransition: target not reachable from the current status
        """
        if target not in STATUSES:
            raise ValidationError(
                f"Status must be one of: {', '.join(STATUSES)}", field="status"
            )
        if target in ADMIN_ONLY_STATUSES and not actor.is_admin:
            raise PermissionDenied(f"Only admins can mark a blog as {target}")
        if not actor.is_admin and not actor.owns(post):
            raise PermissionDenied("Not authorized to change this blog")

        current = post.status
        if target != current:
            allowed = self.allowed_targets(post, actor)
            if target not in allowed:
                raise InvalidTransition(current, target, allowed)

        now = self.clock()
        if target == REJECTED:
            reason = (notes or "").strip()
            if not reason:
                raise ValidationError("A rejection reason is required", field="admin_notes")
            post.admin_notes = reason
        elif target != current or reviewer_id is not None:
            post.admin_notes = ""

        if target == APPROVED and post.published_at is None:
            post.published_at = now

        if reviewer_id is not None:
            post.reviewed_by = reviewer_id
            post.reviewed_at = now

        post.status = target
        core_logger.info(
            "Blog status transition",
            blog_id=post.id,
            from_status=current,
            to_status=target,
            actor_id=actor.id,
            actor_role=actor.role,
        )
        return post

    # ============================================================
    # SAVE PIPELINE
    # ============================================================

    def slug_taken(self, slug: str, exclude_id: Optional[int]) -> bool:
        return self.posts.count_by_slug_status(slug, APPROVED, exclude_id) > 0

    def save(
        self,
        post,
        previous_status: Optional[str] = None,
        title_changed: bool = False,
        content_changed: bool = False,
    ):
        """
        Recompute derived fields and persist.

        Order: slug, reading time/excerpt, trending score, store write.

        Args:
            post: Post row (new or loaded)
            previous_status: Status before this save; None for new posts
            title_changed: Title was set or edited in this save
            content_changed: Content was set or edited in this save
        """
        now = self.clock()
        if post.created_at is None:
            post.created_at = now

        entering_approved = post.status == APPROVED and previous_status != APPROVED
        if title_changed or entering_approved or not post.slug:
            post.slug = allocate_slug(
                post.title,
                post.id,
                post.status == APPROVED,
                self.slug_taken,
            )

        if content_changed:
            post.reading_time = reading_time(post.content)
            if not post.excerpt:
                post.excerpt = make_excerpt(post.content)

        post.trending_score = score_post(post, now)
        post.updated_at = now
        return self.posts.save(post)
