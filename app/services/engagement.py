"""
Comment and like collaborators plus the counter capability they share.

Counters live on the post row. Instead of comments and likes locating the
post model on their own, each collaborator is handed a ``PostCounters`` at
construction and goes through it, so every counter change also refreshes
the trending score.
"""
from typing import List, Optional, Tuple

from ..logging_config import core_logger
from .errors import NotFound, PermissionDenied, ValidationError
from .ports import Actor, CommentStore, LikeStore, PostStore
from .state_machine import APPROVED, ContentStateMachine

METRIC_FIELDS = ("views", "likes", "comments", "shares")
LIKE_KINDS = ("like", "love", "insightful", "helpful")
COMMENT_MAX_LENGTH = 1000
REPORT_REASONS = ("spam", "inappropriate", "harassment", "other")
REPORT_THRESHOLD = 3
MODERATION_ACTIONS = ("hide", "show")


class PostCounters:
    """Adjusts engagement counters of a post and re-scores it."""

    def __init__(self, posts: PostStore, machine: ContentStateMachine):
        self.posts = posts
        self.machine = machine

    def adjust(self, post_id: int, field: str, delta: int):
        if field not in METRIC_FIELDS:
            raise ValidationError(f"Unknown metric '{field}'", field="metric")

        post = self.posts.find_by_id(post_id)
        if post is None:
            raise NotFound("Blog", post_id)

        # counters never go negative
        setattr(post, field, max(0, (getattr(post, field) or 0) + delta))
        return self.machine.save(post, previous_status=post.status)


def _require_published(posts: PostStore, post_id: int, action: str):
    post = posts.find_by_id(post_id)
    if post is None:
        raise NotFound("Blog", post_id)
    if post.status != APPROVED:
        raise ValidationError(f"Cannot {action} unpublished blog")
    return post


class CommentCollaborator:
    """
    Comments on posts, one level of replies deep.

    The post's ``comments`` counter tracks what readers can see: hiding a
    top-level comment also takes its replies out of the count.
    """

    def __init__(self, comments: CommentStore, posts: PostStore, counters: PostCounters):
        self.comments = comments
        self.posts = posts
        self.counters = counters

    def _load(self, comment_id: int):
        comment = self.comments.find_by_id(comment_id)
        if comment is None:
            raise NotFound("Comment", comment_id)
        return comment

    def _visible_weight(self, comment) -> int:
        """How many listed comments ``comment`` accounts for."""
        if comment.is_hidden:
            return 0
        if comment.parent_id is not None:
            parent = self.comments.find_by_id(comment.parent_id)
            return 0 if parent is None or parent.is_hidden else 1
        visible = self.comments.list_for_blog(comment.blog_id)
        return 1 + sum(1 for c in visible if c.parent_id == comment.id)

    def add_comment(self, post_id: int, actor: Actor, content: str, parent_id: Optional[int] = None):
        post = _require_published(self.posts, post_id, "comment on")
        if not post.is_comment_enabled:
            raise ValidationError("Comments are disabled for this blog")

        content = (content or "").strip()
        if not 1 <= len(content) <= COMMENT_MAX_LENGTH:
            raise ValidationError(
                f"Comment must be between 1 and {COMMENT_MAX_LENGTH} characters",
                field="content",
            )

        if parent_id is not None:
            parent = self.comments.find_by_id(parent_id)
            # replies only attach to visible top-level comments of the same blog
            if (
                parent is None
                or parent.blog_id != post_id
                or parent.parent_id is not None
                or parent.is_hidden
            ):
                raise ValidationError("Invalid parent comment", field="parent_id")

        comment = self.comments.add(post_id, actor.id, content, parent_id)
        self.counters.adjust(post_id, "comments", 1)
        return comment

    def delete_comment(self, comment_id: int, actor: Actor) -> int:
        """Delete a comment and its replies; returns how many rows went."""
        comment = self._load(comment_id)
        if comment.author_id != actor.id and not actor.is_admin:
            raise PermissionDenied("Not authorized to delete this comment")

        blog_id = comment.blog_id
        visible = self._visible_weight(comment)
        removed = self.comments.delete(comment)
        if visible:
            self.counters.adjust(blog_id, "comments", -visible)
        return removed

    # ============================================================
    # REPORTS AND MODERATION
    # ============================================================

    def report_comment(self, comment_id: int, actor: Actor, reason: str = "other"):
        """
        Record a reader's report. A comment is flagged for admins once
        ``REPORT_THRESHOLD`` different readers have reported it.
        """
        reason = reason or "other"
        if reason not in REPORT_REASONS:
            raise ValidationError(f"Report reason must be one of: {', '.join(REPORT_REASONS)}", field="reason")

        comment = self._load(comment_id)
        if self.comments.find_report(comment_id, actor.id) is not None:
            raise ValidationError("You have already reported this comment")

        reports = self.comments.add_report(comment_id, actor.id, reason)
        if reports >= REPORT_THRESHOLD and not comment.is_reported:
            comment.is_reported = True
            comment = self.comments.save(comment)
            core_logger.info("Comment flagged for moderation", comment_id=comment_id, reports=reports)
        return comment

    def moderate_comment(self, comment_id: int, actor: Actor, action: str):
        """Hide or show a comment (admin only). Either way the report flag is cleared."""
        if not actor.is_admin:
            raise PermissionDenied("Admin access required")
        if action not in MODERATION_ACTIONS:
            raise ValidationError("Action must be either hide or show", field="action")

        comment = self._load(comment_id)
        hide = action == "hide"
        before = self._visible_weight(comment)
        comment.is_hidden = hide
        comment.is_reported = False
        comment = self.comments.save(comment)
        after = self._visible_weight(comment)

        if after != before:
            self.counters.adjust(comment.blog_id, "comments", after - before)
        core_logger.info("Comment moderated", comment_id=comment_id, action=action, actor_id=actor.id)
        return comment

    def list_reported(self, actor: Actor, page: int = 1, per_page: int = 20):
        if not actor.is_admin:
            raise PermissionDenied("Admin access required")
        return self.comments.list_reported(page, per_page)

    def list_comments(self, post_id: int) -> List:
        """Visible comments; replies under a hidden comment are left out too."""
        if self.posts.find_by_id(post_id) is None:
            raise NotFound("Blog", post_id)
        visible = self.comments.list_for_blog(post_id)
        shown = {c.id for c in visible if c.parent_id is None}
        return [c for c in visible if c.parent_id is None or c.parent_id in shown]

    def delete_all_by_blog(self, post_id: int) -> int:
        return self.comments.delete_all_by_blog(post_id)


class LikeCollaborator:
    """One like per user per post."""

    def __init__(self, likes: LikeStore, posts: PostStore, counters: PostCounters):
        self.likes = likes
        self.posts = posts
        self.counters = counters

    def toggle_like(self, post_id: int, actor: Actor, kind: str = "like") -> Tuple[bool, int]:
        """
        Like the post, or take an existing like back.

        Returns:
            (liked, like_count) after the toggle
        """
        if kind not in LIKE_KINDS:
            raise ValidationError(f"Like type must be one of: {', '.join(LIKE_KINDS)}", field="type")
        _require_published(self.posts, post_id, "like")

        existing = self.likes.find(post_id, actor.id)
        if existing is not None:
            self.likes.delete(existing)
            post = self.counters.adjust(post_id, "likes", -1)
            liked = False
        else:
            self.likes.add(post_id, actor.id, kind)
            post = self.counters.adjust(post_id, "likes", 1)
            liked = True

        core_logger.debug("Blog like toggled", blog_id=post_id, user_id=actor.id, liked=liked)
        return liked, post.likes

    def delete_all_by_blog(self, post_id: int) -> int:
        return self.likes.delete_all_by_blog(post_id)
