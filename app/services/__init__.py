from .errors import (
    BlogError,
    NotFound,
    PermissionDenied,
    InvalidTransition,
    ValidationError,
    StorageError,
)
from .ports import Actor, ROLE_ADMIN, ROLE_USER
from .scoring import EngagementMetrics, compute_score
from .slugs import allocate_slug, base_slug
from .state_machine import ContentStateMachine
from .engagement import PostCounters, CommentCollaborator, LikeCollaborator
from .moderation import ModerationWorkflow, BlogDraft, CascadeResult

__all__ = [
    "BlogError",
    "NotFound",
    "PermissionDenied",
    "InvalidTransition",
    "ValidationError",
    "StorageError",
    "Actor",
    "ROLE_ADMIN",
    "ROLE_USER",
    "EngagementMetrics",
    "compute_score",
    "allocate_slug",
    "base_slug",
    "ContentStateMachine",
    "PostCounters",
    "CommentCollaborator",
    "LikeCollaborator",
    "ModerationWorkflow",
    "BlogDraft",
    "CascadeResult",
]
