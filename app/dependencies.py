"""
Per-request wiring of the blog core onto the SQLAlchemy session.
"""
from fastapi import Depends
from sqlalchemy.orm import Session

from .config import get_settings
from .database import get_db
from .repositories import SqlCommentStore, SqlDashboardStats, SqlLikeStore, SqlPostStore, SqlUserStats
from .services.engagement import CommentCollaborator, LikeCollaborator, PostCounters
from .services.moderation import ModerationWorkflow
from .services.state_machine import ContentStateMachine
from .view_tracker import ViewTracker

view_tracker = ViewTracker(window_seconds=get_settings().view_window_seconds)


class BlogCore:
    """Everything the routes need, built around one session"""

    def __init__(self, db: Session):
        self.posts = SqlPostStore(db)
        self.machine = ContentStateMachine(self.posts)
        self.counters = PostCounters(self.posts, self.machine)
        self.comments = CommentCollaborator(SqlCommentStore(db), self.posts, self.counters)
        self.likes = LikeCollaborator(SqlLikeStore(db), self.posts, self.counters)
        self.workflow = ModerationWorkflow(
            posts=self.posts,
            comments=self.comments,
            likes=self.likes,
            users=SqlUserStats(db),
            machine=self.machine,
            counters=self.counters,
        )
        self.stats = SqlDashboardStats(db)


def get_core(db: Session = Depends(get_db)) -> BlogCore:
    return BlogCore(db)


def get_view_tracker() -> ViewTracker:
    return view_tracker
