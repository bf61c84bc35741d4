"""
Trending score for blog posts.

Engagement counters weighted per kind, decayed exponentially by the age of
the post. Pure functions only: callers decide when to store the result.
"""
import math
from dataclasses import dataclass
from datetime import datetime, timezone


class ScoreConfig:
    """Trending score weights"""

    LIKE_WEIGHT = 2.0
    COMMENT_WEIGHT = 3.0
    VIEW_WEIGHT = 0.1
    SHARE_WEIGHT = 5.0

    DECAY_RATE = 0.1            # per day
    SECONDS_PER_DAY = 86400.0


@dataclass(frozen=True)
class EngagementMetrics:
    """Counter snapshot of a post"""
    views: int = 0
    likes: int = 0
    comments: int = 0
    shares: int = 0

    @classmethod
    def of(cls, post) -> "EngagementMetrics":
        return cls(
            views=post.views or 0,
            likes=post.likes or 0,
            comments=post.comments or 0,
            shares=post.shares or 0,
        )

    def to_dict(self) -> dict:
        return {
            "views": self.views,
            "likes": self.likes,
            "comments": self.comments,
            "shares": self.shares,
        }


def as_utc(value: datetime) -> datetime:
    """SQLite hands back naive datetimes; treat them as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def engagement_of(metrics: EngagementMetrics) -> float:
    return (
        metrics.likes * ScoreConfig.LIKE_WEIGHT
        + metrics.comments * ScoreConfig.COMMENT_WEIGHT
        + metrics.views * ScoreConfig.VIEW_WEIGHT
        + metrics.shares * ScoreConfig.SHARE_WEIGHT
    )


def decay_factor(reference_time: datetime, now: datetime) -> float:
    """
    Freshness multiplier in (0, 1].

    Content dated in the future (clock skew) gets full freshness, never more.
    """
    age_days = (as_utc(now) - as_utc(reference_time)).total_seconds() / ScoreConfig.SECONDS_PER_DAY
    # clamp before exp so far-future dates cannot overflow
    return math.exp(-ScoreConfig.DECAY_RATE * max(0.0, age_days))


def compute_score(metrics: EngagementMetrics, reference_time: datetime, now: datetime) -> float:
    """
    Time-decayed engagement score.

    Args:
        metrics: Engagement counters of the post
        reference_time: publish time, or creation time for never-published posts
        now: Evaluation time

    Returns:
        engagement * decay
    """
    return engagement_of(metrics) * decay_factor(reference_time, now)


def reference_time_for(post) -> datetime:
    return post.published_at or post.created_at


def score_post(post, now: datetime) -> float:
    return compute_score(EngagementMetrics.of(post), reference_time_for(post), now)
