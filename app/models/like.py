"""
Like model, one row per user per blog.
"""
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, UniqueConstraint
from datetime import datetime, timezone
from ..database import Base


class Like(Base):
    __tablename__ = "likes"
    __table_args__ = (
        UniqueConstraint("user_id", "blog_id", name="uq_likes_user_blog"),
    )

    id = Column(Integer, primary_key=True, index=True)
    blog_id = Column(Integer, ForeignKey("blogs.id"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    type = Column(String(20), default="like", nullable=False)  # like, love, insightful, helpful
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
