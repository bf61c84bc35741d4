"""
Blog post model.

Derived columns (slug, reading_time, trending_score) are written by the
save pipeline in ``app.services.state_machine``, never by ORM hooks.
"""
from sqlalchemy import Column, Integer, String, DateTime, Text, JSON, Float, Boolean, ForeignKey, Index, text
from sqlalchemy.orm import relationship
from datetime import datetime, timezone
from ..database import Base


class Blog(Base):
    __tablename__ = "blogs"
    __table_args__ = (
        # Slugs only have to be unique among approved posts
        Index(
            "uq_blogs_approved_slug",
            "slug",
            unique=True,
            sqlite_where=text("status = 'approved'"),
            postgresql_where=text("status = 'approved'"),
        ),
        Index("ix_blogs_status_trending", "status", "trending_score"),
    )

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(100), nullable=False)
    slug = Column(String(80), nullable=False, index=True)
    content = Column(Text, nullable=False)
    excerpt = Column(String(300), nullable=True)
    author_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    featured_image = Column(String(500), default="")
    tags = Column(JSON, default=list)
    category = Column(String(50), nullable=True)
    status = Column(String(20), default="draft", nullable=False, index=True)  # draft, pending, approved, rejected, hidden
    published_at = Column(DateTime(timezone=True), nullable=True, index=True)

    # Engagement counters
    views = Column(Integer, default=0, nullable=False)
    likes = Column(Integer, default=0, nullable=False)
    comments = Column(Integer, default=0, nullable=False)
    shares = Column(Integer, default=0, nullable=False)

    reading_time = Column(Integer, default=1, nullable=False)  # minutes
    trending_score = Column(Float, default=0.0, nullable=False)

    # Moderation
    admin_notes = Column(String(500), default="", nullable=False)
    reviewed_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    reviewed_at = Column(DateTime(timezone=True), nullable=True)

    is_comment_enabled = Column(Boolean, default=True, nullable=False)
    is_featured = Column(Boolean, default=False, nullable=False)
    is_pinned = Column(Boolean, default=False, nullable=False)

    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    # Relationships
    author = relationship("User", foreign_keys=[author_id])
