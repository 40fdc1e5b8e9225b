"""
SQLAlchemy models for the Postdesk admin panel.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Boolean, CheckConstraint, Column, DateTime, Index, String, Text

from postdesk.db.database import Base

EXCERPT_LENGTH = 150


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_post_id() -> str:
    return str(uuid.uuid4())


def derive_excerpt(content: str) -> str:
    """First 150 characters of the content followed by an ellipsis."""
    return content[:EXCERPT_LENGTH] + "..."


class Post(Base):
    """
    Blog post row.
    The id is opaque and assigned on insert; timestamps are store-managed.
    """
    __tablename__ = "blog_posts"

    id = Column(String(36), primary_key=True, default=new_post_id)
    title = Column(Text, nullable=False)
    content = Column(Text, nullable=False)
    excerpt = Column(Text)
    published = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    __table_args__ = (
        CheckConstraint("length(title) > 0", name="check_post_title"),
        CheckConstraint("length(content) > 0", name="check_post_content"),
        Index("idx_blog_posts_created_at", "created_at"),
    )

    @property
    def preview(self) -> str:
        """Excerpt shown on list cards, derived from the content when blank."""
        return self.excerpt or derive_excerpt(self.content or "")

    def __repr__(self):
        return f"<Post {self.id}>"
