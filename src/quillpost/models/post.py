# src/quillpost/models/post.py
"""SQLAlchemy models for posts and their like set."""

from __future__ import annotations

import enum
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from quillpost.db.session import Base, utcnow

if TYPE_CHECKING:
    from .comment import Comment
    from .user import User


class PostStatus(str, enum.Enum):
    """Publication state of a post."""

    DRAFT = "draft"
    PUBLISHED = "published"


class Post(Base):
    """Blog post written by a single author.

    ``likes_count`` and ``comments_count`` are denormalized counters kept in
    step with the ``post_like`` and ``comment`` tables by atomic SQL updates.
    """

    __tablename__ = "post"
    __table_args__ = (
        CheckConstraint("status IN ('draft', 'published')", name="ck_post_status"),
        CheckConstraint("likes_count >= 0", name="ck_post_likes_count"),
        CheckConstraint("comments_count >= 0", name="ck_post_comments_count"),
        Index("ix_post_author_created", "author_id", "created_at"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    cover_image: Mapped[str] = mapped_column(Text, nullable=False)
    author_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("user_account.id"),
        nullable=False,
    )
    status: Mapped[str] = mapped_column(
        String(16), nullable=False, default=PostStatus.PUBLISHED.value
    )
    likes_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    comments_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )

    author: Mapped[User] = relationship("User", back_populates="posts")
    # Rows are removed explicitly or by ON DELETE CASCADE, never orphaned to NULL.
    comments: Mapped[list[Comment]] = relationship(
        "Comment", back_populates="post", passive_deletes=True
    )

    @property
    def is_published(self) -> bool:
        """Return True if the post is publicly visible."""
        return self.status == PostStatus.PUBLISHED.value


class PostLike(Base):
    """Membership of a user in a post's like set."""

    __tablename__ = "post_like"
    __table_args__ = (Index("ix_post_like_user_id", "user_id"),)

    post_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("post.id", ondelete="CASCADE"),
        primary_key=True,
    )
    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("user_account.id", ondelete="CASCADE"),
        primary_key=True,
    )
    # Composite primary key prevents duplicate likes from the same user.

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
