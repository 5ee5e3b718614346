# src/quillpost/models/user.py
"""SQLAlchemy model for user accounts."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from quillpost.db.session import Base, utcnow

if TYPE_CHECKING:
    from .comment import Comment
    from .post import Post


class User(Base):
    """Account able to author posts, like them and comment on them."""

    __tablename__ = "user_account"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(50), nullable=False)
    # Always stored lower-cased; the unique index is therefore case-insensitive.
    email: Mapped[str] = mapped_column(String(254), unique=True, index=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String(128), nullable=False)
    bio: Mapped[str | None] = mapped_column(String(200), nullable=True)
    avatar: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )

    posts: Mapped[list[Post]] = relationship("Post", back_populates="author")
    comments: Mapped[list[Comment]] = relationship("Comment", back_populates="author")
