# src/quillpost/models/__init__.py
"""SQLAlchemy models for the Quillpost application."""

from .comment import Comment
from .post import Post, PostLike, PostStatus
from .user import User

__all__ = [
    "Comment",
    "Post", "PostLike", "PostStatus",
    "User",
]
