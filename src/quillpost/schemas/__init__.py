# src/quillpost/schemas/__init__.py
"""
Pydantic schemas for API request/response models.

These schemas define the structure of API data for serialization and validation.
"""

from .common import ApiResponse, Page, Pagination
from .post import (
    AuthorAnalytics,
    CommentCreate,
    CommentOut,
    LikeState,
    PostCreate,
    PostDetail,
    PostOut,
    PostUpdate,
)
from .user import (
    AuthorDetail,
    AuthorSummary,
    AuthPayload,
    CommentAuthor,
    LoginRequest,
    ProfileUpdateRequest,
    RegisterRequest,
    UserProfile,
)

__all__ = [
    "ApiResponse", "Page", "Pagination",
    "AuthorAnalytics", "CommentCreate", "CommentOut", "LikeState",
    "PostCreate", "PostDetail", "PostOut", "PostUpdate",
    "AuthorDetail", "AuthorSummary", "AuthPayload", "CommentAuthor",
    "LoginRequest", "ProfileUpdateRequest", "RegisterRequest", "UserProfile",
]
