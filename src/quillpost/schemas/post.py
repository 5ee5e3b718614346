"""Post, comment and like Pydantic schemas."""

from datetime import datetime
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, StringConstraints

from quillpost.models.post import PostStatus
from quillpost.schemas.user import AuthorDetail, AuthorSummary, CommentAuthor

Title = Annotated[str, StringConstraints(strip_whitespace=True, min_length=5, max_length=200)]
Body = Annotated[str, StringConstraints(min_length=20)]
CommentBody = Annotated[
    str, StringConstraints(strip_whitespace=True, min_length=1, max_length=500)
]


class PostCreate(BaseModel):
    """Validated form fields for a new post."""

    title: Title
    content: Body
    status: PostStatus = PostStatus.PUBLISHED


class PostUpdate(BaseModel):
    """Validated form fields for a post update; None keeps the stored value."""

    title: Title | None = None
    content: Body | None = None
    status: PostStatus | None = None


class PostOut(BaseModel):
    """Post as returned in listings."""

    id: int
    title: str
    content: str
    cover_image: str
    status: PostStatus
    likes_count: int
    comments_count: int
    created_at: datetime
    updated_at: datetime
    author: AuthorSummary

    model_config = ConfigDict(from_attributes=True)


class CommentCreate(BaseModel):
    """Schema for adding or editing a comment."""

    content: CommentBody


class CommentOut(BaseModel):
    """Comment with its author projected."""

    id: int
    content: str
    post_id: int
    created_at: datetime
    updated_at: datetime
    author: CommentAuthor

    model_config = ConfigDict(from_attributes=True)


class PostDetail(PostOut):
    """Single post with author bio, comments and the caller's like state."""

    author: AuthorDetail
    comments: list[CommentOut] = Field(default_factory=list)
    is_liked: bool = False


class LikeState(BaseModel):
    """Like membership of the caller and the post's like count."""

    is_liked: bool
    likes_count: int


class AuthorAnalytics(BaseModel):
    """Engagement totals over an author's posts."""

    total_blogs: int
    total_likes: int
    total_comments: int
    total_views: int
