"""CRUD helpers for comments scoped to a post."""
from __future__ import annotations

from sqlalchemy.orm import Session, joinedload

from quillpost.core.errors import ForbiddenError, NotFoundError
from quillpost.models import Comment, Post, User
from quillpost.schemas.post import CommentCreate
from quillpost.services.post_service import bump_counter

__all__ = [
    "list_comments",
    "add_comment",
    "get_comment_or_404",
    "update_comment",
    "delete_comment",
]


def list_comments(db: Session, post: Post) -> list[Comment]:
    """Return every comment on ``post``, newest first."""
    return (
        db.query(Comment)
        .options(joinedload(Comment.author))
        .filter(Comment.post_id == post.id)
        .order_by(Comment.created_at.desc(), Comment.id.desc())
        .all()
    )


def add_comment(db: Session, post: Post, author: User, data: CommentCreate) -> Comment:
    """Persist a comment and count it on the parent post."""
    comment = Comment(content=data.content, author_id=author.id, post_id=post.id)
    db.add(comment)
    db.flush()
    bump_counter(db, post.id, Post.comments_count, 1)
    db.commit()
    db.refresh(comment)
    db.refresh(post)
    return comment


def get_comment_or_404(db: Session, comment_id: int) -> Comment:
    """Return a comment by id or raise NotFoundError."""
    comment = db.get(Comment, comment_id)
    if comment is None:
        raise NotFoundError("Comment not found")
    return comment


def _ensure_comment_author(comment: Comment, user: User, action: str) -> None:
    if comment.author_id != user.id:
        raise ForbiddenError(f"Not authorized to {action} this comment")


def update_comment(db: Session, comment_id: int, user: User, data: CommentCreate) -> Comment:
    """Replace the body of the caller's own comment."""
    comment = get_comment_or_404(db, comment_id)
    _ensure_comment_author(comment, user, "update")
    comment.content = data.content
    db.commit()
    db.refresh(comment)
    return comment


def delete_comment(db: Session, comment_id: int, user: User) -> None:
    """Delete the caller's own comment and uncount it on the parent post."""
    comment = get_comment_or_404(db, comment_id)
    _ensure_comment_author(comment, user, "delete")
    post_id = comment.post_id
    db.delete(comment)
    bump_counter(db, post_id, Post.comments_count, -1)
    db.commit()
