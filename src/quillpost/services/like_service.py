"""Like toggling with a denormalized counter on the post."""
from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from quillpost.models import Post, PostLike, User
from quillpost.schemas.post import LikeState
from quillpost.services.post_service import bump_counter

logger = logging.getLogger(__name__)


def _has_liked(db: Session, post_id: int, user_id: int) -> bool:
    return (
        db.query(PostLike)
        .filter(PostLike.post_id == post_id, PostLike.user_id == user_id)
        .first()
        is not None
    )


def get_like_state(db: Session, post: Post, user: User) -> LikeState:
    """Return the user's membership in the like set without changing it."""
    return LikeState(is_liked=_has_liked(db, post.id, user.id), likes_count=post.likes_count)


def toggle_like(db: Session, post: Post, user: User) -> LikeState:
    """Flip the user's like on ``post`` and return the resulting state.

    Removal is a conditional DELETE; only the request that actually removed
    the row decrements the counter. Insertion relies on the composite
    primary key, so a duplicate concurrent like fails instead of counting
    twice.
    """
    removed = (
        db.query(PostLike)
        .filter(PostLike.post_id == post.id, PostLike.user_id == user.id)
        .delete(synchronize_session="fetch")
    )
    if removed:
        bump_counter(db, post.id, Post.likes_count, -1)
        is_liked = False
    else:
        db.add(PostLike(post_id=post.id, user_id=user.id))
        try:
            db.flush()
        except IntegrityError:
            db.rollback()
            logger.info("Concurrent like by user %s on post %s", user.id, post.id)
            db.refresh(post)
            return get_like_state(db, post, user)
        bump_counter(db, post.id, Post.likes_count, 1)
        is_liked = True

    db.commit()
    db.refresh(post)
    return LikeState(is_liked=is_liked, likes_count=post.likes_count)
