"""Engagement totals over an author's posts."""
from __future__ import annotations

from sqlalchemy import func
from sqlalchemy.orm import Session

from quillpost.core.context import RequestAuth
from quillpost.models import Post, PostStatus
from quillpost.schemas.post import AuthorAnalytics
from quillpost.services.user_service import get_user_or_404

# Views are not tracked; they are estimated from engagement.
VIEWS_PER_LIKE = 3
VIEWS_PER_COMMENT = 2


def author_analytics(db: Session, author_id: int, viewer: RequestAuth) -> AuthorAnalytics:
    """Sum posts, likes and comments over the author's posts the viewer can see."""
    get_user_or_404(db, author_id)

    query = db.query(
        func.count(Post.id),
        func.coalesce(func.sum(Post.likes_count), 0),
        func.coalesce(func.sum(Post.comments_count), 0),
    ).filter(Post.author_id == author_id)
    if not viewer.is_user(author_id):
        query = query.filter(Post.status == PostStatus.PUBLISHED.value)

    total_blogs, total_likes, total_comments = query.one()
    total_likes = int(total_likes or 0)
    total_comments = int(total_comments or 0)
    return AuthorAnalytics(
        total_blogs=int(total_blogs or 0),
        total_likes=total_likes,
        total_comments=total_comments,
        total_views=total_likes * VIEWS_PER_LIKE + total_comments * VIEWS_PER_COMMENT,
    )
