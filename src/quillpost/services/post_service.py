"""Service-level helpers for reading and writing posts."""
from __future__ import annotations

import functools
import logging
import operator
from dataclasses import dataclass

from sqlalchemy import case, or_, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import InstrumentedAttribute, Query, Session, joinedload

from quillpost.core.context import Authenticated, RequestAuth
from quillpost.core.errors import ForbiddenError, InternalError, NotFoundError, ValidationError
from quillpost.core.settings import settings
from quillpost.models import Comment, Post, PostLike, PostStatus, User
from quillpost.schemas.common import Pagination
from quillpost.schemas.post import (
    CommentOut,
    PostCreate,
    PostDetail,
    PostUpdate,
)
from quillpost.schemas.user import AuthorDetail
from quillpost.services.media import MediaHostClient, MediaHostError, public_id_from_url

logger = logging.getLogger(__name__)

# Accept both the client's camelCase names and the column names.
SORT_FIELDS: dict[str, InstrumentedAttribute] = {
    "createdAt": Post.created_at,
    "created_at": Post.created_at,
    "updatedAt": Post.updated_at,
    "updated_at": Post.updated_at,
    "title": Post.title,
    "likesCount": Post.likes_count,
    "likes_count": Post.likes_count,
    "commentsCount": Post.comments_count,
    "comments_count": Post.comments_count,
}


@dataclass(frozen=True)
class CoverUpload:
    """Image file staged from a multipart request."""

    filename: str
    content_type: str
    content: bytes


def is_placeholder_cover(url: str) -> bool:
    """Return True if ``url`` is the generated draft placeholder."""
    return url == settings.placeholder_cover_url


def can_view(post: Post, viewer: RequestAuth) -> bool:
    """Drafts are only visible to their author."""
    return post.is_published or viewer.is_user(post.author_id)


def get_post_or_404(db: Session, post_id: int) -> Post:
    """Return a post by id or raise NotFoundError."""
    post = db.get(Post, post_id)
    if post is None:
        raise NotFoundError("Blog not found")
    return post


def get_visible_post(db: Session, post_id: int, viewer: RequestAuth) -> Post:
    """Return a post the viewer may see; hidden drafts look like missing posts."""
    post = get_post_or_404(db, post_id)
    if not can_view(post, viewer):
        raise NotFoundError("Blog not found")
    return post


def ensure_author(post: Post, user: User, action: str) -> None:
    """Raise ForbiddenError unless ``user`` wrote ``post``."""
    if post.author_id != user.id:
        raise ForbiddenError(f"Not authorized to {action} this blog")


def bump_counter(
    db: Session,
    post_id: int,
    column: InstrumentedAttribute,
    delta: int,
) -> None:
    """Atomically add ``delta`` to a post counter, never going below zero.

    The arithmetic runs inside a single UPDATE statement so concurrent
    requests cannot lose each other's increments.
    """
    if delta >= 0:
        new_value = column + delta
    else:
        new_value = case((column + delta >= 0, column + delta), else_=0)
    db.execute(
        update(Post)
        .where(Post.id == post_id)
        .values({column.key: new_value})
        .execution_options(synchronize_session="fetch")
    )


def _order_clauses(sort_by: str, order: str) -> list:
    column = SORT_FIELDS.get(sort_by)
    if column is None:
        raise ValidationError(f"Cannot sort by '{sort_by}'")
    if order not in ("asc", "desc"):
        raise ValidationError("Order must be 'asc' or 'desc'")
    if order == "asc":
        return [column.asc(), Post.id.asc()]
    return [column.desc(), Post.id.desc()]


def _paginate(query: Query, order_by: list, *, page: int, limit: int) -> tuple[list[Post], Pagination]:
    total = query.order_by(None).count()
    items = (
        query.options(joinedload(Post.author))
        .order_by(*order_by)
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return items, Pagination.build(page=page, limit=limit, total=total)


def list_posts(
    db: Session,
    *,
    page: int = 1,
    limit: int = 10,
    search: str | None = None,
    sort_by: str = "createdAt",
    order: str = "desc",
) -> tuple[list[Post], Pagination]:
    """List published posts, optionally ranked by a free-text query.

    Each whitespace-separated term of ``search`` is matched case-insensitively
    against title and content; a post matches if any term does. Matches are
    ranked by score (title hit = 2, content hit = 1 per term) before the
    requested sort key.
    """
    query = db.query(Post).filter(Post.status == PostStatus.PUBLISHED.value)
    order_by = _order_clauses(sort_by, order)

    terms = search.split() if search else []
    if terms:
        conditions = []
        scores = []
        for term in terms:
            in_title = Post.title.icontains(term, autoescape=True)
            in_content = Post.content.icontains(term, autoescape=True)
            conditions.append(or_(in_title, in_content))
            scores.append(case((in_title, 2), else_=0) + case((in_content, 1), else_=0))
        query = query.filter(or_(*conditions))
        rank = functools.reduce(operator.add, scores)
        order_by = [rank.desc(), *order_by]

    return _paginate(query, order_by, page=page, limit=limit)


def list_posts_by_author(
    db: Session,
    author_id: int,
    *,
    page: int = 1,
    limit: int = 10,
) -> tuple[list[Post], Pagination]:
    """List an author's published posts, newest first."""
    if db.get(User, author_id) is None:
        raise NotFoundError("User not found")
    query = db.query(Post).filter(
        Post.author_id == author_id,
        Post.status == PostStatus.PUBLISHED.value,
    )
    return _paginate(query, _order_clauses("createdAt", "desc"), page=page, limit=limit)


def list_own_posts(
    db: Session,
    user: User,
    *,
    status: PostStatus | None = None,
    page: int = 1,
    limit: int = 10,
) -> tuple[list[Post], Pagination]:
    """List the caller's own posts, drafts included, newest first."""
    query = db.query(Post).filter(Post.author_id == user.id)
    if status is not None:
        query = query.filter(Post.status == status.value)
    return _paginate(query, _order_clauses("createdAt", "desc"), page=page, limit=limit)


def get_post_detail(db: Session, post_id: int, viewer: RequestAuth) -> PostDetail:
    """Return a post with its author, comments and the viewer's like state."""
    post = get_visible_post(db, post_id, viewer)
    comments = (
        db.query(Comment)
        .options(joinedload(Comment.author))
        .filter(Comment.post_id == post.id)
        .order_by(Comment.created_at.desc(), Comment.id.desc())
        .all()
    )
    is_liked = False
    if isinstance(viewer, Authenticated):
        is_liked = db.get(PostLike, (post.id, viewer.user.id)) is not None
    return to_post_detail(post, comments, is_liked=is_liked)


def to_post_detail(post: Post, comments: list[Comment], *, is_liked: bool) -> PostDetail:
    """Convert a Post ORM instance and its comments to the detail schema."""
    return PostDetail(
        id=post.id,
        title=post.title,
        content=post.content,
        cover_image=post.cover_image,
        status=PostStatus(post.status),
        likes_count=post.likes_count,
        comments_count=post.comments_count,
        created_at=post.created_at,
        updated_at=post.updated_at,
        author=AuthorDetail.model_validate(post.author),
        comments=[CommentOut.model_validate(comment) for comment in comments],
        is_liked=is_liked,
    )


async def _upload_cover(media: MediaHostClient, cover: CoverUpload) -> str:
    try:
        uploaded = await media.upload_image(
            cover.content,
            filename=cover.filename,
            content_type=cover.content_type,
        )
    except MediaHostError as exc:
        raise InternalError("Failed to upload cover image") from exc
    return uploaded.url


async def _release_cover(media: MediaHostClient, url: str) -> None:
    if is_placeholder_cover(url):
        return
    try:
        await media.delete_image(public_id_from_url(url))
    except (MediaHostError, ValueError) as exc:
        raise InternalError("Failed to delete cover image") from exc


async def create_post(
    db: Session,
    media: MediaHostClient,
    *,
    author: User,
    data: PostCreate,
    cover: CoverUpload | None,
) -> Post:
    """Upload the cover and persist a new post owned by ``author``.

    A draft created without a cover gets the placeholder image; a published
    post must come with one.

    Raises:
        ValidationError: If a published post has no cover image.
        InternalError: If the image host rejects the upload.
    """
    if cover is None:
        if data.status is PostStatus.PUBLISHED:
            raise ValidationError("Please upload a cover image")
        cover_url = settings.placeholder_cover_url
    else:
        cover_url = await _upload_cover(media, cover)

    post = Post(
        title=data.title,
        content=data.content,
        cover_image=cover_url,
        author_id=author.id,
        status=data.status.value,
    )
    db.add(post)
    db.commit()
    db.refresh(post)
    logger.info("User %s created post %s (%s)", author.id, post.id, post.status)
    return post


async def update_post(
    db: Session,
    media: MediaHostClient,
    *,
    post_id: int,
    user: User,
    data: PostUpdate,
    cover: CoverUpload | None,
) -> Post:
    """Apply an author's changes to a post.

    Missing title/content keep their stored values. A new cover is uploaded
    and the previous one is released from the image host before the change
    is committed; if the release fails nothing is persisted.
    """
    post = get_post_or_404(db, post_id)
    ensure_author(post, user, "update")

    new_status = data.status or PostStatus(post.status)
    if (
        new_status is PostStatus.PUBLISHED
        and cover is None
        and is_placeholder_cover(post.cover_image)
    ):
        raise ValidationError("Please upload a cover image before publishing")

    if cover is not None:
        new_cover = await _upload_cover(media, cover)
        await _release_cover(media, post.cover_image)
        post.cover_image = new_cover

    post.title = data.title or post.title
    post.content = data.content or post.content
    post.status = new_status.value

    db.commit()
    db.refresh(post)
    return post


async def delete_post(
    db: Session,
    media: MediaHostClient,
    *,
    post_id: int,
    user: User,
) -> None:
    """Delete a post, its cover image, its comments and its likes.

    The cover is released first. The host reports an already-missing image
    as success, so a request that failed after this step can simply be
    retried. Comments, likes and the post are then removed in one
    transaction.
    """
    post = get_post_or_404(db, post_id)
    ensure_author(post, user, "delete")

    await _release_cover(media, post.cover_image)

    try:
        removed = (
            db.query(Comment)
            .filter(Comment.post_id == post.id)
            .delete(synchronize_session="fetch")
        )
        db.query(PostLike).filter(PostLike.post_id == post.id).delete(
            synchronize_session="fetch"
        )
        db.delete(post)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise
    logger.info("User %s deleted post %s with %d comments", user.id, post_id, removed)
