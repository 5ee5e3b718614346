# src/quillpost/api/endpoints/posts.py
"""Post listing, detail and authoring endpoints."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, File, Form, Query, UploadFile, status

from quillpost.api.dependencies import (
    MAX_ID,
    AuthDep,
    IdPath,
    MediaDep,
    OptionalAuthDep,
    SessionDep,
    parse_model,
    read_cover_upload,
)
from quillpost.models import Post, PostStatus
from quillpost.schemas.common import ApiResponse, Page, Pagination
from quillpost.schemas.post import AuthorAnalytics, PostCreate, PostDetail, PostOut, PostUpdate
from quillpost.services import analytics, post_service

router = APIRouter(prefix="/blogs", tags=["blogs"])

MAX_LIMIT = 100
# Keeps the row offset within a 64-bit INTEGER.
MAX_PAGE = MAX_ID // MAX_LIMIT

PageQuery = Annotated[int, Query(ge=1, le=MAX_PAGE)]
LimitQuery = Annotated[int, Query(ge=1, le=MAX_LIMIT)]
CoverFile = Annotated[UploadFile | None, File(alias="coverImage")]
FormText = Annotated[str | None, Form()]


def _page(items: list[Post], pagination: Pagination) -> Page[PostOut]:
    return Page(items=[PostOut.model_validate(post) for post in items], pagination=pagination)


@router.get("", response_model=ApiResponse[Page[PostOut]])
async def list_posts(
    db: SessionDep,
    _auth: OptionalAuthDep,
    page: PageQuery = 1,
    limit: LimitQuery = 10,
    search: str | None = None,
    sort_by: Annotated[str, Query(alias="sortBy")] = "createdAt",
    order: str = "desc",
) -> ApiResponse[Page[PostOut]]:
    """List published posts with pagination, search and sorting."""
    items, pagination = post_service.list_posts(
        db,
        page=page,
        limit=limit,
        search=search,
        sort_by=sort_by,
        order=order,
    )
    return ApiResponse(message="Blogs retrieved successfully", data=_page(items, pagination))


@router.get("/my-blogs", response_model=ApiResponse[Page[PostOut]])
async def list_my_posts(
    db: SessionDep,
    auth: AuthDep,
    post_status: Annotated[PostStatus | None, Query(alias="status")] = None,
    page: PageQuery = 1,
    limit: LimitQuery = 10,
) -> ApiResponse[Page[PostOut]]:
    """List the caller's own posts, drafts included."""
    items, pagination = post_service.list_own_posts(
        db,
        auth.user,
        status=post_status,
        page=page,
        limit=limit,
    )
    return ApiResponse(message="User blogs retrieved successfully", data=_page(items, pagination))


@router.get("/user/{user_id}", response_model=ApiResponse[Page[PostOut]])
async def list_posts_by_author(
    user_id: IdPath,
    db: SessionDep,
    _auth: OptionalAuthDep,
    page: PageQuery = 1,
    limit: LimitQuery = 10,
) -> ApiResponse[Page[PostOut]]:
    """List an author's published posts."""
    items, pagination = post_service.list_posts_by_author(db, user_id, page=page, limit=limit)
    return ApiResponse(message="User blogs retrieved successfully", data=_page(items, pagination))


@router.get("/user/{user_id}/analytics", response_model=ApiResponse[AuthorAnalytics])
async def get_author_analytics(
    user_id: IdPath,
    db: SessionDep,
    auth: OptionalAuthDep,
) -> ApiResponse[AuthorAnalytics]:
    """Return engagement totals for an author."""
    totals = analytics.author_analytics(db, user_id, auth)
    return ApiResponse(message="Analytics retrieved successfully", data=totals)


@router.get("/{post_id}", response_model=ApiResponse[PostDetail])
async def get_post(
    post_id: IdPath,
    db: SessionDep,
    auth: OptionalAuthDep,
) -> ApiResponse[PostDetail]:
    """Return one post with its comments and the caller's like state."""
    detail = post_service.get_post_detail(db, post_id, auth)
    return ApiResponse(message="Blog retrieved successfully", data=detail)


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=ApiResponse[PostOut],
)
async def create_post(
    db: SessionDep,
    auth: AuthDep,
    media: MediaDep,
    title: FormText = None,
    content: FormText = None,
    post_status: Annotated[str | None, Form(alias="status")] = None,
    cover_image: CoverFile = None,
) -> ApiResponse[PostOut]:
    """Create a post from a multipart form with an optional cover image."""
    try:
        data = parse_model(PostCreate, title=title, content=content, status=post_status)
        cover = await read_cover_upload(cover_image)
        post = await post_service.create_post(
            db,
            media,
            author=auth.user,
            data=data,
            cover=cover,
        )
    finally:
        if cover_image is not None:
            await cover_image.close()
    return ApiResponse(message="Blog created successfully", data=PostOut.model_validate(post))


@router.put("/{post_id}", response_model=ApiResponse[PostOut])
async def update_post(
    post_id: IdPath,
    db: SessionDep,
    auth: AuthDep,
    media: MediaDep,
    title: FormText = None,
    content: FormText = None,
    post_status: Annotated[str | None, Form(alias="status")] = None,
    cover_image: CoverFile = None,
) -> ApiResponse[PostOut]:
    """Update a post the caller wrote; omitted fields keep their values."""
    try:
        data = parse_model(PostUpdate, title=title, content=content, status=post_status)
        cover = await read_cover_upload(cover_image)
        post = await post_service.update_post(
            db,
            media,
            post_id=post_id,
            user=auth.user,
            data=data,
            cover=cover,
        )
    finally:
        if cover_image is not None:
            await cover_image.close()
    return ApiResponse(message="Blog updated successfully", data=PostOut.model_validate(post))


@router.delete("/{post_id}", response_model=ApiResponse[None])
async def delete_post(
    post_id: IdPath,
    db: SessionDep,
    auth: AuthDep,
    media: MediaDep,
) -> ApiResponse[None]:
    """Delete a post the caller wrote along with its comments and likes."""
    await post_service.delete_post(db, media, post_id=post_id, user=auth.user)
    return ApiResponse(message="Blog deleted successfully", data=None)
