# src/quillpost/api/endpoints/comments.py
"""Comment endpoints nested under posts."""

from __future__ import annotations

from fastapi import APIRouter, status

from quillpost.api.dependencies import AuthDep, IdPath, OptionalAuthDep, SessionDep
from quillpost.schemas.common import ApiResponse
from quillpost.schemas.post import CommentCreate, CommentOut
from quillpost.services import comment_service, post_service

router = APIRouter(prefix="/blogs", tags=["comments"])


@router.get("/{post_id}/comments", response_model=ApiResponse[list[CommentOut]])
async def list_comments(
    post_id: IdPath,
    db: SessionDep,
    auth: OptionalAuthDep,
) -> ApiResponse[list[CommentOut]]:
    """Return all comments on a post, newest first."""
    post = post_service.get_visible_post(db, post_id, auth)
    comments = comment_service.list_comments(db, post)
    return ApiResponse(
        message="Comments retrieved successfully",
        data=[CommentOut.model_validate(comment) for comment in comments],
    )


@router.post(
    "/{post_id}/comments",
    status_code=status.HTTP_201_CREATED,
    response_model=ApiResponse[CommentOut],
)
async def add_comment(
    post_id: IdPath,
    payload: CommentCreate,
    db: SessionDep,
    auth: AuthDep,
) -> ApiResponse[CommentOut]:
    """Comment on a post as the caller."""
    post = post_service.get_visible_post(db, post_id, auth)
    comment = comment_service.add_comment(db, post, auth.user, payload)
    return ApiResponse(message="Comment added successfully", data=CommentOut.model_validate(comment))


@router.put("/comments/{comment_id}", response_model=ApiResponse[CommentOut])
async def update_comment(
    comment_id: IdPath,
    payload: CommentCreate,
    db: SessionDep,
    auth: AuthDep,
) -> ApiResponse[CommentOut]:
    """Edit one of the caller's comments."""
    comment = comment_service.update_comment(db, comment_id, auth.user, payload)
    return ApiResponse(
        message="Comment updated successfully",
        data=CommentOut.model_validate(comment),
    )


@router.delete("/comments/{comment_id}", response_model=ApiResponse[None])
async def delete_comment(comment_id: IdPath, db: SessionDep, auth: AuthDep) -> ApiResponse[None]:
    comment_service.delete_comment(db, comment_id, auth.user)
    return ApiResponse(message="Comment deleted successfully", data=None)
