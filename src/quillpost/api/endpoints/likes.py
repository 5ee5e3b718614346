# src/quillpost/api/endpoints/likes.py
"""Like toggling endpoints."""

from __future__ import annotations

from fastapi import APIRouter

from quillpost.api.dependencies import AuthDep, IdPath, SessionDep
from quillpost.schemas.common import ApiResponse
from quillpost.schemas.post import LikeState
from quillpost.services import like_service, post_service

router = APIRouter(prefix="/blogs", tags=["likes"])


@router.post("/{post_id}/like", response_model=ApiResponse[LikeState])
async def toggle_like(post_id: IdPath, db: SessionDep, auth: AuthDep) -> ApiResponse[LikeState]:
    """Like the post, or remove the caller's like if it is already there."""
    post = post_service.get_visible_post(db, post_id, auth)
    state = like_service.toggle_like(db, post, auth.user)
    message = "Blog liked successfully" if state.is_liked else "Blog unliked successfully"
    return ApiResponse(message=message, data=state)


@router.get("/{post_id}/like-status", response_model=ApiResponse[LikeState])
async def like_status(post_id: IdPath, db: SessionDep, auth: AuthDep) -> ApiResponse[LikeState]:
    post = post_service.get_visible_post(db, post_id, auth)
    return ApiResponse(
        message="Like status retrieved successfully",
        data=like_service.get_like_state(db, post, auth.user),
    )
