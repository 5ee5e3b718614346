# src/quillpost/api/endpoints/auth.py
"""Authentication and profile endpoints."""

from __future__ import annotations

from fastapi import APIRouter, status

from quillpost.api.dependencies import AuthDep, SessionDep
from quillpost.core.security import create_access_token
from quillpost.schemas.common import ApiResponse
from quillpost.schemas.user import (
    AuthPayload,
    LoginRequest,
    ProfileUpdateRequest,
    RegisterRequest,
    UserProfile,
)
from quillpost.services import user_service

router = APIRouter(prefix="/auth", tags=["authentication"])


def _auth_payload(user) -> AuthPayload:
    return AuthPayload(token=create_access_token(user.id), user=UserProfile.model_validate(user))


@router.post(
    "/register",
    summary="Register a new account",
    status_code=status.HTTP_201_CREATED,
    response_model=ApiResponse[AuthPayload],
)
async def register_user(payload: RegisterRequest, db: SessionDep) -> ApiResponse[AuthPayload]:
    """Create an account and return a bearer token for it."""
    user = user_service.register_user(db, payload)
    return ApiResponse(message="User registered successfully", data=_auth_payload(user))


@router.post(
    "/login",
    summary="Authenticate with email and password",
    response_model=ApiResponse[AuthPayload],
)
async def login_user(payload: LoginRequest, db: SessionDep) -> ApiResponse[AuthPayload]:
    """Verify credentials and return a bearer token."""
    user = user_service.authenticate(db, payload)
    return ApiResponse(message="Login successful", data=_auth_payload(user))


@router.get("/me", response_model=ApiResponse[UserProfile])
async def get_me(auth: AuthDep) -> ApiResponse[UserProfile]:
    """Return the caller's own profile."""
    return ApiResponse(
        message="User profile retrieved",
        data=UserProfile.model_validate(auth.user),
    )


@router.put("/profile", response_model=ApiResponse[UserProfile])
async def update_profile(
    payload: ProfileUpdateRequest,
    auth: AuthDep,
    db: SessionDep,
) -> ApiResponse[UserProfile]:
    """Update name, bio, avatar or password of the caller's account."""
    user = user_service.update_profile(db, auth.user, payload)
    return ApiResponse(
        message="Profile updated successfully",
        data=UserProfile.model_validate(user),
    )
