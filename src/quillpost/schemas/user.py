"""User-related Pydantic schemas."""

from datetime import datetime
from typing import Annotated

from pydantic import BaseModel, ConfigDict, EmailStr, Field, StringConstraints, field_validator

Name = Annotated[str, StringConstraints(strip_whitespace=True, min_length=2, max_length=50)]
Password = Annotated[str, StringConstraints(min_length=6, max_length=128)]


class RegisterRequest(BaseModel):
    """Schema for account registration."""

    name: Name
    email: EmailStr
    password: Password

    @field_validator("email")
    @classmethod
    def _normalize_email(cls, v: str) -> str:
        return v.strip().lower()


class LoginRequest(BaseModel):
    """Schema for login submissions."""

    email: EmailStr
    password: str = Field(..., min_length=1)

    @field_validator("email")
    @classmethod
    def _normalize_email(cls, v: str) -> str:
        return v.strip().lower()


class ProfileUpdateRequest(BaseModel):
    """Partial profile update; omitted or null fields keep their value."""

    name: Name | None = None
    bio: str | None = Field(None, max_length=200, description="Free-text bio")
    avatar: str | None = Field(None, max_length=2048, description="Avatar image URL")
    password: Password | None = Field(None, description="New password")


class UserProfile(BaseModel):
    """Public view of the caller's own account."""

    id: int
    name: str
    email: str
    bio: str | None = None
    avatar: str | None = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class AuthPayload(BaseModel):
    """Token issued after register or login."""

    token: str = Field(..., description="JWT bearer token")
    user: UserProfile


class AuthorSummary(BaseModel):
    """Author projection used in post listings."""

    id: int
    name: str
    email: str
    avatar: str | None = None

    model_config = ConfigDict(from_attributes=True)


class AuthorDetail(AuthorSummary):
    """Author projection used on a single post."""

    bio: str | None = None


class CommentAuthor(BaseModel):
    """Author projection used on comments."""

    id: int
    name: str
    avatar: str | None = None

    model_config = ConfigDict(from_attributes=True)
