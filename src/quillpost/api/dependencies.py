"""Shared API dependencies for authentication and common functionality."""

import logging
from typing import Annotated, TypeVar

from fastapi import Depends, Path, UploadFile
from fastapi.exceptions import RequestValidationError
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.orm import Session

from quillpost.core.context import Authenticated, RequestAuth, Unauthenticated
from quillpost.core.errors import UnauthorizedError, ValidationError
from quillpost.core.security import decode_access_token
from quillpost.core.settings import settings
from quillpost.db.session import get_db
from quillpost.models import User
from quillpost.services.media import MediaHostClient, get_media_client
from quillpost.services.post_service import CoverUpload

logger = logging.getLogger(__name__)

# Missing credentials are reported by the gate itself, not by HTTPBearer.
bearer_scheme = HTTPBearer(auto_error=False)

# Type alias for database session dependency
SessionDep = Annotated[Session, Depends(get_db)]
BearerDep = Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)]

# Largest value a signed 64-bit INTEGER column can bind.
MAX_ID = 2**63 - 1
IdPath = Annotated[int, Path(ge=1, le=MAX_ID)]

ModelT = TypeVar("ModelT", bound=BaseModel)


def _resolve_user(token: str, db: Session) -> User:
    """Verify a bearer token and load the account it names.

    Raises:
        UnauthorizedError: If the token is invalid or expired, or the user is gone.
    """
    try:
        user_id = decode_access_token(token)
    except JWTError as err:
        raise UnauthorizedError("Not authorized, token failed") from err

    user = db.get(User, user_id)
    if user is None:
        raise UnauthorizedError("User not found")
    return user


def require_auth(credentials: BearerDep, db: SessionDep) -> Authenticated:
    """Authenticate the request or fail with 401."""
    if credentials is None or not credentials.credentials:
        raise UnauthorizedError("Not authorized, no token")
    return Authenticated(_resolve_user(credentials.credentials, db))


def optional_auth(credentials: BearerDep, db: SessionDep) -> RequestAuth:
    """Authenticate the request if possible, otherwise continue anonymously."""
    if credentials is None or not credentials.credentials:
        return Unauthenticated()
    try:
        return Authenticated(_resolve_user(credentials.credentials, db))
    except UnauthorizedError:
        logger.debug("Ignoring invalid credentials on an optional-auth route")
        return Unauthenticated()


def get_media_client_dep() -> MediaHostClient:
    """Return the shared image host client."""
    return get_media_client()


AuthDep = Annotated[Authenticated, Depends(require_auth)]
OptionalAuthDep = Annotated[RequestAuth, Depends(optional_auth)]
MediaDep = Annotated[MediaHostClient, Depends(get_media_client_dep)]


def describe_validation_error(err: PydanticValidationError | RequestValidationError) -> str:
    """Render the first validation problem as ``field: message``."""
    errors = err.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    location = [str(part) for part in first.get("loc", ()) if part not in ("body", "query", "path")]
    message = first.get("msg", "Invalid value")
    return f"{location[-1]}: {message}" if location else message


def parse_model(model: type[ModelT], **values: object) -> ModelT:
    """Validate form values into ``model``; empty strings count as missing."""
    cleaned = {key: value for key, value in values.items() if value not in (None, "")}
    try:
        return model.model_validate(cleaned)
    except PydanticValidationError as err:
        raise ValidationError(describe_validation_error(err)) from err


async def read_cover_upload(upload: UploadFile | None) -> CoverUpload | None:
    """Validate and read a staged cover image upload.

    Raises:
        ValidationError: If the file is not an accepted image or is too large.
    """
    if upload is None or not upload.filename:
        return None
    content_type = (upload.content_type or "").lower()
    if content_type not in settings.allowed_image_types:
        raise ValidationError("Please select a valid image file")

    content = await upload.read(settings.max_upload_bytes + 1)
    if len(content) > settings.max_upload_bytes:
        limit_mb = settings.max_upload_bytes // (1024 * 1024)
        raise ValidationError(f"Image size must be less than {limit_mb}MB")
    if not content:
        raise ValidationError("Uploaded image is empty")
    return CoverUpload(filename=upload.filename, content_type=content_type, content=content)
