"""CRUD-style helpers for managing user accounts."""
from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from quillpost.core import security
from quillpost.core.errors import ConflictError, NotFoundError, UnauthorizedError
from quillpost.models.user import User
from quillpost.schemas.user import LoginRequest, ProfileUpdateRequest, RegisterRequest

__all__ = [
    "get_user",
    "get_user_or_404",
    "get_user_by_email",
    "register_user",
    "authenticate",
    "update_profile",
]

logger = logging.getLogger(__name__)


def get_user(db: Session, user_id: int) -> User | None:
    """Return a single user by primary key."""
    return db.get(User, user_id)


def get_user_or_404(db: Session, user_id: int) -> User:
    """Return a user or raise NotFoundError."""
    user = get_user(db, user_id)
    if user is None:
        raise NotFoundError("User not found")
    return user


def get_user_by_email(db: Session, email: str) -> User | None:
    """Return the account registered under ``email`` (case-insensitive)."""
    return db.query(User).filter(User.email == email.strip().lower()).first()


def register_user(db: Session, payload: RegisterRequest) -> User:
    """Persist a new account with a hashed password.

    Raises:
        ConflictError: If the email is already registered.
    """
    if get_user_by_email(db, payload.email) is not None:
        raise ConflictError("User already exists with this email")

    user = User(
        name=payload.name,
        email=payload.email,
        password_hash=security.hash_password(payload.password),
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError as err:
        db.rollback()
        raise ConflictError("User already exists with this email") from err
    db.refresh(user)
    logger.info("Registered user %s", user.id)
    return user


def authenticate(db: Session, payload: LoginRequest) -> User:
    """Return the account matching the credentials.

    Raises:
        UnauthorizedError: If the email is unknown or the password is wrong.
    """
    user = get_user_by_email(db, payload.email)
    if user is None or not security.verify_password(payload.password, user.password_hash):
        raise UnauthorizedError("Invalid email or password")
    return user


def update_profile(db: Session, user: User, update_data: ProfileUpdateRequest) -> User:
    """Apply partial profile updates; a password rotates the stored hash."""
    update_dict = update_data.model_dump(exclude_unset=True, exclude_none=True)
    password = update_dict.pop("password", None)
    for key, value in update_dict.items():
        setattr(user, key, value)
    if password is not None:
        user.password_hash = security.hash_password(password)

    db.add(user)
    db.commit()
    db.refresh(user)
    return user
