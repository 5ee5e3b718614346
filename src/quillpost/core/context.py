"""Authentication state of a request, decided once by the auth gate."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TypeAlias

from quillpost.models.user import User


@dataclass(frozen=True)
class Unauthenticated:
    """No valid credential accompanied the request."""

    def is_user(self, user_id: int) -> bool:
        return False


@dataclass(frozen=True)
class Authenticated:
    """A verified bearer token resolved to a live account."""

    user: User

    def is_user(self, user_id: int) -> bool:
        return self.user.id == user_id


RequestAuth: TypeAlias = Unauthenticated | Authenticated
