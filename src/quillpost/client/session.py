"""Persisted login state for API clients."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

logger = logging.getLogger(__name__)

DEFAULT_SESSION_PATH = Path.home() / ".quillpost" / "session.json"
SESSION_FILE_MODE = 0o600


class ClientSession(BaseModel):
    """Bearer token and cached profile of the signed-in user."""

    token: str | None = None
    user: dict[str, Any] = Field(default_factory=dict)

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token)

    @property
    def user_id(self) -> int | None:
        value = self.user.get("id")
        return int(value) if value is not None else None

    def merge_user(self, profile: dict[str, Any]) -> None:
        """Overlay fresh profile fields onto the cached profile."""
        self.user = {**self.user, **profile}


class SessionStore:
    """Load and persist a :class:`ClientSession` as a JSON file."""

    def __init__(self, path: Path | str | None = None) -> None:
        env_path = os.environ.get("QUILLPOST_SESSION_FILE")
        self.path = Path(path or env_path or DEFAULT_SESSION_PATH)

    def load(self) -> ClientSession:
        """Hydrate the stored session; a missing or corrupt file yields an empty one."""
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return ClientSession()
        try:
            return ClientSession.model_validate_json(raw)
        except PydanticValidationError:
            logger.warning("Discarding unreadable session file %s", self.path)
            return ClientSession()

    def save(self, session: ClientSession) -> None:
        """Write the session readable by the owner only; it holds a bearer token."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd = os.open(self.path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, SESSION_FILE_MODE)
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            # os.open applies the mode only when it creates the file.
            os.chmod(self.path, SESSION_FILE_MODE)
            handle.write(session.model_dump_json(indent=2))

    def clear(self) -> None:
        """Forget the stored session."""
        self.path.unlink(missing_ok=True)
