"""Python client for the Quillpost API."""

from .api import ApiClientError, BlogApiClient
from .session import ClientSession, SessionStore

__all__ = ["ApiClientError", "BlogApiClient", "ClientSession", "SessionStore"]
