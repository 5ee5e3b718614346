# src/quillpost/services/__init__.py
"""Business logic services for the Quillpost application."""

from .media import MediaHostClient, MediaHostError, get_media_client

__all__ = [
    "MediaHostClient",
    "MediaHostError",
    "get_media_client",
]
