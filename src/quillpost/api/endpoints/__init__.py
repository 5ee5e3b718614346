"""API routers, mounted under ``/api`` by the application."""

from .auth import router as auth_router
from .comments import router as comments_router
from .likes import router as likes_router
from .posts import router as posts_router
from .system import router as system_router

__all__ = [
    "auth_router",
    "comments_router",
    "likes_router",
    "posts_router",
    "system_router",
]
