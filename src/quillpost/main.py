# src/quillpost/main.py
"""Main entry point for the Quillpost application."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from quillpost.api.dependencies import describe_validation_error
from quillpost.api.endpoints import (
    auth_router,
    comments_router,
    likes_router,
    posts_router,
    system_router,
)
from quillpost.core.errors import AppError
from quillpost.core.logging import setup_logging
from quillpost.core.settings import settings
from quillpost.db.session import create_tables
from quillpost.services.media import get_media_client

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(application: FastAPI) -> AsyncIterator[None]:
    """Configure logging and storage on startup, release clients on shutdown."""
    setup_logging()
    if settings.auto_create_tables:
        create_tables()
    media = get_media_client()
    if not media.enabled:
        logger.warning("MEDIA_HOST_URL is not set; cover image uploads will fail")
    logger.info("%s %s started", settings.app_name, settings.app_version)

    yield

    await media.close()
    logger.info("%s stopped", settings.app_name)


# Initialize FastAPI app
app = FastAPI(
    title=f"{settings.app_name} API",
    description="Blog publishing API with likes and comments",
    version=settings.app_version,
    lifespan=lifespan,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=settings.cors_allow_methods,
    allow_headers=settings.cors_allow_headers,
)

# Add GZip middleware for compression
app.add_middleware(GZipMiddleware)


def _envelope(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "message": message, "data": None},
    )


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if exc.status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message, exc_info=exc)
    return _envelope(exc.status_code, exc.message)


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code == status.HTTP_404_NOT_FOUND and exc.detail == "Not Found":
        message = f"Not Found - {request.url.path}"
    else:
        message = str(exc.detail)
    return _envelope(exc.status_code, message)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return _envelope(status.HTTP_400_BAD_REQUEST, describe_validation_error(exc))


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return _envelope(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")


# Include API routers
app.include_router(auth_router, prefix="/api")
app.include_router(posts_router, prefix="/api")
app.include_router(likes_router, prefix="/api")
app.include_router(comments_router, prefix="/api")
app.include_router(system_router, prefix="/api")


@app.get("/")
async def root() -> dict[str, object]:
    """Root endpoint with basic information about the API."""
    return {
        "success": True,
        "message": f"{settings.app_name} API",
        "data": {
            "version": settings.app_version,
            "endpoints": {
                "auth": "/api/auth",
                "blogs": "/api/blogs",
                "health": "/api/health",
            },
            "docs": "/docs",
        },
    }


def run() -> None:
    """Serve the application with uvicorn."""
    import uvicorn

    uvicorn.run("quillpost.main:app", host="0.0.0.0", port=settings.port, reload=settings.debug)


if __name__ == "__main__":
    run()
