"""Service health endpoint."""

from __future__ import annotations

import logging
from datetime import UTC, datetime

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from quillpost.api.dependencies import SessionDep
from quillpost.core.settings import settings

logger = logging.getLogger(__name__)

router = APIRouter(tags=["system"])


@router.get("/health")
async def health_check(db: SessionDep) -> JSONResponse:
    """Report liveness and whether the database answers a trivial query.

    Returns:
        200 with ``database: "ok"`` when the database is reachable, otherwise
        503 with ``success`` false.
    """
    try:
        db.execute(text("SELECT 1"))
        database = "ok"
    except SQLAlchemyError:
        logger.exception("Health check could not reach the database")
        database = "unavailable"

    healthy = database == "ok"
    return JSONResponse(
        status_code=200 if healthy else 503,
        content={
            "success": healthy,
            "message": "Server is running" if healthy else "Database unavailable",
            "data": {
                "version": settings.app_version,
                "database": database,
                "media_host": "configured" if settings.media_host_configured else "disabled",
                "timestamp": datetime.now(UTC).isoformat(),
            },
        },
    )
