"""Health check endpoint."""

from typing import Any

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from dochub import __version__
from dochub.api.dependencies import get_broadcaster
from dochub.core.notifications import EventBroadcaster
from dochub.db import get_db
from dochub.lib.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check(
    db: AsyncSession = Depends(get_db),
    broadcaster: EventBroadcaster = Depends(get_broadcaster),
) -> JSONResponse:
    """
    Health check endpoint.

    Reports version, database connectivity and open event rooms.
    Returns 503 when the database cannot be reached.
    """
    health_status: dict[str, Any] = {
        "status": "healthy",
        "version": __version__,
        "checks": {"database": "unknown"},
        "eventRooms": broadcaster.room_count,
    }

    try:
        await db.execute(text("SELECT 1"))
        health_status["checks"]["database"] = "healthy"
    except Exception as e:
        logger.error("database_health_check_failed", error=str(e))
        health_status["checks"]["database"] = "unhealthy"
        health_status["status"] = "unhealthy"
        return JSONResponse(status_code=503, content=health_status)

    return JSONResponse(status_code=200, content=health_status)
