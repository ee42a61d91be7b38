"""
Log API Routes

Recent entries from the in-memory log buffer, so failed deliveries and
scheduler errors can be inspected without external log aggregation.
"""

from typing import Optional

from fastapi import APIRouter, HTTPException, Query

from backend.security import require_auth
from backend.utils.logging import LogLevel, get_log_buffer

router = APIRouter(prefix="/api/logs", tags=["logs"], dependencies=[require_auth])


@router.get("")
async def get_logs(
    limit: int = Query(100, ge=1, le=500),
    level: Optional[str] = Query(None, description="Filter by level (debug, info, warning, error, critical)"),
    source: Optional[str] = Query(None, description="Filter by source")
):
    """Get recent log entries from the in-memory buffer."""
    log_buffer = get_log_buffer()

    level_filter = None
    if level:
        try:
            level_filter = LogLevel(level.lower())
        except ValueError:
            raise HTTPException(status_code=400, detail=f"Invalid log level: {level}")

    return {
        "logs": log_buffer.get_recent(limit=limit, level=level_filter, source=source),
        "stats": log_buffer.get_stats()
    }


@router.get("/errors")
async def get_error_logs(limit: int = Query(50, ge=1, le=200)):
    """Get recent error and critical log entries."""
    return {"errors": get_log_buffer().get_errors(limit=limit)}
