"""
Health and readiness check endpoints.

/health answers as long as the process runs; /ready also requires the
booking database to be reachable.
"""

from __future__ import annotations

import structlog
from fastapi import APIRouter
from fastapi.responses import JSONResponse

from vacation_booking.db.engine import check_engine_health

logger = structlog.get_logger(__name__)

router = APIRouter()


@router.get("/health")
def health_check() -> JSONResponse:
    """
    Liveness probe endpoint.

    Example:
        >>> GET /health
        {"status": "ok"}
    """
    return JSONResponse(content={"status": "ok"})


@router.get("/ready")
def readiness_check() -> JSONResponse:
    """
    Readiness probe endpoint.

    Returns 503 if the database is not accessible.

    Example:
        >>> GET /ready
        {"status": "ready", "checks": {"database": "ok"}}
    """
    if check_engine_health():
        return JSONResponse(content={"status": "ready", "checks": {"database": "ok"}})

    logger.error("readiness_check_failed", reason="database_not_accessible")
    return JSONResponse(
        status_code=503,
        content={"status": "not ready", "checks": {"database": "failed"}},
    )
