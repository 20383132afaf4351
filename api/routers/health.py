"""
Health check router.

This router provides health check endpoints for monitoring and load balancers.
"""

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from api.deps import get_database
from infrastructure.db.database import Database

logger = logging.getLogger(__name__)

SERVICE_NAME = "chat-api"

router = APIRouter(
    tags=["Health"],
)


@router.get("/health")
def health():
    """
    Simple liveness endpoint.

    Returns:
        dict: Status indicator for health checks
    """
    return {"status": "ok", "service": SERVICE_NAME}


@router.get("/health/ready")
def health_ready(database: Database = Depends(get_database)):
    """
    Readiness probe that checks the session store.

    Returns 503 if the database is not reachable.
    """
    checks = {}

    try:
        database.ping()
        checks["database"] = "ok"
    except Exception as e:
        logger.warning("Readiness check failed for database: %s", e)
        checks["database"] = "unavailable"
        return JSONResponse(
            status_code=503,
            content={
                "status": "not_ready",
                "service": SERVICE_NAME,
                "checks": checks,
            },
        )

    return {"status": "ready", "service": SERVICE_NAME, "checks": checks}
