"""
Health Check Endpoints

Provides:
1. /health - Liveness plus a database round trip
2. /health/live - Simple liveness probe (for k8s)
"""

import logging

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from database.async_engine import DatabaseHealth

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])


@router.get("/health")
async def health(request: Request):
    """
    Full health check.

    Returns 200 when the database answers, 503 otherwise.
    """
    settings = request.app.state.settings
    database = await DatabaseHealth(request.app.state.engine, request.app.state.db_settings).check()
    healthy = database["status"] == "healthy"
    if not healthy:
        logger.warning(f"Health check degraded: {database}")

    return JSONResponse(
        status_code=200 if healthy else 503,
        content={
            "status": "healthy" if healthy else "unhealthy",
            "version": settings.app_version,
            "environment": settings.app_environment,
            "database": database,
        },
    )


@router.get("/health/live")
async def liveness():
    return {"status": "alive"}
