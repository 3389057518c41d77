"""
Menu API Backend: Health Check Route
=====================================

What:  Health check endpoint for container and load balancer probes.
How:   Runs SELECT 1 against the database and checks that the image storage
       directory is writable.
Who:   Called by Docker health checks and monitoring.

Status levels:
    - healthy:   database connected and storage writable (HTTP 200)
    - unhealthy: either check failed (HTTP 503)
"""

import logging
import os
import time

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from sqlalchemy import text

from menu_api import __version__
from menu_api.database import engine
from menu_api.schemas.common import HealthResponse
from menu_api.services.file_service import file_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

# Service start time for uptime reporting
_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    responses={503: {"description": "A dependency is down", "model": HealthResponse}},
    summary="Service health check",
)
async def health_check():
    db_status = "connected"
    storage_status = "writable"
    overall = "healthy"

    # ── Check Database ────────────────────────────────────────────────────
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as e:
        db_status = "disconnected"
        overall = "unhealthy"
        logger.warning("Health check: database unreachable: %s", str(e))

    # ── Check Storage ─────────────────────────────────────────────────────
    root = file_service.storage_root
    if not (root.is_dir() and os.access(root, os.W_OK)):
        storage_status = "unavailable"
        overall = "unhealthy"
        logger.warning("Health check: storage not writable: %s", root)

    body = HealthResponse(
        status=overall,
        version=__version__,
        database=db_status,
        storage=storage_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
    if overall != "healthy":
        return JSONResponse(status_code=503, content=body.model_dump())
    return body
