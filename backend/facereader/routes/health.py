"""
FaceReader Backend — Health Check Route
=========================================

What:  GET /health for Docker health checks and load balancer probes.
How:   Probes the database, the storage volume and Gemini, then folds the
       three into one status.

Status levels:
    - healthy:   everything reachable
    - degraded:  Gemini unavailable or circuit open; shares, admin and
                 dummy-mode analysis keep working
    - unhealthy: database unreachable or storage not writable
"""

import logging
import os
import time

from fastapi import APIRouter, Depends

from facereader import __version__
from facereader.database import ping
from facereader.routes.dependencies import get_file_service
from facereader.schemas.common import HealthResponse
from facereader.services.file_service import FileService
from facereader.services.gemini_service import CircuitBreaker, gemini_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


async def _gemini_status() -> str:
    if gemini_service.circuit_breaker.state == CircuitBreaker.OPEN:
        return "circuit_open"
    if not await gemini_service.health_check():
        return "unavailable"
    return "available"


def _storage_status(files: FileService) -> str:
    root = files.storage_root
    if root.is_dir() and os.access(root, os.W_OK):
        return "writable"
    logger.warning("Health check: storage root %s is not writable", root)
    return "unavailable"


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
)
async def health_check(files: FileService = Depends(get_file_service)) -> HealthResponse:
    database = "connected" if await ping() else "disconnected"
    storage = _storage_status(files)
    gemini = await _gemini_status()

    if database != "connected" or storage != "writable":
        overall = "unhealthy"
    elif gemini != "available":
        overall = "degraded"
    else:
        overall = "healthy"

    return HealthResponse(
        status=overall,
        version=__version__,
        database=database,
        gemini=gemini,
        storage=storage,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
