"""
KVPad Backend — Health Check Route
===================================

What:  Health check endpoint for monitoring and load balancer probes.
How:   Probes the key-value store and reports aggregate status.

Status levels:
    - healthy:   store reachable (HTTP 200)
    - unhealthy: store unreachable (HTTP 503, stop routing traffic)
"""

import logging
import time

from fastapi import APIRouter, Depends, Response

from kvpad import __version__
from kvpad.routes.documents import get_store
from kvpad.schemas.document import HealthResponse
from kvpad.storage.base import KeyValueStore

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
)
async def health_check(
    response: Response,
    store: KeyValueStore = Depends(get_store),
) -> HealthResponse:
    """Report whether the key-value store can currently serve requests."""
    reachable = await store.health_check()
    if not reachable:
        response.status_code = 503
        logger.warning("Health check: %s store unreachable", store.backend_name)

    return HealthResponse(
        status="healthy" if reachable else "unhealthy",
        version=__version__,
        store=f"{store.backend_name}:{'connected' if reachable else 'disconnected'}",
        uptime_seconds=round(time.time() - _start_time, 2),
    )
