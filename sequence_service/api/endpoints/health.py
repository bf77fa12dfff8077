"""
Health and metrics endpoints.
"""

from typing import Dict

import structlog
from fastapi import APIRouter, Depends, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from ...cache import CacheStore
from ...core.database import DatabaseManager
from ..dependencies import get_cache_store, get_database

logger = structlog.get_logger()
router = APIRouter()


@router.get("/health")
async def health_check(
    database: DatabaseManager = Depends(get_database),
) -> Dict[str, str]:
    """
    Report application and database status.

    A database failure is reported in the body; the call itself still
    succeeds so load balancers can tell a degraded process from a dead one.
    """
    database_ok = await database.ping()
    if not database_ok:
        logger.warning("Health check: database unreachable")

    return {
        "app": "ok",
        "database": "ok" if database_ok else "error",
    }


@router.get("/health/cache")
async def cache_health(
    store: CacheStore = Depends(get_cache_store),
) -> Dict[str, int]:
    """Cache occupancy and hit/miss counters."""
    return store.stats()


@router.get("/metrics")
async def metrics() -> Response:
    """Prometheus text exposition."""
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
