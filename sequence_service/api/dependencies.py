"""
FastAPI dependencies.

The database manager, cache store and settings are created once in the
application lifespan and kept on ``app.state``; services are assembled per
request from those shared pieces.
"""

import re
from typing import Optional

from fastapi import Depends, Request

from ..cache import CacheStore
from ..constants import MAX_SQL_INTEGER
from ..core.config import Settings
from ..core.database import DatabaseManager
from ..repositories import SqlAlchemySequenceRepository, SqlAlchemyStepRepository
from ..services import ReadThroughCache, SequenceService, StepService

_DECIMAL_INT = re.compile(r"^[+-]?[0-9]+$")


def parse_int(value: Optional[str], fallback: int) -> int:
    """
    Parse a decimal query value.

    Returns fallback when the value is absent, malformed or outside the
    signed 64-bit range.
    """
    if value is None or not _DECIMAL_INT.match(value):
        return fallback

    parsed = int(value)
    if not -MAX_SQL_INTEGER - 1 <= parsed <= MAX_SQL_INTEGER:
        return fallback
    return parsed


def get_settings_from_state(request: Request) -> Settings:
    return request.app.state.settings


def get_database(request: Request) -> DatabaseManager:
    return request.app.state.database


def get_cache_store(request: Request) -> CacheStore:
    return request.app.state.cache


def get_read_through_cache(
    store: CacheStore = Depends(get_cache_store),
) -> ReadThroughCache:
    return ReadThroughCache(store)


def get_sequence_service(
    database: DatabaseManager = Depends(get_database),
    cache: ReadThroughCache = Depends(get_read_through_cache),
    settings: Settings = Depends(get_settings_from_state),
) -> SequenceService:
    return SequenceService(
        repository=SqlAlchemySequenceRepository(database),
        cache=cache,
        max_page_size=settings.MAX_SEQUENCE_PAGINATION,
    )


def get_step_service(
    database: DatabaseManager = Depends(get_database),
    cache: ReadThroughCache = Depends(get_read_through_cache),
) -> StepService:
    return StepService(
        sequence_repository=SqlAlchemySequenceRepository(database),
        step_repository=SqlAlchemyStepRepository(database),
        cache=cache,
    )
