"""
Sequence Service - Main FastAPI Application

Email sequences and their steps behind a JSON API:
- Transactional aggregate persistence (PostgreSQL via SQLAlchemy async)
- Read-through in-process cache with post-commit invalidation
- Structured logging with per-request IDs
- Prometheus metrics
"""

from contextlib import asynccontextmanager
from typing import Optional

import structlog
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from .api.endpoints.health import router as health_router
from .api.endpoints.sequences import router as sequences_router
from .api.endpoints.steps import router as steps_router
from .cache import InMemoryCacheStore
from .constants import APP_NAME, APP_VERSION
from .core.config import Settings, get_settings
from .core.correlation import RequestIdMiddleware
from .core.database import DatabaseManager
from .core.errors import NotFound, StorageFailure, ValidationFailure
from .core.logging import configure_logging

logger = structlog.get_logger()

INTERNAL_ERROR_MESSAGE = "internal server error"


def _error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"message": message})


def _describe_validation_error(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "invalid request"

    first = errors[0]
    location = ".".join(
        str(part) for part in first.get("loc", ()) if part not in ("body",)
    )
    message = first.get("msg", "invalid value")
    return f"{location}: {message}" if location else message


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build the shared database manager and cache store for the process."""
    settings: Settings = app.state.settings
    configure_logging(settings.LOG_LEVEL, settings.LOG_JSON)

    logger.info(
        "Starting Sequence Service",
        version=APP_VERSION,
        environment=settings.ENVIRONMENT,
    )

    owns_database = not hasattr(app.state, "database")
    if owns_database:
        database = DatabaseManager(settings)
        await database.initialize()
        try:
            await database.verify_connection()
        except Exception as e:
            logger.warning(
                "Database unreachable at startup, continuing",
                error=str(e),
            )
        app.state.database = database

    if not hasattr(app.state, "cache"):
        app.state.cache = InMemoryCacheStore(
            shards=settings.CACHE_SHARDS,
            life_window_seconds=settings.CACHE_LIFE_WINDOW,
            hard_max_cache_size_mb=settings.MAX_CACHE_MEMORY,
        )

    yield

    logger.info("Shutting down Sequence Service")

    if owns_database:
        try:
            await app.state.database.close()
        except Exception as e:
            logger.error("Error during database shutdown", error=str(e))


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Application factory.

    Args:
        settings: Overrides the environment-derived settings (tests)

    Returns:
        Configured FastAPI application
    """
    app = FastAPI(
        title=APP_NAME,
        description="Email sequences and steps with a read-through cache",
        version=APP_VERSION,
        lifespan=lifespan,
    )
    app.state.settings = settings or get_settings()

    app.add_middleware(RequestIdMiddleware)

    app.include_router(health_router, tags=["health"])
    app.include_router(sequences_router, tags=["sequences"])
    app.include_router(steps_router, tags=["steps"])

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        request: Request, exc: RequestValidationError
    ):
        return _error_response(
            status.HTTP_400_BAD_REQUEST, _describe_validation_error(exc)
        )

    @app.exception_handler(ValidationFailure)
    async def validation_failure_handler(request: Request, exc: ValidationFailure):
        return _error_response(status.HTTP_400_BAD_REQUEST, exc.message)

    @app.exception_handler(NotFound)
    async def not_found_handler(request: Request, exc: NotFound):
        return _error_response(status.HTTP_404_NOT_FOUND, exc.message)

    @app.exception_handler(StorageFailure)
    async def storage_failure_handler(request: Request, exc: StorageFailure):
        logger.error(
            "Storage failure",
            path=request.url.path,
            method=request.method,
            operation=exc.details.get("operation"),
        )
        return _error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR, INTERNAL_ERROR_MESSAGE
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.error(
            "Unhandled exception",
            path=request.url.path,
            method=request.method,
            error=str(exc),
            exc_info=True,
        )
        return _error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR, INTERNAL_ERROR_MESSAGE
        )

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(app, host=settings.API_HOST, port=settings.API_PORT)
