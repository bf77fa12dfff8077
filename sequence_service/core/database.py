"""
Sequence Service Database Configuration

Database connection management for PostgreSQL with async support:
- Connection pool sized from DB_MIN_CONNECTIONS / DB_MAX_CONNECTIONS
- Connection verification with exponential backoff at startup
- Transactional session scope (commit on success, rollback on failure)
- Session duration and rollback metrics
"""

import time
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Any, Dict, Optional

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy import text, event
from sqlalchemy.exc import OperationalError, InterfaceError
from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type,
)
import structlog
from prometheus_client import Histogram, Counter

from .config import Settings, get_settings
from ..models import Base

logger = structlog.get_logger()

DB_SESSION_DURATION = Histogram(
    "sequence_db_session_duration_seconds",
    "Time spent inside a database session scope",
)
DB_TRANSACTION_ROLLBACKS = Counter(
    "sequence_db_transaction_rollbacks_total",
    "Total number of rolled back database transactions",
)


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    """SQLite ignores ON DELETE CASCADE unless foreign keys are switched on."""
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class DatabaseManager:
    """
    Database connection manager.

    Owns the async engine and session factory. Every repository operation
    runs inside ``get_session()``, which is the transaction boundary.
    """

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self.engine: Optional[AsyncEngine] = None
        self.session_factory: Optional[async_sessionmaker] = None

    @property
    def is_sqlite(self) -> bool:
        return self.settings.database_url.startswith("sqlite")

    def _engine_options(self) -> Dict[str, Any]:
        """Pool options for the configured backend."""
        if self.is_sqlite:
            return {"echo": self.settings.debug}

        return {
            "pool_size": self.settings.database_pool_size,
            "max_overflow": self.settings.database_max_overflow,
            "pool_pre_ping": True,  # Validate connections before use
            "pool_recycle": self.settings.DB_MAX_CONN_IDLE_TIME,
            "pool_timeout": 30,
            "echo": self.settings.debug,
            "connect_args": {
                "command_timeout": 60,
                "server_settings": {"application_name": "sequence_service"},
            },
        }

    async def initialize(self) -> None:
        """Create the engine and session factory. Does not connect yet."""
        if self.engine is not None:
            return

        self.engine = create_async_engine(
            self.settings.database_url, **self._engine_options()
        )
        if self.is_sqlite:
            event.listen(
                self.engine.sync_engine, "connect", _enable_sqlite_foreign_keys
            )

        self.session_factory = async_sessionmaker(
            bind=self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )

        logger.info(
            "Database manager initialized",
            pool_size=self.settings.database_pool_size,
            max_overflow=self.settings.database_max_overflow,
        )

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=10),
        retry=retry_if_exception_type(
            (OperationalError, InterfaceError, ConnectionError)
        ),
        before_sleep=lambda retry_state: logger.warning(
            "Database connection retry",
            attempt=retry_state.attempt_number,
            wait_time=retry_state.next_action.sleep,
        ),
        reraise=True,
    )
    async def verify_connection(self) -> None:
        """Open one connection and run a probe query, retrying on failure."""
        if not self.engine:
            raise RuntimeError("Database engine not initialized")

        async with self.engine.connect() as conn:
            result = await conn.execute(text("SELECT 1"))
            if result.scalar() != 1:
                raise RuntimeError("Database probe returned unexpected result")

        logger.info("Database connection verified")

    async def create_all(self) -> None:
        """Create tables from model metadata (local development and tests)."""
        if not self.engine:
            raise RuntimeError("Database engine not initialized")

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    @asynccontextmanager
    async def get_session(self) -> AsyncGenerator[AsyncSession, None]:
        """
        Transactional session scope.

        Commits when the block exits normally and rolls back on any exception.
        Cancellation unwinds through the session close, which also rolls back.

        Yields:
            AsyncSession: Database session with transaction management
        """
        if not self.session_factory:
            raise RuntimeError("Database not initialized. Call initialize() first.")

        start_time = time.perf_counter()

        try:
            async with self.session_factory() as session:
                try:
                    yield session
                    await session.commit()

                except Exception as e:
                    await session.rollback()
                    DB_TRANSACTION_ROLLBACKS.inc()

                    logger.warning(
                        "Database transaction rolled back",
                        error_type=type(e).__name__,
                    )
                    raise

        finally:
            DB_SESSION_DURATION.observe(time.perf_counter() - start_time)

    async def ping(self) -> bool:
        """Return True when the database answers a probe query."""
        if not self.engine:
            return False

        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            return True

        except Exception as e:
            logger.error("Failed to ping database", error=str(e))
            return False

    async def close(self) -> None:
        """Close database connections and cleanup resources."""
        if self.engine:
            await self.engine.dispose()
            self.engine = None
            self.session_factory = None

            logger.info("Database connections closed")
