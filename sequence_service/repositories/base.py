"""
Base Repository

Shared plumbing for SQLAlchemy repositories: one transactional session per
operation and translation of driver errors into StorageFailure.
"""

from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from ..core.database import DatabaseManager
from ..core.errors import StorageFailure

logger = structlog.get_logger()


class BaseRepository:
    """
    Base repository over the database manager.

    Every public operation runs inside ``transaction()``: the session commits
    when the block exits cleanly and rolls back otherwise. Store errors never
    leak past this class as anything but StorageFailure.
    """

    def __init__(self, database: DatabaseManager):
        """
        Initialize repository with strict input validation.

        Args:
            database: Initialized database manager

        Raises:
            TypeError: If database is not a DatabaseManager
        """
        if not isinstance(database, DatabaseManager):
            raise TypeError(
                f"database must be DatabaseManager instance, got {type(database).__name__}"
            )

        self.database = database

    @asynccontextmanager
    async def transaction(
        self, operation: str, **context: Any
    ) -> AsyncGenerator[AsyncSession, None]:
        """
        Run one unit of work.

        Args:
            operation: Operation name used in logs and StorageFailure details
            **context: Extra structured log fields

        Raises:
            StorageFailure: If the store rejects any statement or the commit
        """
        try:
            async with self.database.get_session() as session:
                yield session

        except (SQLAlchemyError, OSError) as e:
            logger.error(
                "Repository: Storage operation failed",
                repository=type(self).__name__,
                operation=operation,
                error=str(e),
                exc_info=True,
                **context,
            )
            raise StorageFailure(operation, e) from e
