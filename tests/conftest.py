"""
Main pytest configuration for all tests.

Fixtures for unit and integration tests. Integration tests run against a
file-backed SQLite database created per test, so no external services are
needed.
"""

import os

import httpx
import pytest

# Set test environment variables before importing app modules
os.environ["ENVIRONMENT"] = "test"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["LOG_LEVEL"] = "DEBUG"

from sequence_service.cache import InMemoryCacheStore
from sequence_service.core.config import Settings
from sequence_service.core.database import DatabaseManager
from sequence_service.main import create_app


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    """Provide a controllable clock for cache expiry tests."""
    return FakeClock()


@pytest.fixture
def cache_store():
    """Provide a fresh cache store with production defaults."""
    return InMemoryCacheStore(
        shards=2, life_window_seconds=30, hard_max_cache_size_mb=10
    )


@pytest.fixture
def settings(tmp_path):
    """Settings pointing at a per-test SQLite database file."""
    return Settings(
        ENVIRONMENT="test",
        DATABASE_URL=f"sqlite+aiosqlite:///{tmp_path / 'sequences.db'}",
        MAX_SEQUENCE_PAGINATION=50,
    )


@pytest.fixture
async def database(settings):
    """Initialized database manager with the schema created."""
    manager = DatabaseManager(settings)
    await manager.initialize()
    await manager.create_all()

    yield manager

    await manager.close()


@pytest.fixture
def app(settings, database, cache_store):
    """Application wired to the test database and cache."""
    application = create_app(settings)
    application.state.database = database
    application.state.cache = cache_store
    return application


@pytest.fixture
async def client(app):
    """HTTP client talking to the application in-process."""
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
