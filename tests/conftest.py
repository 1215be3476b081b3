"""Shared pytest fixtures for all tests."""

import sqlite3
import pytest
from datetime import datetime, timezone
from pathlib import Path

from config import Config, get_migrations_dir
from services.base import Services
from tests.helpers import FakeClock, run_migrations


@pytest.fixture
def test_db():
    """Create an in-memory SQLite database for testing.

    The ledger writes its snapshot from a worker thread, so the connection
    must be usable across threads.

    Yields:
        sqlite3.Connection: Connection to in-memory database.
    """
    conn = sqlite3.connect(":memory:", check_same_thread=False)
    yield conn
    conn.close()


@pytest.fixture
def test_config(tmp_path):
    """Create a test configuration pointing to a temporary directory.

    Args:
        tmp_path: pytest tmp_path fixture for temporary directory.

    Returns:
        Config: Test configuration object.
    """
    return Config(
        base_dir=tmp_path / "tally",
        db_data_dir=tmp_path / "tally" / "db",
        db_filename="test.db",
        log_level="DEBUG",
        log_dir=tmp_path / "tally" / "logs",
    )


@pytest.fixture
def db_manager_with_schema(test_db):
    """Create a DatabaseManager with schema already set up.

    This fixture provides a DatabaseManager that uses an in-memory database
    with all migrations already applied.

    Args:
        test_db: In-memory database connection fixture.

    Returns:
        DatabaseManager: Database manager with schema ready.
    """
    run_migrations(test_db, get_migrations_dir())

    class TestDatabaseManager:
        """Test database manager that uses in-memory connection."""

        def __init__(self, conn):
            self.conn = conn

        def connect(self):
            """Return a context manager for the test connection."""
            return _TestConnectionContext(self.conn)

        def get_db_path(self):
            """Return a fake path for the test database."""
            return Path(":memory:")

        def get_migrations_dir(self):
            """Get the migrations directory path."""
            return get_migrations_dir()

    class _TestConnectionContext:
        """Context manager for test database connections."""

        def __init__(self, conn):
            self.conn = conn

        def __enter__(self):
            return self.conn

        def __exit__(self, exc_type, exc_val, exc_tb):
            # Don't close the connection - let the fixture handle it
            pass

    return TestDatabaseManager(test_db)


@pytest.fixture
def clock():
    """Clock fixed at Wednesday 2025-03-12 10:00 UTC."""
    return FakeClock(datetime(2025, 3, 12, 10, 0, tzinfo=timezone.utc))


@pytest.fixture
def services(test_config, db_manager_with_schema, clock):
    """Create a Services container with test database and fixed clock.

    Returns:
        Services: Services container for testing.
    """
    return Services(test_config, db_manager=db_manager_with_schema, clock=clock)


@pytest.fixture
def reload_services(test_config, db_manager_with_schema, clock):
    """Build a fresh Services container over the same database.

    Simulates an application restart: every component reloads its snapshot.
    """

    def _reload():
        return Services(test_config, db_manager=db_manager_with_schema, clock=clock)

    return _reload
