"""Database manager for SQLite connections, paths and schema migrations."""

import sqlite3
from contextlib import contextmanager
from typing import List, Set

from config import Config, get_migrations_dir
from logger import get_logger

logger = get_logger()


class DatabaseManager:
    """Manages database connections, paths and migrations.

    Args:
        config: Application configuration object.
    """

    def __init__(self, config: Config):
        self.config = config

    @contextmanager
    def connect(self):
        """Get a database connection with automatic cleanup.

        A fresh connection is opened per call, so a caller on a worker thread
        never shares a connection with the event loop thread.

        Yields:
            sqlite3.Connection: Database connection.
        """
        db_path = self.config.db_path
        db_path.parent.mkdir(parents=True, exist_ok=True)

        conn = sqlite3.connect(db_path)
        try:
            yield conn
        finally:
            conn.close()

    def get_db_path(self):
        return self.config.db_path

    def get_migrations_dir(self):
        return get_migrations_dir()

    def available_migrations(self) -> List[str]:
        """Migration file names on disk, in apply order."""
        migrations_dir = self.get_migrations_dir()
        if not migrations_dir.exists():
            return []
        return sorted(path.name for path in migrations_dir.glob("*.sql"))

    def applied_migrations(self) -> Set[str]:
        """Migration file names already recorded in schema_migrations."""
        with self.connect() as conn:
            _init_schema_migrations_table(conn)
            cursor = conn.execute("SELECT migration_file FROM schema_migrations")
            return {row[0] for row in cursor.fetchall()}

    def pending_migrations(self) -> List[str]:
        applied = self.applied_migrations()
        return [m for m in self.available_migrations() if m not in applied]

    def apply_migrations(self) -> List[str]:
        """Apply every pending migration, each in its own transaction.

        Returns:
            Names of the migrations applied, in order.

        Raises:
            sqlite3.Error: If a migration fails. It is rolled back and the
                remaining migrations are not attempted.
        """
        pending = self.pending_migrations()

        with self.connect() as conn:
            for migration_file in pending:
                sql = (self.get_migrations_dir() / migration_file).read_text()
                try:
                    conn.executescript(sql)
                    conn.execute(
                        "INSERT INTO schema_migrations (migration_file) VALUES (?)",
                        (migration_file,),
                    )
                    conn.commit()
                except sqlite3.Error as e:
                    conn.rollback()
                    logger.error(f"Error applying migration {migration_file}: {e}")
                    raise
                logger.info(f"Applied migration: {migration_file}")

        return pending


def _init_schema_migrations_table(conn) -> None:
    conn.execute("""
        CREATE TABLE IF NOT EXISTS schema_migrations (
            migration_file TEXT PRIMARY KEY,
            applied_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        )
    """)
    conn.commit()
