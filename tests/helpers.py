"""Helper utilities for tests."""

from datetime import datetime, timedelta
from pathlib import Path
import sqlite3


def run_migrations(conn: sqlite3.Connection, migrations_dir: Path) -> None:
    """Run all SQL migrations in order.

    Args:
        conn: SQLite connection to run migrations against.
        migrations_dir: Path to directory containing .sql migration files.
    """
    for migration_file in sorted(migrations_dir.glob("*.sql")):
        with open(migration_file, "r") as f:
            conn.executescript(f.read())

    conn.commit()


class FakeClock:
    """Settable clock passed to services in place of the wall clock."""

    def __init__(self, current: datetime):
        self.current = current

    def __call__(self) -> datetime:
        return self.current

    def set(self, current: datetime) -> None:
        self.current = current

    def advance(self, **kwargs) -> None:
        self.current += timedelta(**kwargs)


class MemoryStore:
    """Dict-backed key-value store."""

    def __init__(self, data=None):
        self.data = dict(data or {})
        self.writes = []

    def get(self, key):
        return self.data.get(key)

    def set(self, key, value):
        self.writes.append(key)
        self.data[key] = value


class FailingStore(MemoryStore):
    """Store whose writes always fail, for persistence fault tests."""

    def set(self, key, value):
        raise sqlite3.OperationalError("disk I/O error")
