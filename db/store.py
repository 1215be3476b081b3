"""Key-value snapshot store on top of the SQLite database."""

from typing import List, Optional


class KeyValueStore:
    """Durable store mapping string keys to string values.

    Each write replaces the whole value under its key (last write wins).

    Args:
        db_manager: Database manager instance for database operations.
    """

    def __init__(self, db_manager):
        self.db_manager = db_manager

    def get(self, key: str) -> Optional[str]:
        """Read the value stored under a key.

        Args:
            key: Storage key.

        Returns:
            The stored string, or None if the key has never been written.
        """
        with self.db_manager.connect() as conn:
            cursor = conn.execute("SELECT value FROM kv_store WHERE key = ?", (key,))
            row = cursor.fetchone()

            if row:
                return row[0]
            return None

    def set(self, key: str, value: str) -> None:
        """Write a value under a key, replacing any previous value.

        Raises:
            sqlite3.Error: If the write fails. Nothing is retried.
        """
        with self.db_manager.connect() as conn:
            conn.execute(
                """
                INSERT INTO kv_store (key, value, updated_at)
                VALUES (?, ?, CURRENT_TIMESTAMP)
                ON CONFLICT(key) DO UPDATE SET
                    value = excluded.value,
                    updated_at = excluded.updated_at
                """,
                (key, value),
            )
            conn.commit()

    def delete(self, key: str) -> bool:
        """Delete a key.

        Returns:
            True if the key existed, False otherwise.
        """
        with self.db_manager.connect() as conn:
            cursor = conn.execute("DELETE FROM kv_store WHERE key = ?", (key,))
            conn.commit()
            return cursor.rowcount > 0

    def keys(self) -> List[str]:
        """List all stored keys, ordered by name."""
        with self.db_manager.connect() as conn:
            cursor = conn.execute("SELECT key FROM kv_store ORDER BY key")
            return [row[0] for row in cursor.fetchall()]
