from db.manager import DatabaseManager
from db.store import KeyValueStore


class TestKeyValueStore:
    """Tests for KeyValueStore."""

    def test_get_missing_key(self, db_manager_with_schema):
        """Test that an unwritten key reads as None."""
        store = KeyValueStore(db_manager_with_schema)

        assert store.get("transactions") is None

    def test_set_and_get(self, db_manager_with_schema):
        """Test writing and reading back a value."""
        store = KeyValueStore(db_manager_with_schema)

        store.set("transactions", "[]")

        assert store.get("transactions") == "[]"

    def test_set_overwrites(self, db_manager_with_schema):
        """Test that the last write under a key wins."""
        store = KeyValueStore(db_manager_with_schema)

        store.set("budgets", '[{"id": "a"}]')
        store.set("budgets", '[{"id": "b"}]')

        assert store.get("budgets") == '[{"id": "b"}]'
        assert store.keys() == ["budgets"]

    def test_keys_are_independent(self, db_manager_with_schema):
        """Test that writes under one key don't touch another."""
        store = KeyValueStore(db_manager_with_schema)

        store.set("transactions", "[1]")
        store.set("budgets", "[2]")

        assert store.get("transactions") == "[1]"
        assert store.keys() == ["budgets", "transactions"]

    def test_delete(self, db_manager_with_schema):
        """Test deleting a key."""
        store = KeyValueStore(db_manager_with_schema)
        store.set("budgets", "[]")

        assert store.delete("budgets") is True
        assert store.get("budgets") is None

    def test_delete_missing_key(self, db_manager_with_schema):
        """Test that deleting an unknown key returns False."""
        assert KeyValueStore(db_manager_with_schema).delete("nothing") is False

    def test_file_backed_store(self, test_config):
        """Test the store against a real database file."""
        db_manager = DatabaseManager(test_config)
        db_manager.apply_migrations()

        KeyValueStore(db_manager).set("transactions", "[]")

        assert test_config.db_path.exists()
        assert KeyValueStore(DatabaseManager(test_config)).get("transactions") == "[]"
