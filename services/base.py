"""Base services container for dependency injection."""

from config import Config
from db.manager import DatabaseManager
from models.timestamps import now


class Services:
    """Container for all application services.

    This class is the composition root: it builds each component once and
    wires them together. The ledger publishes TransactionRecorded events and
    the container forwards them to the budget registry, which reads spend
    through the ledger's spending query only.

    Args:
        config: Application configuration object.
        db_manager: Optional database manager for testing. If provided, the
            database settings in config are ignored.
        clock: Optional callable returning the current timestamp.
    """

    def __init__(self, config: Config, db_manager=None, clock=None):
        self.config = config
        self.db_manager = db_manager or DatabaseManager(config)
        self.clock = clock or now

        # Lazy import to avoid circular dependencies
        from db.store import KeyValueStore
        from services.budgets import BudgetRegistry
        from services.categories import CategoryCatalog
        from services.events import EventBus, TransactionRecorded
        from services.transactions import TransactionLedger

        self.store = KeyValueStore(self.db_manager)
        self.events = EventBus()
        self.categories = CategoryCatalog.from_yaml(config.catalog_path)
        self.transactions = TransactionLedger(
            self.store, self.categories, self.events, clock=self.clock
        )
        self.budgets = BudgetRegistry(
            self.store,
            self.transactions.spending_for,
            self.events,
            clock=self.clock,
            week_start=config.week_start_index,
        )

        self.events.subscribe(TransactionRecorded, self._on_transaction_recorded)

    def _on_transaction_recorded(self, event) -> None:
        self.budgets.evaluate(event.transaction)
