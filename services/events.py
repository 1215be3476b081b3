"""In-process event bus connecting the ledger and the budget registry."""

from dataclasses import dataclass
from decimal import Decimal
from typing import Callable, Dict, List, Type

from models.transaction import Transaction
from logger import get_logger

logger = get_logger()


@dataclass(frozen=True)
class TransactionRecorded:
    """Published by the ledger after a transaction is added or updated."""

    transaction: Transaction


@dataclass(frozen=True)
class BudgetExceeded:
    """Published by the registry when spend reaches a budget's limit.

    Advisory only: the transaction that triggered it is already recorded.
    """

    category_id: str
    budget_id: str
    period: str
    limit: Decimal
    spent: Decimal
    progress: Decimal


Handler = Callable[[object], None]


class EventBus:
    """Synchronous publish/subscribe dispatch keyed by event class.

    Handlers are fire-and-forget: an exception raised by one handler is
    logged and the remaining handlers still run.
    """

    def __init__(self):
        self._subscribers: Dict[Type, List[Handler]] = {}

    def subscribe(self, event_type: Type, handler: Handler) -> None:
        self._subscribers.setdefault(event_type, []).append(handler)

    def unsubscribe(self, event_type: Type, handler: Handler) -> None:
        handlers = self._subscribers.get(event_type, [])
        if handler in handlers:
            handlers.remove(handler)

    def publish(self, event) -> int:
        """Deliver an event to every handler subscribed to its class.

        Args:
            event: Event instance.

        Returns:
            Number of handlers invoked.
        """
        handlers = list(self._subscribers.get(type(event), []))
        for handler in handlers:
            try:
                handler(event)
            except Exception:
                logger.exception(
                    f"Handler {getattr(handler, '__qualname__', handler)!s} "
                    f"failed for {type(event).__name__}"
                )
        return len(handlers)
