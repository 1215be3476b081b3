import logging
from decimal import Decimal

from services.events import BudgetExceeded, EventBus, TransactionRecorded


def make_exceeded(category_id="food"):
    return BudgetExceeded(
        category_id=category_id,
        budget_id="b1",
        period="monthly",
        limit=Decimal("50"),
        spent=Decimal("55"),
        progress=Decimal("110"),
    )


class TestEventBus:
    """Tests for EventBus."""

    def test_publish_delivers_to_subscribers(self):
        """Test that every subscriber of the event class receives the event."""
        bus = EventBus()
        first, second = [], []
        bus.subscribe(BudgetExceeded, first.append)
        bus.subscribe(BudgetExceeded, second.append)
        event = make_exceeded()

        count = bus.publish(event)

        assert count == 2
        assert first == [event]
        assert second == [event]

    def test_publish_without_subscribers(self):
        """Test that publishing with no subscribers is a no-op."""
        assert EventBus().publish(make_exceeded()) == 0

    def test_dispatch_by_event_class(self):
        """Test that subscribers only see events of the class they chose."""
        bus = EventBus()
        recorded = []
        bus.subscribe(TransactionRecorded, recorded.append)

        bus.publish(make_exceeded())

        assert recorded == []

    def test_unsubscribe(self):
        """Test that an unsubscribed handler no longer receives events."""
        bus = EventBus()
        received = []
        bus.subscribe(BudgetExceeded, received.append)
        bus.unsubscribe(BudgetExceeded, received.append)

        bus.publish(make_exceeded())

        assert received == []

    def test_unsubscribe_unknown_handler_is_noop(self):
        """Test that unsubscribing a handler that was never added is harmless."""
        EventBus().unsubscribe(BudgetExceeded, print)

    def test_failing_handler_does_not_stop_others(self, caplog):
        """Test that a handler exception is logged and not propagated."""
        bus = EventBus()
        received = []

        def broken(event):
            raise RuntimeError("notification channel down")

        bus.subscribe(BudgetExceeded, broken)
        bus.subscribe(BudgetExceeded, received.append)

        with caplog.at_level(logging.ERROR, logger="tally"):
            count = bus.publish(make_exceeded())

        assert count == 2
        assert len(received) == 1
        assert "notification channel down" in caplog.text
