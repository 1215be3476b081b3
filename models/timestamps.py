"""Timestamp helpers shared by the models and services."""

from datetime import datetime
from typing import Optional


def now() -> datetime:
    """Current local time as a timezone-aware datetime."""
    return datetime.now().astimezone()


def as_aware(value: Optional[datetime]) -> Optional[datetime]:
    """Take a naive datetime as local time; aware values pass through."""
    if value is not None and value.tzinfo is None:
        return value.astimezone()
    return value


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO 8601 timestamp.

    Naive values are taken as local time so that every timestamp in memory
    is timezone-aware and comparable.
    """
    return as_aware(datetime.fromisoformat(value))
