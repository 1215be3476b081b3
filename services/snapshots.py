"""JSON snapshot encoding for entity collections kept in the key-value store."""

import simplejson as json
from typing import Callable, List, TypeVar

from logger import get_logger

logger = get_logger()

T = TypeVar("T")


def load_records(store, key: str, from_dict: Callable[[dict], T]) -> List[T]:
    """Read the collection stored under a key.

    Args:
        store: Key-value store to read from.
        key: Collection key.
        from_dict: Converts one JSON object into a record.

    Returns:
        Records in stored order; an empty list if the key was never written.

    Raises:
        ValueError: If the stored value is not a JSON array of objects.
    """
    raw = store.get(key)
    if raw is None:
        logger.debug(f"No snapshot under '{key}', starting empty")
        return []

    # amounts stay exact Decimals both ways, never passing through float
    data = json.loads(raw, use_decimal=True)
    if not isinstance(data, list):
        raise ValueError(f"Snapshot under '{key}' is not a JSON array")

    try:
        records = [from_dict(item) for item in data]
    except (KeyError, TypeError, ValueError) as e:
        raise ValueError(f"Malformed record in snapshot '{key}': {e}") from e

    logger.debug(f"Loaded {len(records)} record(s) from '{key}'")
    return records


def dump_records(records: list) -> str:
    """Serialize records (objects with a to_dict method) to a JSON array."""
    return json.dumps(
        [record.to_dict() for record in records], ensure_ascii=False, use_decimal=True
    )
