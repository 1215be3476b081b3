"""Static category catalog loaded from YAML."""

from pathlib import Path
from typing import Iterable, List, Optional

import yaml

from config import get_seed_dir
from models.category import Category
from logger import get_logger

logger = get_logger()


class CategoryCatalog:
    """Read-only, ordered collection of categories.

    Args:
        categories: Categories in display order.
    """

    def __init__(self, categories: Iterable[Category]):
        self._categories = list(categories)
        self._by_id = {c.id: c for c in self._categories}

    @classmethod
    def from_yaml(cls, path: Optional[Path] = None) -> "CategoryCatalog":
        """Load the catalog from a YAML list of {id, name, icon} mappings.

        Args:
            path: Catalog file. Defaults to the bundled db/seed/categories.yaml.

        Raises:
            FileNotFoundError: If the catalog file doesn't exist.
            ValueError: If the file isn't a list of category mappings.
        """
        if path is None:
            path = get_seed_dir() / "categories.yaml"

        if not path.exists():
            raise FileNotFoundError(f"Category catalog not found: {path}")

        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or []

        if not isinstance(data, list):
            raise ValueError(f"Category catalog must be a list: {path}")

        categories = []
        for entry in data:
            try:
                categories.append(
                    Category(
                        id=str(entry["id"]),
                        name=entry["name"],
                        icon=entry.get("icon", ""),
                    )
                )
            except (KeyError, TypeError) as e:
                raise ValueError(f"Malformed category entry {entry!r}: {e}") from e

        logger.debug(f"Loaded {len(categories)} categories from {path}")
        return cls(categories)

    def find_all(self) -> List[Category]:
        """Get all categories in catalog order."""
        return list(self._categories)

    def find(self, category_id: str) -> Optional[Category]:
        """Get a single category by ID, or None."""
        return self._by_id.get(category_id)

    def exists(self, category_id: str) -> bool:
        return category_id in self._by_id
