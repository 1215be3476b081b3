"""Category model for the static category catalog."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Category:
    """Represents an entry of the category catalog.

    Attributes:
        id: Stable identifier referenced by transactions and budgets.
        name: Display name.
        icon: Display icon.
    """

    id: str
    name: str
    icon: str
