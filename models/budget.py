"""Budget model: a spending cap for one category over a calendar period."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional

from models.timestamps import parse_timestamp

WEEKLY = "weekly"
MONTHLY = "monthly"
PERIODS = (WEEKLY, MONTHLY)


@dataclass
class BudgetDraft:
    """Caller-supplied fields of a budget, before it is registered.

    Attributes:
        category_id: Catalog identifier the cap applies to.
        limit: Spending cap, must be positive.
        period: 'weekly' or 'monthly'.
        currency: Informational only, never used in computation.
    """

    category_id: str
    limit: Decimal
    period: str
    currency: Optional[str] = None


@dataclass
class Budget:
    """Represents a registered budget.

    Attributes:
        id: Unique identifier (uuid4), assigned on add.
        category_id: Catalog identifier the cap applies to.
        limit: Spending cap, always positive.
        period: 'weekly' or 'monthly'.
        created_at: Timestamp when the budget was added.
        currency: Optional informational currency code.
    """

    id: str
    category_id: str
    limit: Decimal
    period: str
    created_at: datetime
    currency: Optional[str] = None

    def to_dict(self) -> dict:
        """Convert budget to its JSON snapshot form."""
        data = {
            "id": self.id,
            "categoryId": self.category_id,
            "limit": self.limit,
            "period": self.period,
            "createdAt": self.created_at.isoformat(),
        }
        if self.currency is not None:
            data["currency"] = self.currency
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "Budget":
        """Build a budget from its JSON snapshot form."""
        return cls(
            id=data["id"],
            category_id=data["categoryId"],
            limit=Decimal(str(data["limit"])),
            period=data["period"],
            created_at=parse_timestamp(data["createdAt"]),
            currency=data.get("currency"),
        )
