from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional

from models.timestamps import parse_timestamp

INCOME = "income"
EXPENSE = "expense"
TRANSACTION_TYPES = (INCOME, EXPENSE)


@dataclass
class TransactionDraft:
    """Caller-supplied fields of a transaction, before it is recorded."""

    type: str  # 'income' or 'expense'
    amount: Decimal  # must be positive
    category_id: str
    description: Optional[str] = None


@dataclass
class Transaction:
    """Represents a recorded income or expense."""

    id: str  # uuid4, assigned on add
    type: str  # 'income' or 'expense'
    amount: Decimal  # always positive
    category_id: str
    date: datetime  # set on add, never changed by updates
    description: Optional[str] = None

    @property
    def signed_amount(self) -> Decimal:
        """Amount as it affects the balance: negative for expenses."""
        return self.amount if self.type == INCOME else -self.amount

    def to_dict(self) -> dict:
        """Convert transaction to its JSON snapshot form."""
        data = {
            "id": self.id,
            "type": self.type,
            "amount": self.amount,
            "categoryId": self.category_id,
            "date": self.date.isoformat(),
        }
        if self.description is not None:
            data["description"] = self.description
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "Transaction":
        """Build a transaction from its JSON snapshot form."""
        return cls(
            id=data["id"],
            type=data["type"],
            amount=Decimal(str(data["amount"])),
            category_id=data["categoryId"],
            date=parse_timestamp(data["date"]),
            description=data.get("description"),
        )
