"""Transaction ledger: the owned collection of income and expense records."""

import asyncio
import uuid
from dataclasses import replace
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Callable, List, Optional

from models.timestamps import as_aware, now
from models.transaction import (
    EXPENSE,
    INCOME,
    TRANSACTION_TYPES,
    Transaction,
    TransactionDraft,
)
from services.errors import ValidationError
from services.events import TransactionRecorded
from services.snapshots import dump_records, load_records
from logger import get_logger

logger = get_logger()

TRANSACTIONS_KEY = "transactions"


class TransactionLedger:
    """Service for recording and aggregating transactions.

    The full collection is loaded from the store once, at construction, and
    written back in full after every mutation.

    Args:
        store: Key-value store used for the collection snapshot.
        catalog: Category catalog used to validate category identifiers.
        events: Event bus that receives TransactionRecorded events.
        clock: Returns the current timestamp. Read on every add.
    """

    def __init__(
        self,
        store,
        catalog,
        events,
        clock: Callable[[], datetime] = now,
    ):
        self.store = store
        self.catalog = catalog
        self.events = events
        self.clock = clock
        self.last_error: Optional[Exception] = None
        self._transactions: List[Transaction] = load_records(
            store, TRANSACTIONS_KEY, Transaction.from_dict
        )

    def __len__(self) -> int:
        return len(self._transactions)

    async def add(self, draft: TransactionDraft) -> Transaction:
        """Validate and record a new transaction.

        The snapshot write runs in a worker thread and is awaited before the
        TransactionRecorded event is published. Overlapping calls that are not
        awaited one after another may interleave at that point.

        Args:
            draft: Caller-supplied transaction fields.

        Returns:
            The recorded Transaction with id and date assigned.

        Raises:
            ValidationError: If the amount is not positive, the category is
                unknown, or the type is not income/expense. The collection
                is left unchanged.
            Exception: If persisting fails. The record stays in memory.
        """
        try:
            amount = self._validate(draft)

            transaction = Transaction(
                id=str(uuid.uuid4()),
                type=draft.type,
                amount=amount,
                category_id=draft.category_id,
                date=self.clock(),
                description=draft.description,
            )

            self._transactions.append(transaction)
            payload = dump_records(self._transactions)
            await asyncio.to_thread(self.store.set, TRANSACTIONS_KEY, payload)
        except Exception as e:
            self.last_error = e
            logger.error(f"Failed to add transaction: {e}")
            raise

        logger.info(
            f"Recorded {transaction.type} of {transaction.amount} "
            f"in '{transaction.category_id}' ({transaction.id})"
        )
        self.events.publish(TransactionRecorded(transaction))
        return transaction

    def update(self, transaction: Transaction) -> bool:
        """Replace the transaction with the same id.

        The record is not re-validated. Its date is kept from the stored
        record since dates never change after creation.

        Args:
            transaction: Full replacement record.

        Returns:
            True if a record was replaced, False if no record has that id.
        """
        index = self._index_of(transaction.id)
        if index is None:
            logger.debug(f"Update skipped, no transaction {transaction.id}")
            return False

        updated = replace(transaction, date=self._transactions[index].date)
        self._transactions[index] = updated
        self._save()

        logger.info(f"Updated transaction {updated.id}")
        self.events.publish(TransactionRecorded(updated))
        return True

    def remove(self, transaction_id: str) -> bool:
        """Remove a transaction by id.

        Returns:
            True if a record was removed, False if none matched.
        """
        remaining = [t for t in self._transactions if t.id != transaction_id]
        removed = len(remaining) != len(self._transactions)
        self._transactions = remaining
        self._save()

        if removed:
            logger.info(f"Removed transaction {transaction_id}")
        return removed

    def find(self, transaction_id: str) -> Optional[Transaction]:
        index = self._index_of(transaction_id)
        return self._transactions[index] if index is not None else None

    def find_all(self) -> List[Transaction]:
        """Get all transactions in recording order."""
        return list(self._transactions)

    def find_by_category(self, category_id: str) -> List[Transaction]:
        return [t for t in self._transactions if t.category_id == category_id]

    def total_balance(self) -> Decimal:
        """Sum of income minus sum of expenses over all transactions."""
        return sum((t.signed_amount for t in self._transactions), Decimal("0"))

    def spending_for(
        self,
        category_id: str,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
    ) -> Decimal:
        """Total expense amount for a category within [start_date, end_date].

        Args:
            category_id: Category to aggregate.
            start_date: Inclusive lower bound, or None for no lower bound.
            end_date: Inclusive upper bound, or None for no upper bound.

        Returns:
            Sum of matching expense amounts. Income is never counted.
        """
        matching = self.query(
            type=EXPENSE,
            category_id=category_id,
            start_date=start_date,
            end_date=end_date,
        )
        return sum((t.amount for t in matching), Decimal("0"))

    def query(
        self,
        *,
        type: Optional[str] = None,
        category_id: Optional[str] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
    ) -> List[Transaction]:
        """Get transactions matching every given filter.

        Args:
            type: Optional transaction type to match.
            category_id: Optional category to match.
            start_date: Optional inclusive lower bound on date.
            end_date: Optional inclusive upper bound on date.

        Returns:
            Matching transactions in recording order.
        """
        start_date = as_aware(start_date)
        end_date = as_aware(end_date)
        return [
            t
            for t in self._transactions
            if (type is None or t.type == type)
            and (category_id is None or t.category_id == category_id)
            and (start_date is None or t.date >= start_date)
            and (end_date is None or t.date <= end_date)
        ]

    def _validate(self, draft: TransactionDraft) -> Decimal:
        """Check a draft's invariants and return its amount as a Decimal."""
        if draft.type not in TRANSACTION_TYPES:
            raise ValidationError(
                f"Transaction type must be '{INCOME}' or '{EXPENSE}', got {draft.type!r}"
            )

        try:
            amount = Decimal(str(draft.amount))
        except InvalidOperation:
            raise ValidationError(f"Amount is not a number: {draft.amount!r}")
        if not amount.is_finite() or amount <= 0:
            raise ValidationError("Amount must be positive")

        if not self.catalog.exists(draft.category_id):
            raise ValidationError(f"Invalid category: {draft.category_id!r}")

        return amount

    def _index_of(self, transaction_id: str) -> Optional[int]:
        for index, t in enumerate(self._transactions):
            if t.id == transaction_id:
                return index
        return None

    def _save(self) -> None:
        self.store.set(TRANSACTIONS_KEY, dump_records(self._transactions))
        logger.debug(f"Saved {len(self._transactions)} transaction(s)")
