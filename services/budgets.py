"""Budget registry: spending caps per category and their progress."""

import uuid
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Callable, List, Optional, Tuple

from dateutil.relativedelta import relativedelta, MO, TU, WE, TH, FR, SA, SU

from models.budget import MONTHLY, PERIODS, WEEKLY, Budget, BudgetDraft
from models.timestamps import as_aware, now
from models.transaction import EXPENSE, Transaction
from services.errors import InvalidPeriodError, ValidationError
from services.events import BudgetExceeded
from services.snapshots import dump_records, load_records
from logger import get_logger

logger = get_logger()

BUDGETS_KEY = "budgets"

# The period budget evaluation checks after each expense
ALERT_PERIOD = MONTHLY

_WEEKDAYS = (MO, TU, WE, TH, FR, SA, SU)

SpendingQuery = Callable[[str, Optional[datetime], Optional[datetime]], Decimal]


def resolve_period_range(
    period: str, reference: datetime, week_start: int = 0
) -> Tuple[datetime, datetime]:
    """Get the first and last instant of the calendar period containing reference.

    Args:
        period: 'weekly' or 'monthly'.
        reference: Instant the period must contain. A naive value is taken
            as local time.
        week_start: Weekday the week starts on (Monday is 0).

    Returns:
        (start, end) tuple, both inclusive, in the reference's timezone.
        The end is one microsecond before the next period starts.

    Raises:
        InvalidPeriodError: If period is not supported.
    """
    midnight = as_aware(reference).replace(
        hour=0, minute=0, second=0, microsecond=0
    )

    if period == WEEKLY:
        start = midnight + relativedelta(weekday=_WEEKDAYS[week_start](-1))
        end = start + relativedelta(weeks=1, microseconds=-1)
    elif period == MONTHLY:
        start = midnight + relativedelta(day=1)
        end = start + relativedelta(months=1, microseconds=-1)
    else:
        raise InvalidPeriodError(period)

    return start, end


class BudgetRegistry:
    """Service for managing budgets and computing their progress.

    The registry never touches transactions directly. Spend is obtained from
    the spending query it is given, which takes a category id and an
    inclusive date range and returns the total expense amount.

    Args:
        store: Key-value store used for the collection snapshot.
        spending: Spending query used for progress computation.
        events: Event bus that receives BudgetExceeded events.
        clock: Returns the current timestamp. Read on every period lookup.
        week_start: Weekday weekly budgets start on (Monday is 0).
    """

    def __init__(
        self,
        store,
        spending: SpendingQuery,
        events,
        clock: Callable[[], datetime] = now,
        week_start: int = 0,
    ):
        self.store = store
        self.spending = spending
        self.events = events
        self.clock = clock
        self.week_start = week_start
        self.last_error: Optional[Exception] = None
        self._budgets: List[Budget] = load_records(store, BUDGETS_KEY, Budget.from_dict)

    def __len__(self) -> int:
        return len(self._budgets)

    def add(self, draft: BudgetDraft) -> Budget:
        """Validate and register a new budget.

        Another budget for the same category and period is allowed; a warning
        is logged and budget_for keeps returning the older one.

        Args:
            draft: Caller-supplied budget fields.

        Returns:
            The registered Budget with id and created_at assigned.

        Raises:
            ValidationError: If the limit is not a positive number.
            InvalidPeriodError: If the period is not weekly or monthly.
        """
        try:
            limit = self._validate(draft)

            budget = Budget(
                id=str(uuid.uuid4()),
                category_id=draft.category_id,
                limit=limit,
                period=draft.period,
                created_at=self.clock(),
                currency=draft.currency,
            )

            existing = self.budget_for(budget.category_id, budget.period)
            self._budgets.append(budget)
            self._save()
        except Exception as e:
            self.last_error = e
            logger.error(f"Failed to add budget: {e}")
            raise

        if existing is not None:
            logger.warning(
                f"Budget {budget.id} duplicates {existing.period} budget "
                f"{existing.id} for '{existing.category_id}'; the older one is used"
            )
        logger.info(
            f"Added {budget.period} budget of {budget.limit} "
            f"for '{budget.category_id}' ({budget.id})"
        )
        return budget

    def update(self, budget: Budget) -> bool:
        """Replace the budget with the same id.

        Returns:
            True if a budget was replaced, False if no budget has that id.
        """
        for index, existing in enumerate(self._budgets):
            if existing.id == budget.id:
                self._budgets[index] = budget
                self._save()
                logger.info(f"Updated budget {budget.id}")
                return True

        logger.debug(f"Update skipped, no budget {budget.id}")
        return False

    def remove(self, budget_id: str) -> bool:
        """Remove a budget by id.

        Returns:
            True if a budget was removed, False if none matched.
        """
        remaining = [b for b in self._budgets if b.id != budget_id]
        removed = len(remaining) != len(self._budgets)
        self._budgets = remaining
        self._save()

        if removed:
            logger.info(f"Removed budget {budget_id}")
        return removed

    def find(self, budget_id: str) -> Optional[Budget]:
        return next((b for b in self._budgets if b.id == budget_id), None)

    def find_all(self) -> List[Budget]:
        """Get all budgets in registration order."""
        return list(self._budgets)

    def resolve_period_range(
        self, period: str, reference: Optional[datetime] = None
    ) -> Tuple[datetime, datetime]:
        """Get the (start, end) range of the period containing reference.

        Args:
            period: 'weekly' or 'monthly'.
            reference: Instant to resolve against. Defaults to the clock's
                current time, read now.

        Raises:
            InvalidPeriodError: If period is not supported.
        """
        if reference is None:
            reference = self.clock()
        try:
            return resolve_period_range(period, reference, self.week_start)
        except InvalidPeriodError as e:
            self.last_error = e
            raise

    def budget_for(self, category_id: str, period: str) -> Optional[Budget]:
        """Get the budget for a category and period.

        When several budgets match, the one created first wins; budgets with
        equal creation times keep registration order.

        Returns:
            Matching Budget, or None.
        """
        matches = [
            b for b in self._budgets if b.category_id == category_id and b.period == period
        ]
        if not matches:
            return None
        return min(matches, key=lambda b: b.created_at)

    def current_spending(self, category_id: str, period: str) -> Decimal:
        """Total expense for a category within the current period."""
        start, end = self.resolve_period_range(period)
        return self.spending(category_id, start, end)

    def progress_for(self, category_id: str, period: str) -> Decimal:
        """Percentage of the matching budget's limit spent this period.

        Returns:
            0 if no budget matches, otherwise 100 * spend / limit. Values
            above 100 are returned as-is.
        """
        budget = self.budget_for(category_id, period)
        if budget is None:
            return Decimal("0")

        spent = self.current_spending(category_id, period)
        return Decimal(100) * spent / budget.limit

    def evaluate(self, transaction: Transaction) -> Optional[BudgetExceeded]:
        """Check the monthly budget of an expense's category.

        Publishes a BudgetExceeded event when spend has reached the limit.
        The transaction itself is never changed.

        Returns:
            The published event, or None.
        """
        if transaction.type != EXPENSE:
            return None

        budget = self.budget_for(transaction.category_id, ALERT_PERIOD)
        if budget is None:
            return None

        spent = self.current_spending(budget.category_id, budget.period)
        progress = Decimal(100) * spent / budget.limit
        if progress < 100:
            return None

        event = BudgetExceeded(
            category_id=budget.category_id,
            budget_id=budget.id,
            period=budget.period,
            limit=budget.limit,
            spent=spent,
            progress=progress,
        )
        logger.info(
            f"Budget exceeded for category: {budget.category_id} "
            f"({spent} of {budget.limit}, {progress:.0f}%)"
        )
        self.events.publish(event)
        return event

    def _validate(self, draft: BudgetDraft) -> Decimal:
        """Check a draft's invariants and return its limit as a Decimal."""
        try:
            limit = Decimal(str(draft.limit))
        except InvalidOperation:
            raise ValidationError(f"Budget limit is not a number: {draft.limit!r}")
        if not limit.is_finite() or limit <= 0:
            raise ValidationError("Budget limit must be positive")

        if draft.period not in PERIODS:
            raise InvalidPeriodError(draft.period)

        return limit

    def _save(self) -> None:
        self.store.set(BUDGETS_KEY, dump_records(self._budgets))
        logger.debug(f"Saved {len(self._budgets)} budget(s)")
