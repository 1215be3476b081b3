"""Errors raised by the ledger and budget services."""


class ValidationError(ValueError):
    """A draft violates a record invariant (non-positive amount or limit,
    unknown category, unknown transaction type)."""


class InvalidPeriodError(ValueError):
    """A budget period other than 'weekly' or 'monthly' was requested."""

    def __init__(self, period):
        super().__init__(f"Invalid budget period: {period!r}")
        self.period = period
