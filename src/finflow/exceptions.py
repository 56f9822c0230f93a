"""Custom exceptions for FinFlow."""

from decimal import Decimal


class FinflowError(Exception):
    """Base exception for all FinFlow errors."""

    pass


class ConfigurationError(FinflowError):
    """Raised when configuration is invalid or missing."""

    pass


class InvalidAmount(FinflowError):
    """Raised when a numeric input is malformed, out of range or negative where disallowed."""

    pass


class InvalidFrequency(FinflowError):
    """Raised when a recurrence unit is not recognized."""

    def __init__(self, frequency: object):
        self.frequency = frequency
        super().__init__(
            f"Unrecognized frequency {frequency!r} "
            f"(expected daily, weekly, monthly, quarterly or yearly)"
        )


class InvalidStrategy(FinflowError):
    """Raised when a split strategy is not recognized."""

    def __init__(self, strategy: object):
        self.strategy = strategy
        super().__init__(
            f"Unrecognized split strategy {strategy!r} "
            f"(expected equal, percentage or custom)"
        )


class DateOrderingError(FinflowError):
    """Raised when a date change would move a due date backwards."""

    pass


class InvalidParticipant(FinflowError):
    """Raised when split participants are missing or addressed incorrectly."""

    pass


class RecordNotFoundError(FinflowError):
    """Raised when a record is missing from the store."""

    def __init__(self, kind: str, record_id: str):
        self.kind = kind
        self.record_id = record_id
        super().__init__(f"No {kind} with id {record_id}")


class AllocationMismatch(FinflowError):
    """Raised when an unreconciled split is about to be persisted.

    The allocator itself never raises this; it reports ``valid=False`` and the
    controller layer turns that into an error to block the save.
    """

    def __init__(
        self,
        discrepancy: Decimal,
        percentage_total: Decimal | None = None,
        message: str | None = None,
    ):
        self.discrepancy = discrepancy
        self.percentage_total = percentage_total
        if message is None:
            if percentage_total is not None:
                message = (
                    f"Percentages sum to {percentage_total.normalize():f}%, "
                    f"need 100%"
                )
            else:
                direction = "unallocated" if discrepancy > 0 else "over-allocated"
                message = f"Shares do not match the total: {abs(discrepancy)} {direction}"
        super().__init__(message)
