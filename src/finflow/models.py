"""Pydantic domain models for FinFlow."""

from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any
from uuid import uuid4

from pydantic import BaseModel, Field, computed_field, field_validator

from .exceptions import InvalidAmount, InvalidFrequency, InvalidStrategy
from .money import Money


def new_id() -> str:
    """Generate a record identifier."""
    return uuid4().hex


def _non_negative_money(value: Any) -> Money:
    # Stored payloads arrive as {"minor_units": N}; user input arrives in major units
    if isinstance(value, (dict, Money)):
        money = Money.model_validate(value)
        if money.is_negative():
            raise InvalidAmount(f"Amount cannot be negative: {money}")
        return money
    return Money.from_major(value)


# ============================================================================
# Enums
# ============================================================================


class Frequency(str, Enum):
    """Recurrence unit for a recurring obligation."""

    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    YEARLY = "yearly"

    @classmethod
    def parse(cls, value: "Frequency | str") -> "Frequency":
        """Coerce user input, raising InvalidFrequency on unknown units."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError as e:
            raise InvalidFrequency(value) from e


class SplitStrategy(str, Enum):
    """How a shared total is divided between participants."""

    EQUAL = "equal"
    PERCENTAGE = "percentage"
    CUSTOM = "custom"

    @classmethod
    def parse(cls, value: "SplitStrategy | str") -> "SplitStrategy":
        """Coerce user input, raising InvalidStrategy on unknown strategies."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError as e:
            raise InvalidStrategy(value) from e


class ObligationStatus(str, Enum):
    """Temporal state of a bill or recurring obligation."""

    PAID = "paid"
    OVERDUE = "overdue"
    DUE_SOON = "dueSoon"
    UPCOMING = "upcoming"
    INACTIVE = "inactive"


class EntryKind(str, Enum):
    """Direction of a ledger entry."""

    EXPENSE = "expense"
    INCOME = "income"


# ============================================================================
# Ledger
# ============================================================================


class Expense(BaseModel):
    """A single ledger entry (expense or income)."""

    id: str = Field(default_factory=new_id)
    title: str
    amount: Money
    category: str
    date: date
    kind: EntryKind = EntryKind.EXPENSE
    recurring_id: str | None = None  # set when emitted by a fulfilled obligation

    validate_amount = field_validator("amount", mode="before")(_non_negative_money)


# ============================================================================
# Obligations
# ============================================================================


class RecurringObligation(BaseModel):
    """An expense that repeats on a fixed schedule."""

    id: str = Field(default_factory=new_id)
    description: str
    amount: Money
    category: str
    frequency: Frequency
    start_date: date
    next_due_date: date
    active: bool = True

    validate_amount = field_validator("amount", mode="before")(_non_negative_money)

    @field_validator("frequency", mode="before")
    @classmethod
    def _parse_frequency(cls, value: Any) -> Frequency:
        return Frequency.parse(value)


class BillReminder(BaseModel):
    """A one-off bill with a due date and a reminder window."""

    id: str = Field(default_factory=new_id)
    name: str
    amount: Money
    category: str
    due_date: date
    reminder_lead_days: int = Field(default=3, ge=0)
    paid: bool = False
    paid_date: date | None = None

    validate_amount = field_validator("amount", mode="before")(_non_negative_money)


class StatusResult(BaseModel):
    """Classifier output: status badge plus signed day distance to the due date."""

    status: ObligationStatus
    days_delta: int  # negative = days overdue


# ============================================================================
# Split expenses
# ============================================================================


class Participant(BaseModel):
    """One person sharing a split expense."""

    name: str = Field(min_length=1)
    share: Money = Field(default_factory=Money.zero)
    share_input: Decimal | None = None  # percentage or custom amount as entered
    is_payer: bool = False
    settled: bool = False


class SplitExpense(BaseModel):
    """A total shared between participants.

    ``settled`` is derived from the participants on every access so it can
    never drift from their individual flags.
    """

    id: str = Field(default_factory=new_id)
    title: str
    total_amount: Money
    category: str
    strategy: SplitStrategy
    participants: list[Participant]
    created: date = Field(default_factory=date.today)

    validate_total = field_validator("total_amount", mode="before")(_non_negative_money)

    @field_validator("strategy", mode="before")
    @classmethod
    def _parse_strategy(cls, value: Any) -> SplitStrategy:
        return SplitStrategy.parse(value)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def settled(self) -> bool:
        return bool(self.participants) and all(p.settled for p in self.participants)

    @property
    def payer_index(self) -> int:
        """Index of the flagged payer, falling back to the first participant."""
        for index, participant in enumerate(self.participants):
            if participant.is_payer:
                return index
        return 0

    def shares_total(self) -> Money:
        return Money.total(p.share for p in self.participants)

    def discrepancy(self) -> Money:
        """Total minus the sum of shares (positive = under-allocated)."""
        return self.total_amount - self.shares_total()

    def outstanding(self) -> Money:
        """Amount still owed by participants who have not settled."""
        return Money.total(p.share for p in self.participants if not p.settled)


class Allocation(BaseModel):
    """Allocator output. Never raised; ``valid`` gates persistence."""

    shares: list[Money]
    valid: bool
    discrepancy: Money
    percentage_total: Decimal | None = None  # only for percentage splits
