"""FinFlow - Personal finance tracker with an obligation and settlement engine."""

__version__ = "0.1.0"

from .allocator import allocate
from .classifier import classify
from .config import Settings, load_settings
from .db import Database
from .models import (
    Allocation,
    BillReminder,
    Expense,
    Frequency,
    ObligationStatus,
    Participant,
    RecurringObligation,
    SplitExpense,
    SplitStrategy,
    StatusResult,
)
from .money import Money
from .recurrence import advance_once, next_occurrence
from .service import FinanceService
from .settlement import mark_fulfilled, settle_all, settle_participant, unsettle_all

__all__ = [
    "Settings",
    "load_settings",
    "Database",
    "Allocation",
    "BillReminder",
    "Expense",
    "Frequency",
    "ObligationStatus",
    "Participant",
    "RecurringObligation",
    "SplitExpense",
    "SplitStrategy",
    "StatusResult",
    "Money",
    "allocate",
    "classify",
    "advance_once",
    "next_occurrence",
    "mark_fulfilled",
    "settle_all",
    "settle_participant",
    "unsettle_all",
    "FinanceService",
]
