"""State transitions for split settlement and recurring fulfilment.

All transitions are pure: they take a record and return an updated copy.
Shares are never touched by settlement.
"""

import logging
from datetime import date

from pydantic import BaseModel

from .exceptions import InvalidParticipant
from .models import EntryKind, Expense, RecurringObligation, SplitExpense
from .recurrence import advance_once

logger = logging.getLogger(__name__)


class Fulfillment(BaseModel):
    """Both halves of a "mark fulfilled" transition.

    The caller must persist ``obligation`` and ``expense`` together.
    """

    obligation: RecurringObligation
    expense: Expense


def _with_participant_flag(split: SplitExpense, index: int, settled: bool) -> SplitExpense:
    if not 0 <= index < len(split.participants):
        raise InvalidParticipant(
            f"Participant {index} does not exist in split {split.id} "
            f"({len(split.participants)} participants)"
        )
    participants = [p.model_copy() for p in split.participants]
    participants[index] = participants[index].model_copy(update={"settled": settled})
    return split.model_copy(update={"participants": participants})


def _with_all_flags(split: SplitExpense, settled: bool) -> SplitExpense:
    participants = [p.model_copy(update={"settled": settled}) for p in split.participants]
    return split.model_copy(update={"participants": participants})


def settle_participant(split: SplitExpense, index: int) -> SplitExpense:
    """Mark one participant as paid. The split settles once everyone has."""
    updated = _with_participant_flag(split, index, True)
    logger.info(
        f"Participant '{updated.participants[index].name}' settled on split {split.id}"
        + (" (split fully settled)" if updated.settled else "")
    )
    return updated


def unsettle_participant(split: SplitExpense, index: int) -> SplitExpense:
    """Revert one participant to unpaid."""
    updated = _with_participant_flag(split, index, False)
    logger.info(
        f"Participant '{updated.participants[index].name}' unsettled on split {split.id}"
    )
    return updated


def settle_all(split: SplitExpense) -> SplitExpense:
    """Settle-up override: force every participant to paid."""
    logger.info(f"Settling all {len(split.participants)} participants on split {split.id}")
    return _with_all_flags(split, True)


def unsettle_all(split: SplitExpense) -> SplitExpense:
    """Bulk revert: every participant back to unpaid, whatever their prior state."""
    logger.info(f"Unsettling all participants on split {split.id}")
    return _with_all_flags(split, False)


def mark_fulfilled(obligation: RecurringObligation, reference_date: date) -> Fulfillment:
    """
    Fulfil the current period of a recurring obligation.

    Emits a ledger expense dated at the reference date for the obligation's
    amount and category, and advances ``next_due_date`` by exactly one period
    from its current value.

    Args:
        obligation: The obligation being paid
        reference_date: Date of the payment

    Returns:
        Updated obligation and the new ledger entry, to be saved atomically
    """
    expense = Expense(
        title=obligation.description,
        amount=obligation.amount,
        category=obligation.category,
        date=reference_date,
        kind=EntryKind.EXPENSE,
        recurring_id=obligation.id,
    )
    next_due = advance_once(
        obligation.next_due_date,
        obligation.frequency,
        anchor_day=obligation.start_date.day,
    )
    updated = obligation.model_copy(update={"next_due_date": next_due})

    logger.info(
        f"Fulfilled '{obligation.description}': next due "
        f"{obligation.next_due_date} -> {next_due}"
    )

    return Fulfillment(obligation=updated, expense=expense)
