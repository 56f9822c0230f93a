"""Status classification for bills and recurring obligations.

Every status badge shown anywhere comes from ``classify``; callers should not
compare due dates themselves.
"""

from datetime import date

from .models import BillReminder, ObligationStatus, RecurringObligation, StatusResult


def classify(
    due_date: date,
    paid: bool,
    reference_date: date,
    lead_days: int = 0,
    active: bool = True,
) -> StatusResult:
    """
    Derive the status of an obligation as of a reference date.

    Precedence: inactive, then paid (absorbing), then overdue, due soon and
    upcoming. ``days_delta`` is always ``due_date - reference_date`` in days.

    Args:
        due_date: When the obligation falls due
        paid: Whether it has been paid
        reference_date: The "as of" date, normally today
        lead_days: Reminder window; due dates within it are "due soon"
        active: False for a paused recurring obligation

    Returns:
        Status tag and signed day count
    """
    days_delta = (due_date - reference_date).days

    if not active:
        status = ObligationStatus.INACTIVE
    elif paid:
        status = ObligationStatus.PAID
    elif days_delta < 0:
        status = ObligationStatus.OVERDUE
    elif days_delta <= lead_days:
        status = ObligationStatus.DUE_SOON
    else:
        status = ObligationStatus.UPCOMING

    return StatusResult(status=status, days_delta=days_delta)


def classify_bill(bill: BillReminder, reference_date: date) -> StatusResult:
    return classify(
        due_date=bill.due_date,
        paid=bill.paid,
        reference_date=reference_date,
        lead_days=bill.reminder_lead_days,
    )


def classify_recurring(
    obligation: RecurringObligation, reference_date: date, lead_days: int = 0
) -> StatusResult:
    return classify(
        due_date=obligation.next_due_date,
        paid=False,
        reference_date=reference_date,
        lead_days=lead_days,
        active=obligation.active,
    )


def describe(result: StatusResult) -> str:
    """Human readable badge text, e.g. "Overdue by 3 days"."""
    days = abs(result.days_delta)
    unit = "day" if days == 1 else "days"
    if result.status == ObligationStatus.PAID:
        return "Paid"
    if result.status == ObligationStatus.INACTIVE:
        return "Inactive"
    if result.status == ObligationStatus.OVERDUE:
        return f"Overdue by {days} {unit}"
    if result.days_delta == 0:
        return "Due today"
    if result.status == ObligationStatus.DUE_SOON:
        return f"Due in {days} {unit}"
    return f"Upcoming in {days} {unit}"
