"""Projection of recurring obligations onto future due dates.

Day and week frequencies step by a fixed number of days. Month based
frequencies step whole calendar months anchored on a day-of-month, clamping
to the last day of shorter months (Jan 31 -> Feb 29 -> Mar 31). Both are
computed in closed form, so an obligation started decades ago costs the same
as one started yesterday.
"""

import calendar
from datetime import date, timedelta

from .models import Frequency

DAY_STEPS = {
    Frequency.DAILY: 1,
    Frequency.WEEKLY: 7,
}

MONTH_STEPS = {
    Frequency.MONTHLY: 1,
    Frequency.QUARTERLY: 3,
    Frequency.YEARLY: 12,
}


def days_in_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def shift_months(start: date, months: int, anchor_day: int | None = None) -> date:
    """
    Move a date by whole calendar months.

    Args:
        start: Date to move from
        months: Number of months (may be negative)
        anchor_day: Preferred day of month; defaults to ``start.day``

    Returns:
        The shifted date, with the day clamped to the target month's length
    """
    index = start.year * 12 + (start.month - 1) + months
    year, month = divmod(index, 12)
    day = anchor_day if anchor_day is not None else start.day
    return date(year, month + 1, min(day, days_in_month(year, month + 1)))


def next_occurrence(
    start_date: date, frequency: Frequency | str, reference_date: date
) -> date:
    """
    Compute the first occurrence of a schedule strictly after a reference date.

    A schedule that has not started yet (start after reference) is returned
    unchanged.

    Args:
        start_date: First occurrence of the schedule
        frequency: Recurrence unit
        reference_date: The "as of" date

    Returns:
        Earliest occurrence ``start_date + k periods`` (k >= 1) after reference_date

    Raises:
        InvalidFrequency: If the frequency is not recognized
    """
    frequency = Frequency.parse(frequency)
    if start_date > reference_date:
        return start_date

    if frequency in DAY_STEPS:
        step = DAY_STEPS[frequency]
        periods = (reference_date - start_date).days // step + 1
        return start_date + timedelta(days=periods * step)

    step = MONTH_STEPS[frequency]
    months_elapsed = (reference_date.year - start_date.year) * 12 + (
        reference_date.month - start_date.month
    )
    periods = max(months_elapsed // step, 1)
    candidate = shift_months(start_date, periods * step)
    if candidate <= reference_date:
        candidate = shift_months(start_date, (periods + 1) * step)
    return candidate


def advance_once(
    current_due_date: date,
    frequency: Frequency | str,
    anchor_day: int | None = None,
) -> date:
    """
    Add exactly one period to a due date.

    Used when an obligation is fulfilled. The step starts from the current due
    date rather than the schedule start, so a manually moved date carries
    forward. ``anchor_day`` (normally the start date's day) restores a day that
    was clamped by a short month, but only while the current date still sits on
    that anchored schedule.

    Raises:
        InvalidFrequency: If the frequency is not recognized
    """
    frequency = Frequency.parse(frequency)
    if frequency in DAY_STEPS:
        return current_due_date + timedelta(days=DAY_STEPS[frequency])

    day = current_due_date.day
    if anchor_day is not None and on_anchored_schedule(current_due_date, anchor_day):
        day = anchor_day
    return shift_months(current_due_date, MONTH_STEPS[frequency], anchor_day=day)


def on_anchored_schedule(value: date, anchor_day: int) -> bool:
    """True if ``value`` is where ``anchor_day`` lands in its month after clamping."""
    return value.day == min(anchor_day, days_in_month(value.year, value.month))


def occurrences_between(
    start_date: date,
    frequency: Frequency | str,
    first: date,
    last: date,
    anchor_day: int | None = None,
) -> list[date]:
    """
    List schedule occurrences falling within ``[first, last]``.

    Occurrences after the first step with ``advance_once``, so passing an
    obligation's current due date as ``start_date`` (and its start day as
    ``anchor_day``) yields the dates successive fulfilments will produce.
    """
    frequency = Frequency.parse(frequency)
    if anchor_day is None:
        anchor_day = start_date.day
    if start_date >= first:
        current = start_date
    else:
        current = next_occurrence(start_date, frequency, first - timedelta(days=1))

    results = []
    while current <= last:
        results.append(current)
        current = advance_once(current, frequency, anchor_day=anchor_day)
    return results
