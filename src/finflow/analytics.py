"""Analytics views computed over ledger entries and obligations."""

from collections import defaultdict
from datetime import date, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Literal

from pydantic import BaseModel

from .classifier import classify_bill, classify_recurring
from .models import (
    BillReminder,
    EntryKind,
    Expense,
    ObligationStatus,
    RecurringObligation,
    StatusResult,
)
from .money import Money


class CategoryTotal(BaseModel):
    """Spending for one category."""

    category: str
    amount: Money
    percentage: Decimal  # share of total spending, 0-100


class MonthTotal(BaseModel):
    """Income and spending for one calendar month."""

    month: str  # YYYY-MM
    expenses: Money
    income: Money


class UpcomingItem(BaseModel):
    """A bill or recurring obligation falling due soon."""

    kind: Literal["bill", "recurring"]
    id: str
    name: str
    amount: Money
    category: str
    due_date: date
    status: StatusResult


class Dashboard(BaseModel):
    """Figures for the month containing the reference date."""

    month: str
    monthly_income: Money
    other_income: Money
    total_expenses: Money
    balance: Money
    savings_rate: Decimal  # balance as a percentage of income, one decimal place
    monthly_budget: Money
    budget_remaining: Money
    budget_used_percent: Decimal | None
    by_category: list[CategoryTotal]
    by_month: list[MonthTotal]
    overdue_count: int
    due_soon_count: int
    recent: list[Expense]


def month_key(value: date) -> str:
    return f"{value.year:04d}-{value.month:02d}"


def _percent(part: Money, whole: Money, places: str = "0.01") -> Decimal:
    if whole.is_zero():
        return Decimal("0")
    ratio = Decimal(part.minor_units) * 100 / Decimal(whole.minor_units)
    return ratio.quantize(Decimal(places), rounding=ROUND_HALF_UP)


def category_breakdown(expenses: list[Expense]) -> list[CategoryTotal]:
    """Spending per category, largest first. Income entries are ignored."""
    totals: dict[str, int] = defaultdict(int)
    for entry in expenses:
        if entry.kind == EntryKind.EXPENSE:
            totals[entry.category] += entry.amount.minor_units

    overall = Money.from_minor(sum(totals.values()))
    ranked = sorted(totals.items(), key=lambda item: (-item[1], item[0]))
    return [
        CategoryTotal(
            category=category,
            amount=Money.from_minor(units),
            percentage=_percent(Money.from_minor(units), overall),
        )
        for category, units in ranked
    ]


def monthly_totals(expenses: list[Expense]) -> list[MonthTotal]:
    """Income and spending per month, oldest first."""
    spent: dict[str, int] = defaultdict(int)
    earned: dict[str, int] = defaultdict(int)
    for entry in expenses:
        bucket = earned if entry.kind == EntryKind.INCOME else spent
        bucket[month_key(entry.date)] += entry.amount.minor_units

    return [
        MonthTotal(
            month=month,
            expenses=Money.from_minor(spent.get(month, 0)),
            income=Money.from_minor(earned.get(month, 0)),
        )
        for month in sorted(set(spent) | set(earned))
    ]


def upcoming_obligations(
    bills: list[BillReminder],
    recurring: list[RecurringObligation],
    reference_date: date,
    within_days: int = 30,
    lead_days: int = 3,
) -> list[UpcomingItem]:
    """
    Unpaid bills and active recurring obligations due within a window.

    Overdue items are always included. Results are sorted by due date.
    """
    horizon = reference_date + timedelta(days=within_days)
    items = []

    for bill in bills:
        if bill.paid or bill.due_date > horizon:
            continue
        items.append(
            UpcomingItem(
                kind="bill",
                id=bill.id,
                name=bill.name,
                amount=bill.amount,
                category=bill.category,
                due_date=bill.due_date,
                status=classify_bill(bill, reference_date),
            )
        )

    for obligation in recurring:
        if not obligation.active or obligation.next_due_date > horizon:
            continue
        items.append(
            UpcomingItem(
                kind="recurring",
                id=obligation.id,
                name=obligation.description,
                amount=obligation.amount,
                category=obligation.category,
                due_date=obligation.next_due_date,
                status=classify_recurring(obligation, reference_date, lead_days),
            )
        )

    return sorted(items, key=lambda item: (item.due_date, item.name))


def build_dashboard(
    expenses: list[Expense],
    bills: list[BillReminder],
    recurring: list[RecurringObligation],
    reference_date: date,
    monthly_income: Money,
    monthly_budget: Money,
    lead_days: int = 3,
    recent_limit: int = 5,
) -> Dashboard:
    """
    Summarize the month containing ``reference_date``.

    Balance is the configured monthly income plus income entries minus
    expenses for the month. The savings rate is that balance as a share of
    the month's income (0 when there is no income). ``recent`` holds the
    latest ``recent_limit`` ledger entries of any month.
    """
    month = month_key(reference_date)
    this_month = [entry for entry in expenses if month_key(entry.date) == month]

    spent = Money.total(e.amount for e in this_month if e.kind == EntryKind.EXPENSE)
    earned = Money.total(e.amount for e in this_month if e.kind == EntryKind.INCOME)

    income = monthly_income + earned
    balance = income - spent
    latest = sorted(expenses, key=lambda e: e.date, reverse=True)[:recent_limit]

    statuses = [classify_bill(bill, reference_date) for bill in bills] + [
        classify_recurring(obligation, reference_date, lead_days)
        for obligation in recurring
    ]

    return Dashboard(
        month=month,
        monthly_income=monthly_income,
        other_income=earned,
        total_expenses=spent,
        balance=balance,
        savings_rate=_percent(balance, income, places="0.1"),
        monthly_budget=monthly_budget,
        budget_remaining=monthly_budget - spent,
        budget_used_percent=(
            _percent(spent, monthly_budget) if not monthly_budget.is_zero() else None
        ),
        by_category=category_breakdown(this_month),
        by_month=monthly_totals(expenses),
        overdue_count=sum(1 for s in statuses if s.status == ObligationStatus.OVERDUE),
        due_soon_count=sum(
            1 for s in statuses if s.status == ObligationStatus.DUE_SOON
        ),
        recent=latest,
    )
