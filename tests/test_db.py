"""Tests for the SQLite store."""

import sqlite3
from datetime import date
from unittest.mock import patch

import pytest

from finflow.exceptions import AllocationMismatch
from finflow.models import (
    BillReminder,
    EntryKind,
    Expense,
    Frequency,
    Participant,
    RecurringObligation,
    SplitExpense,
    SplitStrategy,
)
from finflow.money import Money


def make_obligation(**overrides) -> RecurringObligation:
    fields = dict(
        description="Internet",
        amount="799",
        category="Bills & Utilities",
        frequency=Frequency.MONTHLY,
        start_date=date(2024, 1, 10),
        next_due_date=date(2024, 7, 10),
    )
    fields.update(overrides)
    return RecurringObligation(**fields)


class TestExpenses:
    """Ledger persistence."""

    def test_round_trip(self, db):
        expense = Expense(
            title="Groceries",
            amount="1234.56",
            category="Food & Dining",
            date=date(2024, 6, 1),
        )
        db.save_expense(expense)

        loaded = db.get_expense(expense.id)
        assert loaded == expense
        assert loaded.amount == Money.from_major("1234.56")

    def test_list_most_recent_first(self, db):
        older = db.save_expense(
            Expense(title="A", amount="1", category="Others", date=date(2024, 1, 1))
        )
        newer = db.save_expense(
            Expense(
                title="B",
                amount="2",
                category="Income",
                date=date(2024, 2, 1),
                kind=EntryKind.INCOME,
            )
        )
        assert [e.id for e in db.list_expenses()] == [newer.id, older.id]

    def test_delete(self, db):
        expense = db.save_expense(
            Expense(title="A", amount="1", category="Others", date=date(2024, 1, 1))
        )
        assert db.delete_expense(expense.id)
        assert not db.delete_expense(expense.id)
        assert db.get_expense(expense.id) is None


class TestRecurring:
    """Recurring obligation persistence."""

    def test_upsert(self, db):
        obligation = db.save_recurring(make_obligation())
        db.save_recurring(obligation.model_copy(update={"active": False}))

        assert len(db.list_recurring()) == 1
        assert db.get_recurring(obligation.id).active is False

    def test_list_by_next_due(self, db):
        late = db.save_recurring(make_obligation(next_due_date=date(2024, 9, 1)))
        soon = db.save_recurring(make_obligation(next_due_date=date(2024, 7, 1)))
        assert [o.id for o in db.list_recurring()] == [soon.id, late.id]

    def test_apply_fulfillment_writes_both(self, db):
        obligation = db.save_recurring(make_obligation())
        advanced = obligation.model_copy(update={"next_due_date": date(2024, 8, 10)})
        expense = Expense(
            title="Internet",
            amount="799",
            category="Bills & Utilities",
            date=date(2024, 7, 10),
            recurring_id=obligation.id,
        )

        db.apply_fulfillment(advanced, expense)

        assert db.get_recurring(obligation.id).next_due_date == date(2024, 8, 10)
        assert db.get_expense(expense.id).recurring_id == obligation.id

    def test_apply_fulfillment_is_atomic(self, db):
        """A failure writing the obligation leaves no orphan expense."""
        obligation = db.save_recurring(make_obligation())
        advanced = obligation.model_copy(update={"next_due_date": date(2024, 8, 10)})
        expense = Expense(
            title="Internet", amount="799", category="Others", date=date(2024, 7, 10)
        )

        with patch.object(
            db, "_write_recurring", side_effect=sqlite3.OperationalError("disk full")
        ):
            with pytest.raises(sqlite3.OperationalError):
                db.apply_fulfillment(advanced, expense)

        assert db.get_expense(expense.id) is None
        assert db.get_recurring(obligation.id).next_due_date == date(2024, 7, 10)


class TestBills:
    """Bill persistence."""

    def test_unpaid_filter(self, db):
        paid = db.save_bill(
            BillReminder(
                name="Water",
                amount="300",
                category="Bills & Utilities",
                due_date=date(2024, 6, 1),
                paid=True,
                paid_date=date(2024, 5, 30),
            )
        )
        unpaid = db.save_bill(
            BillReminder(
                name="Power",
                amount="1200",
                category="Bills & Utilities",
                due_date=date(2024, 6, 20),
            )
        )

        assert [b.id for b in db.list_bills()] == [paid.id, unpaid.id]
        assert [b.id for b in db.list_bills(unpaid_only=True)] == [unpaid.id]


class TestSplits:
    """Split persistence refuses unreconciled records."""

    def make_split(self, shares) -> SplitExpense:
        return SplitExpense(
            title="Dinner",
            total_amount="100",
            category="Food & Dining",
            strategy=SplitStrategy.CUSTOM,
            participants=[
                Participant(name=f"P{i}", share=share, is_payer=i == 0)
                for i, share in enumerate(shares)
            ],
            created=date(2024, 6, 1),
        )

    def test_saves_reconciled_split(self, db):
        split = db.save_split(self.make_split(["40", "60"]))
        loaded = db.get_split(split.id)
        assert loaded == split
        assert loaded.settled is False

    def test_rejects_unreconciled_split(self, db):
        with pytest.raises(AllocationMismatch) as exc_info:
            db.save_split(self.make_split(["40", "59.50"]))

        assert exc_info.value.discrepancy == Money.from_major("0.50").amount
        assert db.list_splits() == []
