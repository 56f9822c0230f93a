"""SQLite storage for FinFlow records."""

import logging
import sqlite3
from decimal import Decimal
from pathlib import Path
from typing import TypeVar

from pydantic import BaseModel

from .allocator import check
from .exceptions import AllocationMismatch
from .models import BillReminder, Expense, RecurringObligation, SplitExpense
from .money import DEFAULT_EPSILON

logger = logging.getLogger(__name__)

RecordT = TypeVar("RecordT", bound=BaseModel)


class Database:
    """SQLite store holding one table per record kind.

    Each row keeps a few queryable columns next to the pydantic JSON payload,
    which is the source of truth when a record is loaded.
    """

    def __init__(self, db_path: Path | str, epsilon: Decimal = DEFAULT_EPSILON):
        """Initialize database connection."""
        self.db_path = db_path
        self.epsilon = epsilon
        self.conn = sqlite3.connect(str(db_path))
        self.conn.row_factory = sqlite3.Row
        self._init_schema()

    def _init_schema(self):
        """Initialize database schema."""
        cursor = self.conn.cursor()

        # Ledger entries
        cursor.execute(
            """
            CREATE TABLE IF NOT EXISTS expenses (
                id TEXT PRIMARY KEY,
                entry_date DATE NOT NULL,
                kind TEXT NOT NULL,
                category TEXT NOT NULL,
                payload TEXT NOT NULL
            )
        """
        )

        # Recurring obligations
        cursor.execute(
            """
            CREATE TABLE IF NOT EXISTS recurring_obligations (
                id TEXT PRIMARY KEY,
                next_due_date DATE NOT NULL,
                active INTEGER NOT NULL,
                payload TEXT NOT NULL
            )
        """
        )

        # Bill reminders
        cursor.execute(
            """
            CREATE TABLE IF NOT EXISTS bill_reminders (
                id TEXT PRIMARY KEY,
                due_date DATE NOT NULL,
                paid INTEGER NOT NULL,
                payload TEXT NOT NULL
            )
        """
        )

        # Split expenses
        cursor.execute(
            """
            CREATE TABLE IF NOT EXISTS split_expenses (
                id TEXT PRIMARY KEY,
                created DATE NOT NULL,
                settled INTEGER NOT NULL,
                payload TEXT NOT NULL
            )
        """
        )

        self.conn.commit()

    def close(self):
        """Close database connection."""
        self.conn.close()

    # ========================================================================
    # Shared helpers
    # ========================================================================

    def _fetch_one(
        self, table: str, model: type[RecordT], record_id: str
    ) -> RecordT | None:
        cursor = self.conn.cursor()
        cursor.execute(f"SELECT payload FROM {table} WHERE id = ?", (record_id,))
        row = cursor.fetchone()
        if not row:
            logger.debug(f"No row in {table} for {record_id}")
            return None
        return model.model_validate_json(row["payload"])

    def _fetch_all(
        self, table: str, model: type[RecordT], order_by: str
    ) -> list[RecordT]:
        cursor = self.conn.cursor()
        cursor.execute(f"SELECT payload FROM {table} ORDER BY {order_by}")
        return [model.model_validate_json(row["payload"]) for row in cursor.fetchall()]

    def _delete(self, table: str, record_id: str) -> bool:
        cursor = self.conn.cursor()
        cursor.execute(f"DELETE FROM {table} WHERE id = ?", (record_id,))
        self.conn.commit()
        return cursor.rowcount > 0

    def _write_expense(self, cursor: sqlite3.Cursor, expense: Expense):
        cursor.execute(
            """
            INSERT INTO expenses (id, entry_date, kind, category, payload)
            VALUES (?, ?, ?, ?, ?)
            ON CONFLICT(id) DO UPDATE SET
                entry_date = excluded.entry_date,
                kind = excluded.kind,
                category = excluded.category,
                payload = excluded.payload
            """,
            (
                expense.id,
                expense.date.isoformat(),
                expense.kind.value,
                expense.category,
                expense.model_dump_json(),
            ),
        )

    def _write_recurring(self, cursor: sqlite3.Cursor, obligation: RecurringObligation):
        cursor.execute(
            """
            INSERT INTO recurring_obligations (id, next_due_date, active, payload)
            VALUES (?, ?, ?, ?)
            ON CONFLICT(id) DO UPDATE SET
                next_due_date = excluded.next_due_date,
                active = excluded.active,
                payload = excluded.payload
            """,
            (
                obligation.id,
                obligation.next_due_date.isoformat(),
                int(obligation.active),
                obligation.model_dump_json(),
            ),
        )

    # ========================================================================
    # Ledger operations
    # ========================================================================

    def save_expense(self, expense: Expense) -> Expense:
        """Insert or replace a ledger entry."""
        self._write_expense(self.conn.cursor(), expense)
        self.conn.commit()
        return expense

    def get_expense(self, expense_id: str) -> Expense | None:
        return self._fetch_one("expenses", Expense, expense_id)

    def list_expenses(self) -> list[Expense]:
        """All ledger entries, most recent first."""
        return self._fetch_all("expenses", Expense, "entry_date DESC, rowid DESC")

    def delete_expense(self, expense_id: str) -> bool:
        return self._delete("expenses", expense_id)

    # ========================================================================
    # Recurring obligation operations
    # ========================================================================

    def save_recurring(self, obligation: RecurringObligation) -> RecurringObligation:
        """Insert or replace a recurring obligation."""
        self._write_recurring(self.conn.cursor(), obligation)
        self.conn.commit()
        return obligation

    def get_recurring(self, obligation_id: str) -> RecurringObligation | None:
        return self._fetch_one("recurring_obligations", RecurringObligation, obligation_id)

    def list_recurring(self) -> list[RecurringObligation]:
        """All recurring obligations, soonest due first."""
        return self._fetch_all(
            "recurring_obligations", RecurringObligation, "next_due_date, rowid"
        )

    def delete_recurring(self, obligation_id: str) -> bool:
        return self._delete("recurring_obligations", obligation_id)

    def apply_fulfillment(self, obligation: RecurringObligation, expense: Expense):
        """
        Persist a fulfilled obligation and its ledger entry in one transaction.

        Either both rows are written or neither is.
        """
        cursor = self.conn.cursor()
        try:
            self._write_expense(cursor, expense)
            self._write_recurring(cursor, obligation)
            self.conn.commit()
        except sqlite3.Error:
            self.conn.rollback()
            logger.error(f"Rolled back fulfilment of obligation {obligation.id}")
            raise

    # ========================================================================
    # Bill reminder operations
    # ========================================================================

    def save_bill(self, bill: BillReminder) -> BillReminder:
        """Insert or replace a bill reminder."""
        cursor = self.conn.cursor()
        cursor.execute(
            """
            INSERT INTO bill_reminders (id, due_date, paid, payload)
            VALUES (?, ?, ?, ?)
            ON CONFLICT(id) DO UPDATE SET
                due_date = excluded.due_date,
                paid = excluded.paid,
                payload = excluded.payload
            """,
            (bill.id, bill.due_date.isoformat(), int(bill.paid), bill.model_dump_json()),
        )
        self.conn.commit()
        return bill

    def get_bill(self, bill_id: str) -> BillReminder | None:
        return self._fetch_one("bill_reminders", BillReminder, bill_id)

    def list_bills(self, unpaid_only: bool = False) -> list[BillReminder]:
        """Bill reminders ordered by due date."""
        bills = self._fetch_all("bill_reminders", BillReminder, "due_date, rowid")
        if unpaid_only:
            return [bill for bill in bills if not bill.paid]
        return bills

    def delete_bill(self, bill_id: str) -> bool:
        return self._delete("bill_reminders", bill_id)

    # ========================================================================
    # Split expense operations
    # ========================================================================

    def save_split(self, split: SplitExpense) -> SplitExpense:
        """
        Insert or replace a split expense.

        Raises:
            AllocationMismatch: If the shares do not reconcile to the total
        """
        result = check(split, self.epsilon)
        if not result.valid:
            raise AllocationMismatch(
                discrepancy=result.discrepancy.amount,
                percentage_total=result.percentage_total,
            )

        cursor = self.conn.cursor()
        cursor.execute(
            """
            INSERT INTO split_expenses (id, created, settled, payload)
            VALUES (?, ?, ?, ?)
            ON CONFLICT(id) DO UPDATE SET
                settled = excluded.settled,
                payload = excluded.payload
            """,
            (
                split.id,
                split.created.isoformat(),
                int(split.settled),
                split.model_dump_json(),
            ),
        )
        self.conn.commit()
        return split

    def get_split(self, split_id: str) -> SplitExpense | None:
        return self._fetch_one("split_expenses", SplitExpense, split_id)

    def list_splits(self) -> list[SplitExpense]:
        """Split expenses, newest first."""
        return self._fetch_all("split_expenses", SplitExpense, "created DESC, rowid DESC")

    def delete_split(self, split_id: str) -> bool:
        return self._delete("split_expenses", split_id)
