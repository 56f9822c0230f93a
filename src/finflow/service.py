"""Service layer that composes the engine with the store.

The engine modules (recurrence, classifier, allocator, settlement) are pure;
this layer loads records, applies a transition, and hands the result to the
database as a single write.
"""

import logging
from collections.abc import Callable, Mapping, Sequence
from datetime import date, timedelta
from decimal import Decimal
from typing import Any

from .allocator import allocate, check, parse_percentage
from .analytics import Dashboard, UpcomingItem, build_dashboard, upcoming_obligations
from .classifier import classify_bill, classify_recurring
from .config import Settings
from .db import Database
from .exceptions import (
    AllocationMismatch,
    DateOrderingError,
    FinflowError,
    InvalidAmount,
    InvalidParticipant,
    RecordNotFoundError,
)
from .models import (
    Allocation,
    BillReminder,
    EntryKind,
    Expense,
    Frequency,
    Participant,
    RecurringObligation,
    SplitExpense,
    SplitStrategy,
    StatusResult,
)
from .money import Money, parse_decimal
from .recurrence import next_occurrence, occurrences_between
from .settlement import (
    mark_fulfilled,
    settle_all,
    settle_participant,
    unsettle_all,
    unsettle_participant,
)

logger = logging.getLogger(__name__)

Clock = Callable[[], date]


class FinanceService:
    """Controller for ledger entries, obligations and split expenses."""

    def __init__(self, settings: Settings, database: Database, clock: Clock = date.today):
        """Initialize the service with an injectable clock for the reference date."""
        self.settings = settings
        self.db = database
        self.clock = clock

    def today(self) -> date:
        return self.clock()

    # ========================================================================
    # Ledger
    # ========================================================================

    def add_expense(
        self,
        title: str,
        amount: Any,
        category: str,
        on: date | None = None,
        kind: EntryKind | str = EntryKind.EXPENSE,
    ) -> Expense:
        """Record an expense or income entry (dated today unless given)."""
        expense = Expense(
            title=title,
            amount=Money.from_major(amount),
            category=category,
            date=on or self.today(),
            kind=EntryKind(kind),
        )
        self.db.save_expense(expense)
        logger.info(f"Added {expense.kind.value} '{title}' ({expense.amount})")
        return expense

    def get_expense(self, expense_id: str) -> Expense:
        expense = self.db.get_expense(expense_id)
        if expense is None:
            raise RecordNotFoundError("expense", expense_id)
        return expense

    def list_expenses(self) -> list[Expense]:
        return self.db.list_expenses()

    def update_expense(
        self,
        expense_id: str,
        title: str | None = None,
        amount: Any = None,
        category: str | None = None,
        on: date | None = None,
        kind: EntryKind | str | None = None,
    ) -> Expense:
        """Edit a ledger entry. Fields left as None keep their value."""
        expense = self.get_expense(expense_id)
        updates: dict[str, Any] = {}
        if title is not None:
            updates["title"] = title
        if amount is not None:
            updates["amount"] = Money.from_major(amount)
        if category is not None:
            updates["category"] = category
        if on is not None:
            updates["date"] = on
        if kind is not None:
            updates["kind"] = EntryKind(kind)

        updated = expense.model_copy(update=updates)
        self.db.save_expense(updated)
        logger.info(
            f"Updated {updated.kind.value} '{updated.title}': {sorted(updates) or 'no changes'}"
        )
        return updated

    def delete_expense(self, expense_id: str):
        if not self.db.delete_expense(expense_id):
            raise RecordNotFoundError("expense", expense_id)

    # ========================================================================
    # Recurring obligations
    # ========================================================================

    def create_recurring(
        self,
        description: str,
        amount: Any,
        category: str,
        frequency: Frequency | str,
        start_date: date | None = None,
    ) -> RecurringObligation:
        """
        Create a recurring obligation.

        A start date today or later is the first due date. A start date in the
        past is projected forward to the first occurrence on or after today.
        """
        today = self.today()
        start = start_date or today
        frequency = Frequency.parse(frequency)
        next_due = next_occurrence(start, frequency, today - timedelta(days=1))

        obligation = RecurringObligation(
            description=description,
            amount=Money.from_major(amount),
            category=category,
            frequency=frequency,
            start_date=start,
            next_due_date=next_due,
        )
        self.db.save_recurring(obligation)
        logger.info(
            f"Created {frequency.value} obligation '{description}' due {next_due}"
        )
        return obligation

    def get_recurring(self, obligation_id: str) -> RecurringObligation:
        obligation = self.db.get_recurring(obligation_id)
        if obligation is None:
            raise RecordNotFoundError("recurring obligation", obligation_id)
        return obligation

    def list_recurring(self) -> list[RecurringObligation]:
        return self.db.list_recurring()

    def refresh_recurring(self, obligation_id: str) -> RecurringObligation:
        """
        Re-project a lapsed due date from the start date.

        Only moves ``next_due_date`` when it has fallen behind today; inactive
        obligations stay frozen.
        """
        obligation = self.get_recurring(obligation_id)
        today = self.today()
        if not obligation.active or obligation.next_due_date >= today:
            return obligation

        projected = next_occurrence(
            obligation.start_date, obligation.frequency, today - timedelta(days=1)
        )
        updated = obligation.model_copy(update={"next_due_date": projected})
        self.db.save_recurring(updated)
        logger.info(
            f"Re-projected '{obligation.description}': "
            f"{obligation.next_due_date} -> {projected}"
        )
        return updated

    def fulfill_recurring(self, obligation_id: str) -> tuple[RecurringObligation, Expense]:
        """
        Mark the current period paid.

        Writes the ledger entry and the advanced obligation atomically.

        Returns:
            Tuple of (updated obligation, new ledger entry)
        """
        obligation = self.get_recurring(obligation_id)
        if not obligation.active:
            raise FinflowError(
                f"Obligation '{obligation.description}' is inactive; activate it first"
            )

        fulfillment = mark_fulfilled(obligation, self.today())
        self.db.apply_fulfillment(fulfillment.obligation, fulfillment.expense)
        return fulfillment.obligation, fulfillment.expense

    def toggle_recurring(self, obligation_id: str) -> RecurringObligation:
        """Flip an obligation between active and inactive. Due dates are untouched."""
        obligation = self.get_recurring(obligation_id)
        updated = obligation.model_copy(update={"active": not obligation.active})
        self.db.save_recurring(updated)
        logger.info(
            f"Obligation '{obligation.description}' is now "
            f"{'active' if updated.active else 'inactive'}"
        )
        return updated

    def projected_occurrences(self, obligation_id: str, within_days: int = 90) -> list[date]:
        """
        Due dates the obligation will produce over the coming window.

        Starts from the current due date (even if overdue) and follows the
        same stepping as fulfilment. Inactive obligations project nothing.
        """
        obligation = self.get_recurring(obligation_id)
        if not obligation.active:
            return []
        return occurrences_between(
            obligation.next_due_date,
            obligation.frequency,
            obligation.next_due_date,
            self.today() + timedelta(days=within_days),
            anchor_day=obligation.start_date.day,
        )

    def recurring_status(self, obligation: RecurringObligation) -> StatusResult:
        return classify_recurring(
            obligation, self.today(), self.settings.default_reminder_lead_days
        )

    def delete_recurring(self, obligation_id: str):
        if not self.db.delete_recurring(obligation_id):
            raise RecordNotFoundError("recurring obligation", obligation_id)

    # ========================================================================
    # Bill reminders
    # ========================================================================

    def create_bill(
        self,
        name: str,
        amount: Any,
        category: str,
        due_date: date,
        reminder_lead_days: int | None = None,
    ) -> BillReminder:
        if reminder_lead_days is not None and reminder_lead_days < 0:
            raise InvalidAmount(
                f"Reminder lead days cannot be negative: {reminder_lead_days}"
            )
        bill = BillReminder(
            name=name,
            amount=Money.from_major(amount),
            category=category,
            due_date=due_date,
            reminder_lead_days=(
                self.settings.default_reminder_lead_days
                if reminder_lead_days is None
                else reminder_lead_days
            ),
        )
        self.db.save_bill(bill)
        logger.info(f"Created bill '{name}' due {due_date}")
        return bill

    def get_bill(self, bill_id: str) -> BillReminder:
        bill = self.db.get_bill(bill_id)
        if bill is None:
            raise RecordNotFoundError("bill", bill_id)
        return bill

    def list_bills(self, unpaid_only: bool = False) -> list[BillReminder]:
        return self.db.list_bills(unpaid_only=unpaid_only)

    def pay_bill(self, bill_id: str) -> BillReminder:
        """Mark a bill paid today. Paying an already paid bill changes nothing."""
        bill = self.get_bill(bill_id)
        if bill.paid:
            logger.info(f"Bill '{bill.name}' already paid on {bill.paid_date}")
            return bill

        updated = bill.model_copy(update={"paid": True, "paid_date": self.today()})
        self.db.save_bill(updated)
        logger.info(f"Paid bill '{bill.name}' ({bill.amount})")
        return updated

    def unpay_bill(self, bill_id: str) -> BillReminder:
        """Explicit reset of the paid state."""
        bill = self.get_bill(bill_id)
        updated = bill.model_copy(update={"paid": False, "paid_date": None})
        self.db.save_bill(updated)
        logger.info(f"Reset payment of bill '{bill.name}'")
        return updated

    def snooze_bill(
        self, bill_id: str, days: int | None = None, until: date | None = None
    ) -> BillReminder:
        """
        Push a bill's due date forward. The paid flag is not touched.

        Args:
            bill_id: Bill to snooze
            days: Number of days to add
            until: Explicit new due date (alternative to ``days``)

        Raises:
            DateOrderingError: If the new date is before the current due date
        """
        if (days is None) == (until is None):
            raise ValueError("Pass exactly one of days or until")

        bill = self.get_bill(bill_id)
        new_due = until if until is not None else bill.due_date + timedelta(days=days)
        if new_due < bill.due_date:
            raise DateOrderingError(
                f"Cannot snooze '{bill.name}' to {new_due}, "
                f"which is before its due date {bill.due_date}"
            )

        updated = bill.model_copy(update={"due_date": new_due})
        self.db.save_bill(updated)
        logger.info(f"Snoozed bill '{bill.name}': {bill.due_date} -> {new_due}")
        return updated

    def bill_status(self, bill: BillReminder) -> StatusResult:
        return classify_bill(bill, self.today())

    def delete_bill(self, bill_id: str):
        if not self.db.delete_bill(bill_id):
            raise RecordNotFoundError("bill", bill_id)

    # ========================================================================
    # Split expenses
    # ========================================================================

    def _allocate(
        self,
        total: Money,
        names: Sequence[str],
        strategy: SplitStrategy,
        inputs: Sequence[Any] | None,
        payer_index: int,
    ) -> tuple[Allocation, list[Participant]]:
        if not names:
            raise InvalidParticipant("A split needs at least one participant")
        if any(not name.strip() for name in names):
            raise InvalidParticipant("Participant names cannot be empty")

        allocation = allocate(
            total,
            len(names),
            strategy,
            inputs=inputs,
            payer_index=payer_index,
            epsilon=self.settings.reconciliation_epsilon,
        )
        participants = [
            Participant(
                name=name,
                share=share,
                share_input=(
                    parse_decimal(inputs[index])
                    if inputs is not None and strategy != SplitStrategy.EQUAL
                    else None
                ),
                is_payer=index == payer_index,
            )
            for index, (name, share) in enumerate(zip(names, allocation.shares))
        ]
        return allocation, participants

    def _raise_mismatch(self, allocation: Allocation):
        raise AllocationMismatch(
            discrepancy=allocation.discrepancy.amount,
            percentage_total=allocation.percentage_total,
        )

    def preview_split(
        self,
        total: Any,
        names: Sequence[str],
        strategy: SplitStrategy | str = SplitStrategy.EQUAL,
        inputs: Sequence[Any] | None = None,
        payer_index: int = 0,
    ) -> Allocation:
        """Run the allocator without saving anything."""
        allocation, _ = self._allocate(
            Money.from_major(total), names, SplitStrategy.parse(strategy), inputs, payer_index
        )
        return allocation

    def create_split(
        self,
        title: str,
        total: Any,
        category: str,
        names: Sequence[str],
        strategy: SplitStrategy | str = SplitStrategy.EQUAL,
        inputs: Sequence[Any] | None = None,
        payer_index: int = 0,
    ) -> SplitExpense:
        """
        Create and save a split expense.

        Raises:
            AllocationMismatch: If the shares do not reconcile (nothing is saved)
        """
        strategy = SplitStrategy.parse(strategy)
        total_amount = Money.from_major(total)
        allocation, participants = self._allocate(
            total_amount, names, strategy, inputs, payer_index
        )
        if not allocation.valid:
            self._raise_mismatch(allocation)

        split = SplitExpense(
            title=title,
            total_amount=total_amount,
            category=category,
            strategy=strategy,
            participants=participants,
            created=self.today(),
        )
        self.db.save_split(split)
        logger.info(
            f"Created {strategy.value} split '{title}' ({total_amount}) "
            f"between {len(participants)} participants"
        )
        return split

    def get_split(self, split_id: str) -> SplitExpense:
        split = self.db.get_split(split_id)
        if split is None:
            raise RecordNotFoundError("split expense", split_id)
        return split

    def list_splits(self) -> list[SplitExpense]:
        return self.db.list_splits()

    def update_share(self, split_id: str, index: int, value: Any) -> tuple[SplitExpense, Allocation]:
        """Edit one participant's percentage or custom amount. See ``update_shares``."""
        return self.update_shares(split_id, {index: value})

    def update_shares(
        self, split_id: str, edits: Mapping[int, Any]
    ) -> tuple[SplitExpense, Allocation]:
        """
        Edit several participants' percentages or custom amounts at once.

        Participants not named in ``edits`` are not rebalanced. The edited
        record is saved only when it reconciles; otherwise it is returned
        unsaved together with the failing validation so the caller can show
        the discrepancy and retry with a complete set of edits.

        Args:
            split_id: Split to edit
            edits: Mapping of participant index to new percentage or amount
        """
        split = self.get_split(split_id)
        if split.strategy == SplitStrategy.EQUAL:
            raise FinflowError("Shares of an equal split cannot be edited individually")
        if not edits:
            raise InvalidParticipant("No share edits given")
        for index in edits:
            if not 0 <= index < len(split.participants):
                raise InvalidParticipant(
                    f"Participant {index} does not exist in split {split.id}"
                )

        participants = [p.model_copy() for p in split.participants]
        if split.strategy == SplitStrategy.PERCENTAGE:
            # Every share follows its own percentage; only rounding goes to the payer
            percentages = [p.share_input or Decimal("0") for p in participants]
            for index, value in edits.items():
                percentages[index] = parse_percentage(value)
            allocation = allocate(
                split.total_amount,
                len(participants),
                SplitStrategy.PERCENTAGE,
                inputs=percentages,
                payer_index=split.payer_index,
                epsilon=self.settings.reconciliation_epsilon,
            )
            participants = [
                p.model_copy(update={"share": share, "share_input": percentage})
                for p, share, percentage in zip(
                    participants, allocation.shares, percentages
                )
            ]
        else:
            for index, value in edits.items():
                share = Money.from_major(value)
                participants[index] = participants[index].model_copy(
                    update={"share": share, "share_input": share.amount}
                )

        updated = split.model_copy(update={"participants": participants})
        result = check(updated, self.settings.reconciliation_epsilon)
        if result.valid:
            self.db.save_split(updated)
            logger.info(f"Updated shares {sorted(edits)} of split '{split.title}'")
        else:
            logger.info(
                f"Share edit leaves split '{split.title}' unreconciled "
                f"(discrepancy {result.discrepancy}); not saved"
            )
        return updated, result

    def reallocate(
        self,
        split_id: str,
        strategy: SplitStrategy | str | None = None,
        total: Any = None,
        names: Sequence[str] | None = None,
        inputs: Sequence[Any] | None = None,
        payer_index: int | None = None,
    ) -> SplitExpense:
        """
        Fully recompute shares after a strategy, total or participant change.

        Settlement flags are kept for participants whose name is unchanged.

        Raises:
            AllocationMismatch: If the new allocation does not reconcile
        """
        split = self.get_split(split_id)
        new_strategy = SplitStrategy.parse(strategy) if strategy is not None else split.strategy
        new_total = Money.from_major(total) if total is not None else split.total_amount
        new_names = list(names) if names is not None else [p.name for p in split.participants]
        if payer_index is None:
            payer_name = split.participants[split.payer_index].name if split.participants else None
            payer_index = new_names.index(payer_name) if payer_name in new_names else 0
        if inputs is None and new_strategy != SplitStrategy.EQUAL:
            if new_strategy != split.strategy or names is not None:
                raise InvalidParticipant(
                    f"{new_strategy.value} split needs one input per participant"
                )
            inputs = [p.share_input for p in split.participants]

        allocation, participants = self._allocate(
            new_total, new_names, new_strategy, inputs, payer_index
        )
        if not allocation.valid:
            self._raise_mismatch(allocation)

        previously_settled = {p.name for p in split.participants if p.settled}
        participants = [
            p.model_copy(update={"settled": p.name in previously_settled})
            for p in participants
        ]
        updated = split.model_copy(
            update={
                "strategy": new_strategy,
                "total_amount": new_total,
                "participants": participants,
            }
        )
        self.db.save_split(updated)
        logger.info(f"Reallocated split '{split.title}' ({new_strategy.value})")
        return updated

    def settle_participant(self, split_id: str, index: int) -> SplitExpense:
        return self.db.save_split(settle_participant(self.get_split(split_id), index))

    def unsettle_participant(self, split_id: str, index: int) -> SplitExpense:
        return self.db.save_split(unsettle_participant(self.get_split(split_id), index))

    def settle_all(self, split_id: str) -> SplitExpense:
        return self.db.save_split(settle_all(self.get_split(split_id)))

    def unsettle_all(self, split_id: str) -> SplitExpense:
        return self.db.save_split(unsettle_all(self.get_split(split_id)))

    def delete_split(self, split_id: str):
        if not self.db.delete_split(split_id):
            raise RecordNotFoundError("split expense", split_id)

    # ========================================================================
    # Analytics
    # ========================================================================

    def dashboard(self) -> Dashboard:
        return build_dashboard(
            expenses=self.db.list_expenses(),
            bills=self.db.list_bills(),
            recurring=self.db.list_recurring(),
            reference_date=self.today(),
            monthly_income=Money.from_major(self.settings.monthly_income),
            monthly_budget=Money.from_major(self.settings.monthly_budget),
            lead_days=self.settings.default_reminder_lead_days,
        )

    def upcoming_obligations(self, within_days: int = 30) -> list[UpcomingItem]:
        return upcoming_obligations(
            bills=self.db.list_bills(unpaid_only=True),
            recurring=self.db.list_recurring(),
            reference_date=self.today(),
            within_days=within_days,
            lead_days=self.settings.default_reminder_lead_days,
        )
