"""CLI for FinFlow using Typer."""

import logging
import sys
from contextlib import contextmanager
from datetime import date

import typer
from rich.console import Console
from rich.table import Table

from .categories import DEFAULT_CATEGORIES, FALLBACK_CATEGORY, lookup
from .classifier import describe
from .config import Settings, load_settings
from .db import Database
from .exceptions import AllocationMismatch, FinflowError
from .models import EntryKind, ObligationStatus, SplitExpense, StatusResult
from .money import Money
from .service import FinanceService
from .ui import select_category_interactive

app = typer.Typer(
    name="finflow",
    help="Track expenses, recurring obligations, bills and shared expenses",
)
expense_app = typer.Typer(help="Ledger entries (expenses and income)")
recurring_app = typer.Typer(help="Recurring obligations")
bill_app = typer.Typer(help="Bill reminders")
split_app = typer.Typer(help="Shared expenses split between participants")

app.add_typer(expense_app, name="expense")
app.add_typer(recurring_app, name="recurring")
app.add_typer(bill_app, name="bill")
app.add_typer(split_app, name="split")

console = Console()

STATUS_STYLES = {
    ObligationStatus.PAID: "green",
    ObligationStatus.OVERDUE: "bold red",
    ObligationStatus.DUE_SOON: "yellow",
    ObligationStatus.UPCOMING: "cyan",
    ObligationStatus.INACTIVE: "dim",
}


def setup_logging(verbose: bool = False, level: str = "WARNING"):
    """Setup logging configuration."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


@contextmanager
def open_service(verbose: bool = False):
    """Yield a FinanceService, reporting FinFlow errors and closing the database."""
    db = None
    try:
        settings = load_settings()
        setup_logging(verbose, settings.log_level)
        db = Database(settings.database_path, epsilon=settings.reconciliation_epsilon)
        yield FinanceService(settings, db, clock=settings.today)
    except FinflowError as e:
        console.print(f"\n[bold red]Error:[/bold red] {e}")
        if verbose:
            raise
        sys.exit(1)
    finally:
        if db is not None:
            db.close()


def parse_date(value: str | None) -> date | None:
    if value is None:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError as e:
        raise typer.BadParameter(f"Expected a YYYY-MM-DD date, got {value!r}") from e


def format_money(money: Money, settings: Settings, use_color: bool = True) -> str:
    """
    Format money with the configured currency code.

    Negative amounts use parentheses: (INR 85.02)
    """
    text = f"{settings.currency_code} {abs(money).to_display_string()}"
    if money.is_negative():
        return f"([red]{text}[/red])" if use_color else f"({text})"
    return text


def format_status(result: StatusResult) -> str:
    style = STATUS_STYLES[result.status]
    return f"[{style}]{describe(result)}[/{style}]"


def format_category(name: str) -> str:
    return f"{lookup(name).icon} {name}"


# ============================================================================
# Ledger
# ============================================================================


@expense_app.command("add")
def expense_add(
    title: str = typer.Argument(..., help="What the money was spent on"),
    amount: str = typer.Argument(..., help="Amount, e.g. 12.50"),
    category: str | None = typer.Option(None, "--category", "-c", help="Category name"),
    on: str | None = typer.Option(None, "--date", "-d", help="Entry date (YYYY-MM-DD)"),
    income: bool = typer.Option(False, "--income", help="Record as income"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
):
    """Add an expense (or income with --income)."""
    entry_date = parse_date(on)
    with open_service(verbose) as service:
        if category is None:
            category = (
                select_category_interactive(DEFAULT_CATEGORIES, title)
                if sys.stdin.isatty()
                else None
            ) or FALLBACK_CATEGORY

        expense = service.add_expense(
            title=title,
            amount=amount,
            category=category,
            on=entry_date,
            kind=EntryKind.INCOME if income else EntryKind.EXPENSE,
        )
        console.print(
            f"[green]✓ Added {expense.kind.value}[/green] {expense.title} "
            f"{format_money(expense.amount, service.settings)} [dim]({expense.id})[/dim]"
        )


@expense_app.command("list")
def expense_list(verbose: bool = typer.Option(False, "--verbose", "-v")):
    """List ledger entries, most recent first."""
    with open_service(verbose) as service:
        expenses = service.list_expenses()
        if not expenses:
            console.print("[yellow]No expenses recorded.[/yellow]")
            return

        table = Table(title="Ledger", show_header=True, header_style="bold magenta")
        table.add_column("Date")
        table.add_column("Title", style="cyan")
        table.add_column("Category", style="yellow")
        table.add_column("Amount", justify="right")
        table.add_column("ID", style="dim")

        for entry in expenses:
            amount = entry.amount if entry.kind == EntryKind.INCOME else -entry.amount
            table.add_row(
                entry.date.isoformat(),
                entry.title,
                format_category(entry.category),
                format_money(amount, service.settings),
                entry.id,
            )
        console.print(table)


@expense_app.command("edit")
def expense_edit(
    expense_id: str,
    title: str | None = typer.Option(None, "--title", "-t"),
    amount: str | None = typer.Option(None, "--amount", "-a"),
    category: str | None = typer.Option(None, "--category", "-c"),
    on: str | None = typer.Option(None, "--date", "-d", help="Entry date (YYYY-MM-DD)"),
    kind: str | None = typer.Option(None, "--kind", help="expense or income"),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
):
    """Edit a ledger entry. Only the given fields change."""
    entry_date = parse_date(on)
    if kind is not None and kind not in {k.value for k in EntryKind}:
        raise typer.BadParameter(f"Expected expense or income, got {kind!r}")
    with open_service(verbose) as service:
        expense = service.update_expense(
            expense_id,
            title=title,
            amount=amount,
            category=category,
            on=entry_date,
            kind=kind,
        )
        console.print(
            f"[green]✓ Updated {expense.kind.value}[/green] {expense.title} "
            f"{format_money(expense.amount, service.settings)} on {expense.date}"
        )


@expense_app.command("delete")
def expense_delete(
    expense_id: str, verbose: bool = typer.Option(False, "--verbose", "-v")
):
    """Delete a ledger entry."""
    with open_service(verbose) as service:
        service.delete_expense(expense_id)
        console.print(f"[green]✓ Deleted expense {expense_id}[/green]")


# ============================================================================
# Recurring obligations
# ============================================================================


@recurring_app.command("add")
def recurring_add(
    description: str = typer.Argument(...),
    amount: str = typer.Argument(...),
    frequency: str = typer.Option(
        "monthly", "--frequency", "-f", help="daily, weekly, monthly, quarterly or yearly"
    ),
    category: str = typer.Option(FALLBACK_CATEGORY, "--category", "-c"),
    start: str | None = typer.Option(None, "--start", help="First due date (YYYY-MM-DD)"),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
):
    """Add a recurring obligation."""
    start_date = parse_date(start)
    with open_service(verbose) as service:
        obligation = service.create_recurring(
            description=description,
            amount=amount,
            category=category,
            frequency=frequency,
            start_date=start_date,
        )
        console.print(
            f"[green]✓ Added {obligation.frequency.value} obligation[/green] "
            f"{obligation.description}, next due {obligation.next_due_date} "
            f"[dim]({obligation.id})[/dim]"
        )


@recurring_app.command("list")
def recurring_list(verbose: bool = typer.Option(False, "--verbose", "-v")):
    """List recurring obligations with their status."""
    with open_service(verbose) as service:
        obligations = service.list_recurring()
        if not obligations:
            console.print("[yellow]No recurring obligations.[/yellow]")
            return

        table = Table(
            title="Recurring Obligations", show_header=True, header_style="bold magenta"
        )
        table.add_column("Description", style="cyan")
        table.add_column("Frequency")
        table.add_column("Amount", justify="right")
        table.add_column("Next Due")
        table.add_column("Status")
        table.add_column("ID", style="dim")

        for obligation in obligations:
            table.add_row(
                obligation.description,
                obligation.frequency.value,
                format_money(obligation.amount, service.settings),
                obligation.next_due_date.isoformat(),
                format_status(service.recurring_status(obligation)),
                obligation.id,
            )
        console.print(table)


@recurring_app.command("fulfill")
def recurring_fulfill(
    obligation_id: str, verbose: bool = typer.Option(False, "--verbose", "-v")
):
    """Pay the current period: records an expense and advances the due date."""
    with open_service(verbose) as service:
        obligation, expense = service.fulfill_recurring(obligation_id)
        console.print(
            f"[green]✓ Recorded {format_money(expense.amount, service.settings)}[/green] "
            f"for {obligation.description}; next due {obligation.next_due_date}"
        )


@recurring_app.command("refresh")
def recurring_refresh(
    obligation_id: str, verbose: bool = typer.Option(False, "--verbose", "-v")
):
    """Move a lapsed due date forward to the current period."""
    with open_service(verbose) as service:
        obligation = service.refresh_recurring(obligation_id)
        console.print(
            f"[green]✓ {obligation.description}[/green] next due {obligation.next_due_date}"
        )


@recurring_app.command("schedule")
def recurring_schedule(
    obligation_id: str,
    within: int = typer.Option(90, "--within", help="Days ahead to project"),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
):
    """List the due dates an obligation will produce over the coming days."""
    with open_service(verbose) as service:
        obligation = service.get_recurring(obligation_id)
        dates = service.projected_occurrences(obligation_id, within_days=within)
        if not dates:
            console.print(f"[yellow]No upcoming dates for {obligation.description}.[/yellow]")
            return

        table = Table(
            title=f"{obligation.description} ({obligation.frequency.value})",
            header_style="bold magenta",
        )
        table.add_column("Due")
        table.add_column("Amount", justify="right")
        for due in dates:
            table.add_row(due.isoformat(), format_money(obligation.amount, service.settings))
        console.print(table)


@recurring_app.command("toggle")
def recurring_toggle(
    obligation_id: str, verbose: bool = typer.Option(False, "--verbose", "-v")
):
    """Pause or resume a recurring obligation."""
    with open_service(verbose) as service:
        obligation = service.toggle_recurring(obligation_id)
        state = "active" if obligation.active else "inactive"
        console.print(f"[green]✓ {obligation.description} is now {state}[/green]")


@recurring_app.command("delete")
def recurring_delete(
    obligation_id: str, verbose: bool = typer.Option(False, "--verbose", "-v")
):
    """Delete a recurring obligation."""
    with open_service(verbose) as service:
        service.delete_recurring(obligation_id)
        console.print(f"[green]✓ Deleted recurring obligation {obligation_id}[/green]")


# ============================================================================
# Bill reminders
# ============================================================================


@bill_app.command("add")
def bill_add(
    name: str = typer.Argument(...),
    amount: str = typer.Argument(...),
    due: str = typer.Option(..., "--due", help="Due date (YYYY-MM-DD)"),
    category: str = typer.Option("Bills & Utilities", "--category", "-c"),
    lead_days: int | None = typer.Option(
        None, "--lead-days", help="Days before the due date to start reminding"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
):
    """Add a bill reminder."""
    due_date = parse_date(due)
    assert due_date is not None
    with open_service(verbose) as service:
        bill = service.create_bill(
            name=name,
            amount=amount,
            category=category,
            due_date=due_date,
            reminder_lead_days=lead_days,
        )
        console.print(
            f"[green]✓ Added bill[/green] {bill.name} due {bill.due_date}: "
            f"{describe(service.bill_status(bill))} [dim]({bill.id})[/dim]"
        )


@bill_app.command("list")
def bill_list(
    unpaid: bool = typer.Option(False, "--unpaid", help="Hide paid bills"),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
):
    """List bill reminders with their status."""
    with open_service(verbose) as service:
        bills = service.list_bills(unpaid_only=unpaid)
        if not bills:
            console.print("[yellow]No bills.[/yellow]")
            return

        table = Table(title="Bills", show_header=True, header_style="bold magenta")
        table.add_column("Name", style="cyan")
        table.add_column("Category", style="yellow")
        table.add_column("Amount", justify="right")
        table.add_column("Due")
        table.add_column("Status")
        table.add_column("ID", style="dim")

        for bill in bills:
            table.add_row(
                bill.name,
                format_category(bill.category),
                format_money(bill.amount, service.settings),
                bill.due_date.isoformat(),
                format_status(service.bill_status(bill)),
                bill.id,
            )
        console.print(table)


@bill_app.command("pay")
def bill_pay(bill_id: str, verbose: bool = typer.Option(False, "--verbose", "-v")):
    """Mark a bill as paid today."""
    with open_service(verbose) as service:
        bill = service.pay_bill(bill_id)
        console.print(f"[green]✓ {bill.name} paid on {bill.paid_date}[/green]")


@bill_app.command("unpay")
def bill_unpay(bill_id: str, verbose: bool = typer.Option(False, "--verbose", "-v")):
    """Reset a bill to unpaid."""
    with open_service(verbose) as service:
        bill = service.unpay_bill(bill_id)
        console.print(
            f"[green]✓ {bill.name} marked unpaid:[/green] "
            f"{format_status(service.bill_status(bill))}"
        )


@bill_app.command("snooze")
def bill_snooze(
    bill_id: str,
    days: int | None = typer.Option(None, "--days", help="Days to push the due date"),
    until: str | None = typer.Option(None, "--until", help="New due date (YYYY-MM-DD)"),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
):
    """Push a bill's due date forward."""
    if (days is None) == (until is None):
        raise typer.BadParameter("Pass exactly one of --days or --until")
    new_date = parse_date(until)
    with open_service(verbose) as service:
        bill = service.snooze_bill(bill_id, days=days, until=new_date)
        console.print(f"[green]✓ {bill.name} now due {bill.due_date}[/green]")


@bill_app.command("delete")
def bill_delete(bill_id: str, verbose: bool = typer.Option(False, "--verbose", "-v")):
    """Delete a bill reminder."""
    with open_service(verbose) as service:
        service.delete_bill(bill_id)
        console.print(f"[green]✓ Deleted bill {bill_id}[/green]")


# ============================================================================
# Split expenses
# ============================================================================


def display_split(split: SplitExpense, settings: Settings):
    """Display a split expense in a table, with a reconciliation check."""
    state = "[green]settled[/green]" if split.settled else "[yellow]pending[/yellow]"
    console.print(f"\n[bold]{split.title}[/bold] ({split.strategy.value}, {state})")
    console.print(f"  Total: {format_money(split.total_amount, settings)}")
    console.print(f"  ID: [dim]{split.id}[/dim]")

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("#", style="dim", width=3)
    table.add_column("Participant", style="cyan")
    table.add_column("Input", justify="right")
    table.add_column("Share", justify="right")
    table.add_column("Paid", justify="center")

    for index, participant in enumerate(split.participants):
        name = participant.name + (" [dim](payer)[/dim]" if participant.is_payer else "")
        table.add_row(
            str(index),
            name,
            "—" if participant.share_input is None else str(participant.share_input),
            format_money(participant.share, settings),
            "✓" if participant.settled else "",
        )
    console.print(table)

    discrepancy = split.discrepancy()
    if discrepancy.is_zero():
        console.print("  [green]✓ Shares match the total[/green]")
    else:
        console.print(
            f"  [red]✗ Shares differ from the total by "
            f"{format_money(discrepancy, settings, use_color=False)}[/red]"
        )


@split_app.command("add")
def split_add(
    title: str = typer.Argument(...),
    total: str = typer.Argument(...),
    participants: list[str] = typer.Option(
        ..., "--participant", "-p", help="Participant name (repeat; first is the payer)"
    ),
    strategy: str = typer.Option("equal", "--strategy", "-s", help="equal, percentage or custom"),
    inputs: list[str] | None = typer.Option(
        None, "--input", "-i", help="Percentage or amount per participant (repeat)"
    ),
    payer: int = typer.Option(0, "--payer", help="Index of the paying participant"),
    category: str = typer.Option(FALLBACK_CATEGORY, "--category", "-c"),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
):
    """Create a split expense. Nothing is saved unless the shares reconcile."""
    with open_service(verbose) as service:
        try:
            split = service.create_split(
                title=title,
                total=total,
                category=category,
                names=participants,
                strategy=strategy,
                inputs=inputs or None,
                payer_index=payer,
            )
        except AllocationMismatch as e:
            console.print(f"\n[bold red]Not saved:[/bold red] {e}")
            console.print(f"  Discrepancy: {e.discrepancy}")
            sys.exit(1)
        display_split(split, service.settings)


@split_app.command("list")
def split_list(verbose: bool = typer.Option(False, "--verbose", "-v")):
    """List split expenses."""
    with open_service(verbose) as service:
        splits = service.list_splits()
        if not splits:
            console.print("[yellow]No split expenses.[/yellow]")
            return

        table = Table(title="Split Expenses", show_header=True, header_style="bold magenta")
        table.add_column("Title", style="cyan")
        table.add_column("Strategy")
        table.add_column("Total", justify="right")
        table.add_column("Outstanding", justify="right")
        table.add_column("State")
        table.add_column("ID", style="dim")

        for split in splits:
            table.add_row(
                split.title,
                split.strategy.value,
                format_money(split.total_amount, service.settings),
                format_money(split.outstanding(), service.settings),
                "[green]settled[/green]" if split.settled else "[yellow]pending[/yellow]",
                split.id,
            )
        console.print(table)


@split_app.command("show")
def split_show(split_id: str, verbose: bool = typer.Option(False, "--verbose", "-v")):
    """Show a split expense and its participants."""
    with open_service(verbose) as service:
        display_split(service.get_split(split_id), service.settings)


def parse_share_edit(text: str) -> tuple[int, str]:
    """Parse an ``INDEX=VALUE`` share edit."""
    index, sep, value = text.partition("=")
    if not sep or not value.strip():
        raise typer.BadParameter(f"Expected INDEX=VALUE, got {text!r}")
    try:
        return int(index), value.strip()
    except ValueError as e:
        raise typer.BadParameter(f"Participant index must be a number: {text!r}") from e


@split_app.command("preview")
def split_preview(
    total: str = typer.Argument(...),
    participants: list[str] = typer.Option(..., "--participant", "-p"),
    strategy: str = typer.Option("equal", "--strategy", "-s"),
    inputs: list[str] | None = typer.Option(None, "--input", "-i"),
    payer: int = typer.Option(0, "--payer"),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
):
    """Show how a total would be split, without saving anything."""
    with open_service(verbose) as service:
        result = service.preview_split(
            total, participants, strategy, inputs or None, payer_index=payer
        )

        table = Table(title="Preview", header_style="bold magenta")
        table.add_column("Participant", style="cyan")
        table.add_column("Share", justify="right")
        for name, share in zip(participants, result.shares):
            table.add_row(name, format_money(share, service.settings))
        console.print(table)

        if result.valid:
            console.print("  [green]✓ Shares match the total[/green]")
        else:
            console.print(
                f"  [red]✗ Unreconciled by "
                f"{format_money(result.discrepancy, service.settings, use_color=False)}[/red]"
            )


@split_app.command("set-share")
def split_set_share(
    split_id: str,
    edits: list[str] = typer.Argument(..., help="One or more INDEX=VALUE edits"),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
):
    """Change participants' percentages or amounts (no automatic rebalancing).

    Give every edit needed to rebalance in one call, e.g. ``0=60 1=40``.
    """
    changes = dict(parse_share_edit(text) for text in edits)
    with open_service(verbose) as service:
        split, result = service.update_shares(split_id, changes)
        display_split(split, service.settings)
        if not result.valid:
            if result.percentage_total is not None:
                console.print(
                    f"\n[bold red]Not saved:[/bold red] percentages sum to "
                    f"{result.percentage_total.normalize():f}%, need 100%"
                )
            else:
                console.print(
                    f"\n[bold red]Not saved:[/bold red] adjust the other shares by "
                    f"{format_money(result.discrepancy, service.settings, use_color=False)}"
                )
            sys.exit(1)


@split_app.command("reallocate")
def split_reallocate(
    split_id: str,
    strategy: str | None = typer.Option(None, "--strategy", "-s"),
    total: str | None = typer.Option(None, "--total"),
    participants: list[str] | None = typer.Option(None, "--participant", "-p"),
    inputs: list[str] | None = typer.Option(None, "--input", "-i"),
    payer: int | None = typer.Option(None, "--payer"),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
):
    """Recompute all shares after changing the strategy, total or participants."""
    with open_service(verbose) as service:
        try:
            split = service.reallocate(
                split_id,
                strategy=strategy,
                total=total,
                names=participants or None,
                inputs=inputs or None,
                payer_index=payer,
            )
        except AllocationMismatch as e:
            console.print(f"\n[bold red]Not saved:[/bold red] {e}")
            sys.exit(1)
        display_split(split, service.settings)


@split_app.command("settle")
def split_settle(
    split_id: str, index: int, verbose: bool = typer.Option(False, "--verbose", "-v")
):
    """Mark one participant as paid."""
    with open_service(verbose) as service:
        display_split(service.settle_participant(split_id, index), service.settings)


@split_app.command("unsettle")
def split_unsettle(
    split_id: str, index: int, verbose: bool = typer.Option(False, "--verbose", "-v")
):
    """Mark one participant as unpaid."""
    with open_service(verbose) as service:
        display_split(service.unsettle_participant(split_id, index), service.settings)


@split_app.command("settle-all")
def split_settle_all(split_id: str, verbose: bool = typer.Option(False, "--verbose", "-v")):
    """Settle up: mark every participant as paid."""
    with open_service(verbose) as service:
        display_split(service.settle_all(split_id), service.settings)


@split_app.command("unsettle-all")
def split_unsettle_all(
    split_id: str, verbose: bool = typer.Option(False, "--verbose", "-v")
):
    """Reset every participant to unpaid."""
    with open_service(verbose) as service:
        display_split(service.unsettle_all(split_id), service.settings)


@split_app.command("delete")
def split_delete(split_id: str, verbose: bool = typer.Option(False, "--verbose", "-v")):
    """Delete a split expense."""
    with open_service(verbose) as service:
        service.delete_split(split_id)
        console.print(f"[green]✓ Deleted split expense {split_id}[/green]")


# ============================================================================
# Overview
# ============================================================================


@app.command()
def dashboard(
    within: int = typer.Option(30, "--within", help="Days ahead to list obligations"),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
):
    """Show this month's totals, spending by category and upcoming obligations."""
    with open_service(verbose) as service:
        settings = service.settings
        summary = service.dashboard()

        console.print(f"\n[bold]Dashboard for {summary.month}[/bold]")
        console.print(f"  Income:   {format_money(summary.monthly_income + summary.other_income, settings)}")
        console.print(f"  Expenses: {format_money(summary.total_expenses, settings)}")
        console.print(f"  Balance:  {format_money(summary.balance, settings)}")
        console.print(f"  Savings:  {summary.savings_rate}%")
        if summary.budget_used_percent is not None:
            console.print(
                f"  Budget:   {summary.budget_used_percent}% used, "
                f"{format_money(summary.budget_remaining, settings)} remaining"
            )
        console.print(
            f"  Obligations: [bold red]{summary.overdue_count} overdue[/bold red], "
            f"[yellow]{summary.due_soon_count} due soon[/yellow]"
        )

        if summary.by_category:
            table = Table(title="Spending by Category", header_style="bold magenta")
            table.add_column("Category", style="yellow")
            table.add_column("Amount", justify="right")
            table.add_column("%", justify="right")
            for row in summary.by_category:
                table.add_row(
                    format_category(row.category),
                    format_money(row.amount, settings),
                    f"{row.percentage}",
                )
            console.print(table)

        if summary.recent:
            table = Table(title="Recent Entries", header_style="bold magenta")
            table.add_column("Date")
            table.add_column("Title", style="cyan")
            table.add_column("Category", style="yellow")
            table.add_column("Amount", justify="right")
            for entry in summary.recent:
                amount = entry.amount if entry.kind == EntryKind.INCOME else -entry.amount
                table.add_row(
                    entry.date.isoformat(),
                    entry.title,
                    format_category(entry.category),
                    format_money(amount, settings),
                )
            console.print(table)

        upcoming = service.upcoming_obligations(within_days=within)
        if upcoming:
            table = Table(title="Upcoming Obligations", header_style="bold magenta")
            table.add_column("Due")
            table.add_column("Name", style="cyan")
            table.add_column("Kind", style="dim")
            table.add_column("Amount", justify="right")
            table.add_column("Status")
            for item in upcoming:
                table.add_row(
                    item.due_date.isoformat(),
                    item.name,
                    item.kind,
                    format_money(item.amount, settings),
                    format_status(item.status),
                )
            console.print(table)


@app.command()
def categories():
    """List the built-in categories."""
    table = Table(title="Categories", header_style="bold magenta")
    table.add_column("Icon")
    table.add_column("Name", style="cyan")
    table.add_column("Color", style="dim")
    for category in DEFAULT_CATEGORIES:
        table.add_row(category.icon, category.name, category.color)
    console.print(table)


if __name__ == "__main__":
    app()
