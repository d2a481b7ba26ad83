"""Commands for viewing and editing the budget matrix."""

import sys

import typer

from budgetplan.commands.common import (
    console,
    load_or_exit,
    make_planner,
    render_diagnostics,
    render_matrix,
    resolve_year,
)
from budgetplan.domain.matrix import BudgetCategory, find_category
from budgetplan.domain.models import CategoryKind, Year
from budgetplan.errors import AmountError, BudgetPlanError, CellError, ConflictError, FetchError
from budgetplan.formatting import format_cell, format_currency, month_label, parse_month, year_options
from budgetplan.planner import BudgetPlanner


def parse_kind(kind: str | None) -> CategoryKind | None:
    """Read an optional category kind option, exiting on bad input."""
    if kind is None:
        return None
    try:
        return CategoryKind(kind.lower())
    except ValueError:
        console.print(f"[red]Invalid kind: {kind}. Use 'income' or 'expense'[/red]")
        sys.exit(1)


def show_command(year: int | None = None) -> None:
    """Show the budget matrix for a year."""
    planner = make_planner()
    matrix = load_or_exit(planner, resolve_year(year))

    if not matrix.all_categories():
        console.print(f"[yellow]No active categories for {matrix.year}[/yellow]")
        return

    render_matrix(matrix)


def set_command(
    category: str,
    month: str,
    value: str,
    kind: str | None = None,
    year: int | None = None,
    save: bool = True,
) -> None:
    """Set one cell of the matrix and save."""
    target_kind = parse_kind(kind)
    month_number = parse_month(month)
    if month_number is None:
        console.print(f"[red]Invalid month: {month}. Use 1-12 or a month name[/red]")
        sys.exit(1)

    planner = make_planner()
    matrix = load_or_exit(planner, resolve_year(year))

    try:
        target = find_category(matrix, category, target_kind)
        result = planner.set_cell(target.category_id, month_number, target.kind, value)
    except (CellError, AmountError) as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(1)

    render_diagnostics(result)
    totals = planner.matrix.totals
    console.print(
        f"[green]✓ {target.category_name} {month_label(month_number)}: {format_currency(result.amount)}[/green]"
    )
    console.print(
        f"  Ingresos {format_currency(totals.monthly_income[month_number])}  "
        f"Gastos {format_currency(totals.monthly_expense[month_number])}  "
        f"Neto {format_currency(totals.monthly_net[month_number])}"
    )
    console.print(f"  [bold]Neto anual:[/bold] {format_currency(totals.yearly_net)}")

    if not save:
        console.print("[dim]Not saved (--no-save)[/dim]")
        return

    try:
        planner.save()
    except BudgetPlanError:
        sys.exit(1)


def _prompt_category(planner: BudgetPlanner, choice: str) -> BudgetCategory | None:
    try:
        return find_category(planner.matrix, choice)
    except CellError as e:
        if "ambiguous" not in str(e):
            console.print(f"[red]{e}[/red]\n")
            return None
    kind = typer.prompt("Income or expense? (i/e)", type=str).strip().lower()
    target_kind = CategoryKind.INCOME if kind.startswith("i") else CategoryKind.EXPENSE
    try:
        return find_category(planner.matrix, choice, target_kind)
    except CellError as e:
        console.print(f"[red]{e}[/red]\n")
        return None


def _edit_cell(planner: BudgetPlanner, category: BudgetCategory) -> None:
    month_text = typer.prompt("Month (1-12 or name)", type=str)
    month_number = parse_month(month_text)
    if month_number is None:
        console.print(f"[red]Invalid month: {month_text}[/red]\n")
        return

    current = category.amount(month_number)
    value = typer.prompt(
        f"{category.category_name} {month_label(month_number)} (current {format_currency(current)})",
        default=format_cell(current),
        show_default=False,
        type=str,
    )

    try:
        result = planner.set_cell(category.category_id, month_number, category.kind, value)
    except BudgetPlanError as e:
        console.print(f"[red]{e}[/red]\n")
        return

    render_diagnostics(result)
    console.print(f"[green]✓ {category.category_name} {month_label(month_number)}: {format_currency(result.amount)}[/green]\n")


def edit_command(year: int | None = None) -> None:
    """Interactively edit the matrix of a year."""
    planner = make_planner()
    load_or_exit(planner, resolve_year(year))

    while True:
        render_matrix(planner.matrix, planner.modified)
        choice = typer.prompt(
            "Category (name or #id), 's' to save, 'y' to change year, 'q' to quit",
            type=str,
        ).strip()

        if choice.lower() == "q":
            if planner.modified and not typer.confirm("Discard unsaved changes?", default=False):
                continue
            break

        if choice.lower() == "s":
            if not planner.modified:
                console.print("[dim]No changes to save[/dim]\n")
                continue
            try:
                planner.save()
            except FetchError:
                sys.exit(1)
            except ConflictError:
                console.print("[dim]Reload with 'y' to get the latest budget, then redo your edits[/dim]\n")
            except BudgetPlanError:
                console.print("[dim]Your edits are kept, try again with 's'[/dim]\n")
            continue

        if choice.lower() == "y":
            options = ", ".join(str(y) for y in year_options(resolve_year(None)))
            new_year = typer.prompt(f"Year ({options})", type=int, default=planner.state.year)
            try:
                planner.load(Year(new_year))
            except BudgetPlanError:
                sys.exit(1)
            continue

        category = _prompt_category(planner, choice.lstrip("#"))
        if category is not None:
            _edit_cell(planner, category)
