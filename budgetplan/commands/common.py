"""Helpers shared by the budgetplan commands."""

import sys
from datetime import datetime

from rich.console import Console
from rich.table import Table

from budgetplan.config import Settings, get_settings
from budgetplan.domain.matrix import BudgetCategory, BudgetMatrix, ParseResult
from budgetplan.domain.models import MONTHS, Amount, Year
from budgetplan.errors import BudgetPlanError
from budgetplan.formatting import format_currency, month_label
from budgetplan.planner import BudgetPlanner, ConsoleNotifier

console = Console()


def resolve_year(year: int | None) -> Year:
    """Use the given year, or the current one."""
    return Year(year if year is not None else datetime.now().year)


def settings_or_exit() -> Settings:
    """Read the effective settings, exiting with status 1 on a bad config file."""
    try:
        return get_settings()
    except (OSError, ValueError) as e:
        console.print(f"[red]Could not read config: {e}[/red]", style="bold")
        sys.exit(1)


def make_planner(settings: Settings | None = None) -> BudgetPlanner:
    """Create a planner from the effective settings."""
    if settings is None:
        settings = settings_or_exit()
    return BudgetPlanner(
        settings.api_url,
        token=settings.token,
        notifier=ConsoleNotifier(console),
        strict_amounts=settings.strict_amounts,
    )


def load_or_exit(planner: BudgetPlanner, year: Year) -> BudgetMatrix:
    """Load a year's matrix, exiting with status 1 on failure."""
    try:
        return planner.load(year)
    except BudgetPlanError:
        console.print(f"[dim]API: {planner.base_url}[/dim]")
        sys.exit(1)


def _amount_cell(amount: Amount) -> str:
    return format_currency(amount) if amount else "[dim]-[/dim]"


def _category_row(category: BudgetCategory) -> list[str]:
    name = f"{category.category_name} [dim]#{category.category_id}[/dim]"
    cells = [_amount_cell(category.amount(month)) for month in MONTHS]
    return [name, *cells, f"[bold]{format_currency(category.total_year)}[/bold]"]


def _totals_row(label: str, monthly: dict, yearly: Amount, style: str) -> list[str]:
    cells = [f"[{style}]{format_currency(monthly[month])}[/{style}]" for month in MONTHS]
    return [f"[bold {style}]{label}[/bold {style}]", *cells, f"[bold {style}]{format_currency(yearly)}[/bold {style}]"]


def _net_row(matrix: BudgetMatrix) -> list[str]:
    totals = matrix.totals
    cells = []
    for month in MONTHS:
        net = totals.monthly_net[month]
        style = "green" if net >= 0 else "red"
        cells.append(f"[{style}]{format_currency(net)}[/{style}]")
    style = "green" if totals.yearly_net >= 0 else "red"
    return ["[bold]Utilidad / Pérdida[/bold]", *cells, f"[bold {style}]{format_currency(totals.yearly_net)}[/bold {style}]"]


def render_matrix(matrix: BudgetMatrix, modified: bool = False) -> None:
    """Print the matrix with income, expense and net sections."""
    title = f"Presupuesto {matrix.year}"
    if modified:
        title += " [yellow](unsaved changes)[/yellow]"

    table = Table(title=title)
    table.add_column("Categoría", style="white", no_wrap=True)
    for month in MONTHS:
        table.add_column(month_label(month, short=True), justify="right")
    table.add_column("Total", justify="right")

    totals = matrix.totals

    for category in matrix.income_categories:
        table.add_row(*_category_row(category))
    table.add_row(*_totals_row("Total Ingresos", totals.monthly_income, totals.yearly_income, "green"))
    table.add_section()

    for category in matrix.expense_categories:
        table.add_row(*_category_row(category))
    table.add_row(*_totals_row("Total Gastos", totals.monthly_expense, totals.yearly_expense, "red"))
    table.add_section()

    table.add_row(*_net_row(matrix))

    console.print(table)


def render_diagnostics(result: ParseResult) -> None:
    """Tell the user when a typed value was not read as written."""
    if result.coerced:
        console.print(
            f"[yellow]'{result.raw}' was read as {format_currency(result.amount)} ({result.reason})[/yellow]"
        )
