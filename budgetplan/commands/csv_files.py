"""CSV import and export commands."""

import sys
from pathlib import Path

import typer
from rich.table import Table

from budgetplan.commands.common import (
    console,
    load_or_exit,
    make_planner,
    render_matrix,
    resolve_year,
    settings_or_exit,
)
from budgetplan.errors import BudgetPlanError


def render_preview(rows: list[list[str]], file_name: str) -> None:
    """Show the first rows of a CSV file as they will be uploaded."""
    if not rows:
        console.print(f"[yellow]{file_name} is empty[/yellow]")
        return

    width = max(len(row) for row in rows)
    table = Table(title=f"Preview: {file_name}", show_header=False)
    for _ in range(width):
        table.add_column(overflow="fold")
    for row in rows:
        table.add_row(*row, *([""] * (width - len(row))))
    console.print(table)


def import_command(file: str, year: int | None = None, yes: bool = False) -> None:
    """Import projections from a CSV file."""
    path = Path(file).expanduser()
    planner = make_planner()
    try:
        planner.check_import_file(path)
    except BudgetPlanError:
        sys.exit(1)

    target_year = resolve_year(year)
    load_or_exit(planner, target_year)

    try:
        rows = planner.open_import(path)
    except BudgetPlanError:
        sys.exit(1)

    render_preview(rows, path.name)
    console.print(
        "[dim]Expected columns: category, type and one amount per month. "
        "The server validates the rows.[/dim]\n"
    )

    if not yes and not typer.confirm(f"Import {path.name} into the {target_year} budget?", default=True):
        planner.close_import()
        console.print("[yellow]Import cancelled[/yellow]")
        return

    try:
        planner.import_csv()
    except BudgetPlanError:
        sys.exit(1)

    render_matrix(planner.matrix)


def export_command(year: int | None = None, output_dir: str | None = None) -> None:
    """Export the budget of a year to a CSV file."""
    settings = settings_or_exit()
    planner = make_planner(settings)

    if output_dir:
        target_dir = Path(output_dir).expanduser()
    else:
        target_dir = settings.export_dir or Path.cwd()

    try:
        planner.export_csv(target_dir, year=resolve_year(year))
    except BudgetPlanError:
        sys.exit(1)
    except OSError as e:
        console.print(f"[red]Filesystem error: {e}[/red]", style="bold")
        sys.exit(1)
