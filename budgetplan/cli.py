"""CLI entry point for budgetplan."""

import logging

import typer

from budgetplan.commands.admin import config_command, init_command
from budgetplan.commands.csv_files import export_command, import_command
from budgetplan.commands.matrix import edit_command, set_command, show_command
from budgetplan.config import get_settings
from budgetplan.log import setup_logging

app = typer.Typer(
    name="budgetplan",
    help="Budget projection planner for parks administration",
    add_completion=False,
)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log API calls and recalculations"),
) -> None:
    """Budget projection planner for parks administration."""
    if verbose:
        setup_logging(logging.DEBUG)
        return
    try:
        setup_logging(get_settings().log_level)
    except ValueError:
        # Unreadable config; commands that need it report the error themselves
        setup_logging()


@app.command(name="init")
def init(
    force: bool = typer.Option(False, "--force", "-f", help="Overwrite existing config"),
) -> None:
    """Create the budgetplan configuration file."""
    init_command(force)


@app.command(name="config")
def config() -> None:
    """Show the effective settings."""
    config_command()


@app.command()
def show(
    year: int = typer.Option(None, "--year", "-y", help="Fiscal year (default: current year)"),
) -> None:
    """Show the income, expense and net projections for a year."""
    show_command(year)


@app.command(name="set")
def set_cell(
    category: str = typer.Argument(..., help="Category name or id"),
    month: str = typer.Argument(..., help="Month number (1-12) or name"),
    value: str = typer.Argument(..., help="Amount, e.g. 1,500"),
    kind: str = typer.Option(None, "--kind", "-k", help="'income' or 'expense' when the name is on both sides"),
    year: int = typer.Option(None, "--year", "-y", help="Fiscal year (default: current year)"),
    save: bool = typer.Option(True, "--save/--no-save", help="Save the matrix after the change"),
) -> None:
    """Set the projected amount of one category for one month."""
    set_command(category, month, value, kind, year, save)


@app.command()
def edit(
    year: int = typer.Option(None, "--year", "-y", help="Fiscal year (default: current year)"),
) -> None:
    """Edit the projection matrix interactively."""
    edit_command(year)


@app.command(name="import")
def import_csv(
    file: str = typer.Argument(..., help="CSV file with one row per category"),
    year: int = typer.Option(None, "--year", "-y", help="Fiscal year (default: current year)"),
    yes: bool = typer.Option(False, "--yes", help="Import without confirmation"),
) -> None:
    """Import projections from a CSV file, replacing the year's budget."""
    import_command(file, year, yes)


@app.command(name="export")
def export_csv(
    year: int = typer.Option(None, "--year", "-y", help="Fiscal year (default: current year)"),
    output: str = typer.Option(None, "--output", "-o", help="Directory for presupuesto_<year>.csv"),
) -> None:
    """Export the projections of a year to CSV."""
    export_command(year, output)


if __name__ == "__main__":
    app()
