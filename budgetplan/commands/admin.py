"""Admin commands for configuration."""

import sys

from budgetplan.api import TOKEN_ENV_VAR
from budgetplan.commands.common import console, settings_or_exit
from budgetplan.config import create_default_config, get_config_path


def init_command(force: bool = False) -> None:
    """Create the budgetplan configuration file."""
    config_path = get_config_path()

    if config_path.exists() and not force:
        console.print("[red]Initialization failed:[/red]", style="bold")
        console.print(f"  Config already exists: {config_path}")
        console.print("\n[yellow]Use 'budgetplan init --force' to overwrite[/yellow]")
        sys.exit(1)

    try:
        console.print(f"[cyan]Creating config file at {config_path}...[/cyan]")
        create_default_config(config_path)
    except OSError as e:
        console.print(f"[red]Filesystem error: {e}[/red]", style="bold")
        sys.exit(1)

    console.print("[green]✓[/green] Config file created (permissions: 600)")
    console.print("\n[green]Initialization complete![/green]", style="bold")
    console.print("[dim]Set 'api_url' to your parks administration API[/dim]")
    console.print(f"[dim]Put the API token in {TOKEN_ENV_VAR} or in the config file as 'token'[/dim]")


def config_command() -> None:
    """Show the effective settings."""
    settings = settings_or_exit()

    console.print(f"[bold]Config file:[/bold] {get_config_path()}")
    console.print(f"  api_url:        {settings.api_url}")
    console.print(f"  token:          {'set' if settings.token else '[dim]not set[/dim]'}")
    console.print(f"  strict_amounts: {settings.strict_amounts}")
    console.print(f"  log_level:      {settings.log_level}")
    console.print(f"  export_dir:     {settings.export_dir or '[dim]current directory[/dim]'}")
