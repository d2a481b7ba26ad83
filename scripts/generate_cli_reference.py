#!/usr/bin/env python3
"""Generate CLI reference documentation from typer app."""

import inspect
import sys
from pathlib import Path

# Add parent directory to path to import budgetplan
sys.path.insert(0, str(Path(__file__).parent.parent))

from typing import Any

from typer.models import ArgumentInfo, OptionInfo

from budgetplan.cli import app


def format_option(param_name: str, param: OptionInfo) -> str:
    """Format an option with its flags and help text."""
    flags = list(param.param_decls or [])
    if not flags:
        flags = [f"--{param_name.replace('_', '-')}"]

    parts = [f"- {', '.join(f'`{flag}`' for flag in flags)}"]

    if param.help:
        parts.append(f": {param.help}")

    if param.default is not None and param.default is not False and param.default is not ...:
        parts.append(f" (default: {param.default})")

    return "".join(parts)


def format_argument(param_name: str, param: ArgumentInfo) -> str:
    """Format a positional argument."""
    line = f"- `{param_name.upper()}`"
    if param.help:
        line += f": {param.help}"
    return line


def generate_command_doc(command_name: str, command_obj: Any) -> str:
    """Generate documentation for a single command."""
    callback = command_obj.callback

    doc = (callback.__doc__ or "No description available.").strip()

    sig = inspect.signature(callback)
    arguments = [(n, p.default) for n, p in sig.parameters.items() if isinstance(p.default, ArgumentInfo)]
    options = [(n, p.default) for n, p in sig.parameters.items() if isinstance(p.default, OptionInfo)]

    usage = " ".join(["budgetplan", command_name, *(n.upper() for n, _ in arguments)])
    if options:
        usage += " [OPTIONS]"

    lines = [
        f"### {command_name}",
        "",
        doc,
        "",
        "**Usage:**",
        "",
        "```bash",
        usage,
        "```",
        "",
    ]

    if arguments:
        lines.append("**Arguments:**")
        lines.append("")
        lines.extend(format_argument(name, param) for name, param in arguments)
        lines.append("")

    if options:
        lines.append("**Options:**")
        lines.append("")
        lines.extend(format_option(name, param) for name, param in options)
        lines.append("")

    return "\n".join(lines)


def generate_cli_reference() -> str:
    """Generate complete CLI reference documentation."""
    lines = [
        "# CLI Commands Reference",
        "",
        "Complete reference for all budgetplan commands and options.",
        "",
        "## Usage",
        "",
        "```bash",
        "budgetplan [--verbose] [COMMAND] [OPTIONS]",
        "```",
        "",
        "## Global Options",
        "",
        "| Option | Description |",
        "|--------|-------------|",
        "| `--verbose`, `-v` | Log API calls and recalculations |",
        "| `--help` | Show help message and exit |",
        "",
        "## Environment",
        "",
        "| Variable | Description |",
        "|----------|-------------|",
        "| `BUDGETPLAN_TOKEN` | Bearer token sent to the API (overrides `token` in the config file) |",
        "| `XDG_CONFIG_HOME` | Base directory of `budgetplan/config.toml` |",
        "",
        "## Commands",
        "",
    ]

    commands = sorted(
        app.registered_commands,
        key=lambda x: x.name or (x.callback.__name__ if x.callback else ""),
    )
    for command_obj in commands:
        command_name = command_obj.name or (command_obj.callback.__name__ if command_obj.callback else "unknown")
        lines.append(generate_command_doc(command_name, command_obj))
        lines.append("")

    return "\n".join(lines)


def main() -> None:
    """Generate and write CLI reference documentation."""
    output_path = Path(__file__).parent.parent / "docs" / "reference" / "cli-commands.md"
    output_path.parent.mkdir(parents=True, exist_ok=True)

    output_path.write_text(generate_cli_reference())
    print(f"Generated CLI reference at {output_path}")


if __name__ == "__main__":
    main()
