"""Configuration file management for budgetplan."""

import os
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import tomli_w

from budgetplan.api import DEFAULT_API_URL, get_token

DEFAULT_LOG_LEVEL = "WARNING"


@dataclass(frozen=True)
class Settings:
    """Effective settings after merging defaults, config file and environment."""

    api_url: str = DEFAULT_API_URL
    token: str | None = None
    strict_amounts: bool = False
    log_level: str = DEFAULT_LOG_LEVEL
    export_dir: Path | None = None


def get_xdg_config_home() -> Path:
    """Get XDG config directory, with fallback to ~/.config."""
    xdg_config = os.environ.get("XDG_CONFIG_HOME")
    if xdg_config:
        return Path(xdg_config)
    return Path.home() / ".config"


def get_config_path() -> Path:
    """Get the config file path (XDG compliant).

    Returns:
        Path to the config file.
    """
    return get_xdg_config_home() / "budgetplan" / "config.toml"


def create_default_config(config_path: Path | None = None) -> None:
    """Create default config file with secure permissions.

    Args:
        config_path: Path to config file. If None, uses default location.
    """
    if config_path is None:
        config_path = get_config_path()

    config_path.parent.mkdir(parents=True, exist_ok=True)

    default_config: dict[str, Any] = {
        "api_url": DEFAULT_API_URL,
        "strict_amounts": False,
        "log_level": DEFAULT_LOG_LEVEL,
    }

    save_config(default_config, config_path)


def load_config(config_path: Path | None = None) -> dict[str, Any]:
    """Load configuration from TOML file.

    Args:
        config_path: Path to config file. If None, uses default location.

    Returns:
        Configuration dictionary.

    Raises:
        FileNotFoundError: If config file doesn't exist.
    """
    if config_path is None:
        config_path = get_config_path()

    with open(config_path, "rb") as f:
        return tomllib.load(f)


def save_config(config: dict[str, Any], config_path: Path | None = None) -> None:
    """Save configuration to TOML file.

    The file may hold an API token, so it is only readable by its owner.

    Args:
        config: Configuration dictionary.
        config_path: Path to config file. If None, uses default location.
    """
    if config_path is None:
        config_path = get_config_path()

    with open(config_path, "wb") as f:
        tomli_w.dump(config, f)

    os.chmod(config_path, 0o600)


def get_settings(config_path: Path | None = None) -> Settings:
    """Build effective settings.

    A missing config file means defaults. The token environment variable
    takes precedence over a token stored in the file.

    Args:
        config_path: Path to config file. If None, uses default location.

    Returns:
        Settings instance.

    Raises:
        ValueError: If the file is not valid TOML or strict_amounts is not a boolean.
    """
    try:
        config = load_config(config_path)
    except FileNotFoundError:
        config = {}

    export_dir = config.get("export_dir")
    strict_amounts = config.get("strict_amounts", False)
    if not isinstance(strict_amounts, bool):
        raise ValueError(f"strict_amounts must be true or false, got {strict_amounts!r}")

    return Settings(
        api_url=str(config.get("api_url", DEFAULT_API_URL)),
        token=get_token() or config.get("token") or None,
        strict_amounts=strict_amounts,
        log_level=str(config.get("log_level", DEFAULT_LOG_LEVEL)),
        export_dir=Path(export_dir).expanduser() if export_dir else None,
    )
