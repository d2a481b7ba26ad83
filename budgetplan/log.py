"""Logging setup for budgetplan.

Diagnostics go to stderr through rich so they never mix with the tables
and prompts written to stdout.
"""

import logging

from rich.console import Console
from rich.logging import RichHandler

LOG_FORMAT = "%(message)s"


def setup_logging(level: str | int = logging.WARNING) -> None:
    """Configure the root logger with a rich handler.

    Args:
        level: Level name (e.g. "INFO") or number. Unknown names fall back to WARNING.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.WARNING

    handler = RichHandler(console=Console(stderr=True), show_path=False, rich_tracebacks=True)
    logging.basicConfig(level=level, format=LOG_FORMAT, datefmt="[%X]", handlers=[handler], force=True)

    # requests' connection pool is chatty at DEBUG
    logging.getLogger("urllib3").setLevel(max(level, logging.INFO))
