from __future__ import annotations

import logging
import os

from rich.console import Console
from rich.logging import RichHandler

LOG_LEVEL_ENV = "APISKEL_LOG_LEVEL"
DEFAULT_LEVEL = "WARNING"
LEVEL_NAMES = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


def _pick_level(level: str | None) -> str:
    name = level if level is not None else os.environ.get(LOG_LEVEL_ENV, DEFAULT_LEVEL)
    name = str(name).strip().upper()
    return name if name in LEVEL_NAMES else DEFAULT_LEVEL


def setup_logging(level: str | None = None) -> None:
    """Route apiskel's log records to stderr through a RichHandler.

    ``level`` wins over ``$APISKEL_LOG_LEVEL``; with neither set, or with a
    name logging does not know, WARNING is used. Calling this again swaps
    the handler instead of stacking a second one.
    """
    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)

    handler = RichHandler(
        console=Console(stderr=True),
        rich_tracebacks=True,
        show_path=False,
        show_time=False,
    )
    logging.basicConfig(level=_pick_level(level), format="%(message)s", handlers=[handler])
