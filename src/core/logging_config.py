"""Logging configuration.

Why here:
- Library modules only call ``logging.getLogger(__name__)``.
- Handlers are installed once, by entry points (CLI callback, scripts).
"""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

PACKAGE_LOGGERS = ("core", "adapters", "cli")


def setup_logging(level: int | str = logging.INFO, console: Console | None = None) -> None:
    """Attach a Rich handler to the package loggers.

    Args:
        level: Logging level (e.g. ``logging.DEBUG`` or ``"INFO"``).
        console: Console to render into; stderr when omitted.
    """

    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        markup=False,
        rich_tracebacks=False,
    )
    handler.setFormatter(logging.Formatter("%(message)s", datefmt="%H:%M:%S"))

    for name in PACKAGE_LOGGERS:
        logger = logging.getLogger(name)
        logger.setLevel(level)
        # Avoid duplicate records when called again (tests, re-entry).
        if logger.handlers:
            logger.handlers.clear()
        logger.addHandler(handler)
