"""CLI console and logging helpers with optional Rich support.

This module intentionally avoids module-level imports of Rich so
bootstrap paths (``--help``, ``--version``) and script dispatch remain
functional even when Rich is not installed.
"""

from __future__ import annotations

import logging
import sys
from typing import Any

from cmdtree.exceptions import CmdtreeError

LOG_LEVELS: tuple[str, ...] = ("debug", "info", "warning", "error")

_HANDLER_NAME = "cmdtree-console"


def _load_rich_console_class() -> type[Any]:
    """Return ``rich.console.Console`` class or raise ``CmdtreeError``."""
    try:
        from rich.console import Console
    except ModuleNotFoundError as exc:
        raise CmdtreeError(
            "rich is not installed. Install with: pip install rich",
        ) from exc
    return Console


def get_rich_console() -> Any:
    """Create a Rich console instance targeting stderr."""
    console_class = _load_rich_console_class()
    return console_class(stderr=True)


class _ConsoleProxy:
    """Minimal ``print``-compatible proxy with Rich fallback."""

    def print(self, *objects: object) -> None:
        """Render with Rich when available, else plain stderr print."""
        try:
            rich_console = get_rich_console()
        except CmdtreeError:
            print(*objects, file=sys.stderr)
            return
        rich_console.print(*objects)


console = _ConsoleProxy()


# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

def _build_handler() -> logging.Handler:
    try:
        from rich.logging import RichHandler
    except ModuleNotFoundError:
        handler: logging.Handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(
            logging.Formatter("%(levelname)s %(name)s: %(message)s"),
        )
        return handler
    return RichHandler(
        console=get_rich_console(),
        show_path=False,
        markup=False,
    )


def configure_logging(level: str | None) -> None:
    """Attach the console handler to the ``cmdtree`` logger.

    With *level* ``None`` only warnings and errors are shown, which
    keeps the operational INFO events of a run silent.  Calling this
    again replaces the previously installed handler.
    """
    logger = logging.getLogger("cmdtree")
    for existing in list(logger.handlers):
        if existing.get_name() == _HANDLER_NAME:
            logger.removeHandler(existing)

    handler = _build_handler()
    handler.set_name(_HANDLER_NAME)
    logger.addHandler(handler)
    logger.setLevel((level or "warning").upper())


def escape_markup(text: str) -> str:
    """Escape Rich markup in *text*; identity when Rich is unavailable."""
    try:
        from rich.markup import escape
    except ModuleNotFoundError:
        return text
    return escape(text)
