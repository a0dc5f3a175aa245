"""
Logging bootstrap for programs built on switchyard.

The library itself only creates module loggers (logging.getLogger(__name__)) and never
configures logging on import. Programs call configure_logging() once, typically from a
`before` hook after reading a --debug flag.
"""
import logging

from rich.console import Console
from rich.logging import RichHandler

from .utils import Unset, coalesce


def configure_logging(level=logging.INFO, *, console=Unset):
    """
    Route the root logger through a rich handler on the diagnostic console.

    Calling it again only adjusts the level; a second handler is never attached, so
    repeated calls (tests, long-running shells) keep log lines single.

    Parameters
    - level: logging level for the root logger and the handler.
    - console: rich Console to write to; defaults to a stderr console.

    Returns
    - the RichHandler in use.
    """
    root = logging.getLogger()
    root.setLevel(level)

    for handler in root.handlers:
        if isinstance(handler, RichHandler):
            handler.setLevel(level)
            return handler

    handler = RichHandler(
        console=coalesce(console, Console(stderr=True)),
        show_path=False,
        rich_tracebacks=True,
    )
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter("%(name)s | %(message)s"))
    root.addHandler(handler)
    return handler


__all__ = (
    "configure_logging",
)
