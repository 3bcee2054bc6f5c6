"""Logging setup for applications embedding webexplore."""

import logging

from rich.console import Console
from rich.logging import RichHandler

from webexplore.config import get_settings

console = Console(stderr=True)
_configured = False


def configure_logging(*, verbose: bool = False, level: str | int | None = None, force: bool = False) -> None:
    """Configure logging with Rich handler. Call once at startup.

    Args:
        verbose: Log at DEBUG and show locals in tracebacks.
        level: Explicit level; overrides ``verbose`` and ``WEBEXPLORE_LOG_LEVEL``.
        force: Reconfigure even if logging was already configured.
    """
    global _configured
    if _configured and not force:
        return

    if level is None:
        level = logging.DEBUG if verbose else get_settings().log_level

    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[
            RichHandler(
                console=console,
                rich_tracebacks=True,
                tracebacks_show_locals=verbose,
            )
        ],
        force=True,
    )

    # Suppress noisy third-party loggers
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("hishel").setLevel(logging.WARNING)

    _configured = True
