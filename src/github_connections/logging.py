from __future__ import annotations

import logging
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

# Log records and live progress bars render through this one console.
_CONSOLE = Console(stderr=True)


def get_console() -> Console:
    return _CONSOLE


def build_handler() -> RichHandler:
    return RichHandler(console=get_console(), rich_tracebacks=True, markup=False, show_path=False)


def configure_logging(level: int = logging.INFO) -> None:
    """Configure Rich logging once per process."""
    if logging.getLogger().handlers:
        return

    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[build_handler()],
    )
    # httpx logs every request URL at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)


def get_logger(name: Optional[str] = None) -> logging.Logger:
    configure_logging()
    return logging.getLogger(name)


__all__ = ["build_handler", "configure_logging", "get_console", "get_logger"]
