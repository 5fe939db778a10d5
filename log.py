"""Logging setup with rich console output."""
from __future__ import annotations

import logging
from threading import RLock

from rich.logging import RichHandler

_lock = RLock()
_initialised = False


def _parse_level(level: str | int) -> int:
    if isinstance(level, int):
        return level
    return getattr(logging, str(level).upper(), logging.INFO)


def init_logging(level: str | int = "INFO") -> None:
    """Install the rich console handler on the root logger.

    Repeated calls only adjust the level.
    """

    global _initialised
    with _lock:
        root = logging.getLogger()
        root.setLevel(_parse_level(level))
        if _initialised:
            return
        for handler in list(root.handlers):
            root.removeHandler(handler)
        handler = RichHandler(
            show_level=True,
            show_path=False,
            rich_tracebacks=True,
            log_time_format="%Y-%m-%d %H:%M:%S",
        )
        handler.setFormatter(logging.Formatter("%(message)s"))
        root.addHandler(handler)
        _initialised = True


def get_logger(name: str | None = None) -> logging.Logger:
    with _lock:
        if not _initialised:
            init_logging()
    return logging.getLogger(name or "cost_manager")
