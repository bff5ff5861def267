"""Utility helpers for famtree."""

from __future__ import annotations

import logging
from typing import Any, Mapping, Sequence

from rich.console import Console
from rich.logging import RichHandler

LOGGER_NAME = "famtree"


def get_logger() -> logging.Logger:
    """Return the package logger, configured with rich if not already."""
    logger = logging.getLogger(LOGGER_NAME)
    if not logger.handlers:
        handler = RichHandler(rich_tracebacks=True, show_path=False)
        handler.setFormatter(logging.Formatter("%(message)s"))
        logger.setLevel(logging.INFO)
        logger.addHandler(handler)
    return logger


logger = get_logger()


def set_log_level(level: str) -> None:
    """Allow callers (e.g. CLI) to adjust logging verbosity at runtime."""

    level_value = getattr(logging, level.upper(), logging.INFO)
    logger.setLevel(level_value)


console = Console()


def first_present(mapping: Mapping[str, Any], keys: Sequence[str]) -> Any:
    """Return the value of the first key found in ``mapping``."""
    for key in keys:
        if key in mapping and mapping[key] is not None:
            return mapping[key]
    return None


__all__ = ["console", "first_present", "get_logger", "logger", "set_log_level"]
