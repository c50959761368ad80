"""Logging configuration for the validation tooling."""

from __future__ import annotations

import logging


def setup_logging(level: int | str = logging.INFO) -> logging.Logger:
    """Setup basic logging and return the package logger."""
    if isinstance(level, str):
        level = logging.getLevelName(level.strip().upper())
        if not isinstance(level, int):
            level = logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    return logging.getLogger("common")
