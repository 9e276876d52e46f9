"""
WordForge Utils Package
=======================

Logging and data helpers.
"""

from __future__ import annotations

from wordforge.utils.helpers import (
    MISSING,
    get_nested,
    has_nested,
    humanize,
    set_nested,
    snake_case,
)
from wordforge.utils.logger import LogLevel, Logger, configure_logging, get_logger

__all__ = [
    # Logging
    "Logger",
    "LogLevel",
    "get_logger",
    "configure_logging",
    # Helpers
    "MISSING",
    "get_nested",
    "has_nested",
    "set_nested",
    "humanize",
    "snake_case",
]
