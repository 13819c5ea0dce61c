"""Logging configuration helpers (structlog)."""

from __future__ import annotations

import logging
import os
import sys

import structlog

LOG_LEVEL_ENV = "VPERP_LOG_LEVEL"


def _resolve_level(raw: str) -> int | None:
    raw = raw.strip()
    if raw.isdigit():
        return int(raw)
    level = logging.getLevelName(raw.upper())
    return level if isinstance(level, int) else None


def configure_structlog() -> int:
    """
    Configure structlog for the engine and return the effective level.

    - Logs go to stderr; accepted operations log at INFO, rejections at DEBUG.
    - Default level is WARNING (override with `VPERP_LOG_LEVEL`, by name or number).
    """
    raw = os.getenv(LOG_LEVEL_ENV, "WARNING")
    level = _resolve_level(raw)
    if level is None:
        print(f"Invalid {LOG_LEVEL_ENV}={raw!r}; using WARNING", file=sys.__stderr__)
        level = logging.WARNING

    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.PrintLoggerFactory(file=sys.__stderr__),
        cache_logger_on_first_use=True,
    )
    return level
