"""
Logging for the event_ingest package.

All loggers hang below the ``event_ingest`` logger, which carries the single
stream handler. The level comes from INGEST_LOG_LEVEL (or LOG_LEVEL); with
INGEST_DEBUG=1 or DEBUG=1 it drops to DEBUG. The CLI can override it with
``configure_logging("DEBUG")``.
"""

from __future__ import annotations

import logging
import os
from typing import Optional


PACKAGE_LOGGER = "event_ingest"
LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
_TRUE_VALUES = {"1", "true", "yes", "on"}


def _env_flag(name: str) -> bool:
    return os.getenv(name, "0").strip().lower() in _TRUE_VALUES


def _resolve_level() -> str:
    for name in ("INGEST_LOG_LEVEL", "LOG_LEVEL"):
        env_level = os.getenv(name)
        if env_level:
            return env_level.strip().upper()
    if _env_flag("INGEST_DEBUG") or _env_flag("DEBUG"):
        return "DEBUG"
    return "INFO"


def configure_logging(level: Optional[str] = None) -> logging.Logger:
    """Attach the package handler once and (re)apply the level."""
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    if not package_logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        package_logger.addHandler(handler)
    package_logger.setLevel((level or _resolve_level()).upper())
    return package_logger


def get_logger(name: str) -> logging.Logger:
    """Logger under the package namespace; bare names get the package prefix."""
    if not logging.getLogger(PACKAGE_LOGGER).handlers:
        configure_logging()
    if name != PACKAGE_LOGGER and not name.startswith(PACKAGE_LOGGER + "."):
        name = f"{PACKAGE_LOGGER}.{name}"
    return logging.getLogger(name)


def is_debug() -> bool:
    return logging.getLogger(PACKAGE_LOGGER).isEnabledFor(logging.DEBUG)
