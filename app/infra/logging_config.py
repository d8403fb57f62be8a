"""Process-wide logging setup."""

from __future__ import annotations

import logging
import logging.config
from typing import Optional

LOGGER_ROOT = "app"

_configured = False


def setup_logging(level: Optional[str] = None) -> None:
    """Configure console logging for the ``app`` logger tree. Safe to call twice."""
    global _configured
    if _configured:
        return
    if level is None:
        from app.config import get_settings

        level = get_settings().log_level
    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "default": {
                    "format": "%(asctime)s | %(levelname)-8s | %(name)s - %(message)s",
                    "datefmt": "%Y-%m-%d %H:%M:%S",
                }
            },
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "formatter": "default",
                }
            },
            "loggers": {
                LOGGER_ROOT: {
                    "handlers": ["console"],
                    "level": level.upper(),
                    "propagate": False,
                }
            },
        }
    )
    _configured = True


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return a logger under the ``app`` namespace."""
    if not name:
        return logging.getLogger(LOGGER_ROOT)
    if name.startswith(LOGGER_ROOT + ".") or name == LOGGER_ROOT:
        return logging.getLogger(name)
    return logging.getLogger(f"{LOGGER_ROOT}.{name}")
