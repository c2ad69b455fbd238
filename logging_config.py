from __future__ import annotations

import logging
import time
from logging.config import dictConfig
from typing import Any, Iterable, Sequence

from settings import get_settings

_DEFAULT_EXTRA_KEYS = (
    "farm_id",
    "sensor_id",
    "sensor_type",
    "unit",
    "reason",
    "status_code",
    "path",
)

_configured = False


class ContextualFormatter(logging.Formatter):
    """Formatter that appends known ``extra`` fields as ``key=value`` pairs."""

    converter = time.gmtime

    def __init__(
        self,
        fmt: str | None = None,
        datefmt: str | None = None,
        style: str = "%",
        extra_keys: Iterable[str] | None = None,
    ) -> None:
        super().__init__(fmt=fmt, datefmt=datefmt, style=style)
        self._extra_keys: Sequence[str] = tuple(extra_keys or _DEFAULT_EXTRA_KEYS)

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        context_parts = [
            f"{key}={getattr(record, key)}"
            for key in self._extra_keys
            if getattr(record, key, None) is not None
        ]
        if context_parts:
            return f"{message} | {' '.join(context_parts)}"
        return message


def build_logging_config(log_level: str | int) -> dict[str, Any]:
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "contextual": {
                "()": "logging_config.ContextualFormatter",
                "fmt": "%(asctime)sZ | %(levelname)s | %(name)s | %(message)s",
                "datefmt": "%Y-%m-%dT%H:%M:%S",
                "style": "%",
                "extra_keys": list(_DEFAULT_EXTRA_KEYS),
            }
        },
        "handlers": {
            "default": {
                "class": "logging.StreamHandler",
                "level": log_level,
                "formatter": "contextual",
            }
        },
        "root": {"handlers": ["default"], "level": log_level},
    }


def configure_logging(level: str | int | None = None) -> None:
    """Configure application-wide logging once per process."""
    global _configured
    if _configured:
        return

    log_level = level if level is not None else get_settings().log_level
    dictConfig(build_logging_config(log_level))

    _configured = True
