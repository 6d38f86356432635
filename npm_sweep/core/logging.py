# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Structured logging for npm-sweep.

Text output for interactive runs, JSON output for CI and audit trails.
Everything goes to stderr so plan reports on stdout stay machine-readable.
"""

import logging
import json
import sys
from datetime import datetime, timezone
from typing import Any

# Attributes every LogRecord carries; anything else came in through `extra`
_STANDARD_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime"}


class JSONFormatter(logging.Formatter):
    """One JSON object per record, `extra` fields flattened in."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        entry.update(
            (key, value) for key, value in vars(record).items()
            if key not in _STANDARD_ATTRS
        )
        return json.dumps(entry, default=str)


class TextFormatter(logging.Formatter):

    def __init__(self):
        super().__init__(
            fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S"
        )


def get_logger(name: str, log_level: str = "INFO", log_format: str = "text") -> logging.Logger:
    """
    Logger with a single stderr handler.

    Calling again for the same name replaces the handler instead of adding one.
    """
    logger = logging.getLogger(name)
    logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(JSONFormatter() if log_format == "json" else TextFormatter())
    logger.handlers = [handler]
    return logger


def log_event(logger: logging.Logger, event: str, level: str = "INFO", **kwargs: Any) -> None:
    """Log `event` as the message with `kwargs` attached as record fields."""
    getattr(logger, level.lower())(event, extra=kwargs)


def get_service_logger(service_name: str) -> logging.Logger:
    """Get logger for a component (registry, executor, actions, ...)."""
    from npm_sweep.core.config import get_config
    config = get_config()
    return get_logger(
        f"npm_sweep.service.{service_name}",
        log_level=config.log_level,
        log_format=config.log_format
    )
