"""
LoanLens Logging

Every module logs through ``logging.getLogger(__name__)``; this module
attaches one console handler to each top-level package logger so the
whole tree shares a format.
"""

import json
import logging
from datetime import datetime, timezone
from typing import Optional

from .config import LogFormat, LoggingConfig, get_config

PACKAGE_LOGGERS = ("agents", "core", "storage", "cli")

TEXT_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


class JSONFormatter(logging.Formatter):
    """JSON log formatter for structured logging in production"""

    def format(self, record):
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "message": record.getMessage(),
            "logger": record.name,
        }

        # Add exception info if present
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        # Add extra fields
        if hasattr(record, "analysis_id"):
            log_data["analysis_id"] = record.analysis_id
        if hasattr(record, "command"):
            log_data["command"] = record.command

        return json.dumps(log_data)


def setup_logging(config: Optional[LoggingConfig] = None) -> logging.Logger:
    """Configure logging based on environment"""
    config = config or get_config().logging
    level = getattr(logging, config.level, logging.INFO)

    handler = logging.StreamHandler()
    if config.format == LogFormat.JSON:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(TEXT_FORMAT))

    for name in PACKAGE_LOGGERS:
        logger = logging.getLogger(name)
        logger.setLevel(level)
        # Remove existing handlers
        logger.handlers = []
        logger.addHandler(handler)
        logger.propagate = False

    return logging.getLogger(PACKAGE_LOGGERS[0])
