"""
Logging setup for the till services and API.

Log records are written to the console as one JSON object per line.
"""
import json
import logging
from datetime import datetime, timezone
from typing import Optional

from .settings import get_settings


class JsonFormatter(logging.Formatter):
    """Format log records as JSON strings."""

    def format(self, record: logging.LogRecord) -> str:
        log_record = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        # Structured context passed as logger.info(..., extra={"extra": {...}})
        extra = getattr(record, "extra", None)
        if isinstance(extra, dict):
            log_record.update(extra)
        if record.exc_info:
            log_record["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(log_record)


def configure_logging(level: Optional[str] = None) -> None:
    """
    Configure the root logger with a JSON console handler.

    Args:
        level: Level name; defaults to the configured TILL_LOG_LEVEL
    """
    level = level or get_settings().log_level

    logger = logging.getLogger()
    logger.setLevel(level)
    # Replace handlers left by basicConfig or an earlier call
    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(JsonFormatter())
    console_handler.setLevel(level)
    logger.addHandler(console_handler)
