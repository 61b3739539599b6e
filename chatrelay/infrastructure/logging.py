"""Logging setup for chatrelay."""

import json
import logging
import os
import sys
from datetime import UTC, datetime
from typing import Any

DEFAULT_FORMAT = "%(levelname)s | %(asctime)s | %(name)s | %(message)s"


class JsonFormatter(logging.Formatter):
    """Format log records as JSON for machine consumption."""

    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        payload: dict[str, object] = {
            "timestamp": datetime.fromtimestamp(record.created, UTC).isoformat(),
            "level": record.levelname,
            "name": record.name,
            "message": record.getMessage(),
        }
        message_id = getattr(record, "message_id", None)
        if message_id is not None:
            payload["message_id"] = message_id
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, separators=(",", ":"))


def setup_logging(
    level: str | None = None,
    format_string: str | None = None,
    logger_name: str = "chatrelay",
) -> logging.Logger:
    """
    Set up logging for chatrelay.

    Args:
        level: Logging level (defaults to the LOG_LEVEL env var, then INFO)
        format_string: Optional custom format string
        logger_name: Name for the logger

    Returns:
        Configured logger

    Example:
        logger = setup_logging(level="DEBUG")
        logger.debug("Debug message")
    """
    level = level or os.getenv("LOG_LEVEL", "INFO")

    handler = logging.StreamHandler(sys.stdout)
    if os.getenv("LOG_FORMAT", "console").lower() == "json":
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter(format_string or DEFAULT_FORMAT))

    logger = logging.getLogger(logger_name)
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    # Avoid adding duplicate handlers
    if not logger.handlers:
        logger.addHandler(handler)

    return logger


class LoggerAdapter(logging.LoggerAdapter):
    """
    Logger adapter that adds context to log messages.

    Example:
        logger = LoggerAdapter(logging.getLogger(__name__), {"message_id": "msg-00000001"})
        logger.info("Fragment received")  # Record carries message_id
    """

    def process(self, msg: str, kwargs: Any) -> tuple[str, Any]:
        """Process the logging message and add extra context."""
        extra = kwargs.get("extra", {})
        extra.update(self.extra)
        kwargs["extra"] = extra
        return msg, kwargs
