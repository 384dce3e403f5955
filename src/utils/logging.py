# src/utils/logging.py
"""Structured logging with JSON format and request context.

Provides:
- JSON-formatted log output for structured logging
- Request correlation ID and acting user via ContextVar (async-safe)
- Centralized logger configuration
"""

import json
import logging
from contextvars import ContextVar
from typing import Any

request_id_var: ContextVar[str] = ContextVar("request_id", default="")
user_id_var: ContextVar[str] = ContextVar("user_id", default="")


def set_request_id(request_id: str) -> None:
    """Set the request correlation ID for the current context."""
    request_id_var.set(request_id)


def get_request_id() -> str:
    """Get the request correlation ID for the current context.

    Returns:
        Current request ID, or empty string if not set.
    """
    return request_id_var.get()


def set_user_id(user_id: str) -> None:
    """Attach the authenticated operator id to log records of this request."""
    user_id_var.set(user_id)


class StructuredFormatter(logging.Formatter):
    """JSON formatter for structured logging.

    Outputs log records as JSON with timestamp, level, logger name,
    message, and the request_id/user_id of the current request when set.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        request_id = get_request_id()
        if request_id:
            log_data["request_id"] = request_id

        user_id = user_id_var.get()
        if user_id:
            log_data["user_id"] = user_id

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data)


def configure_structured_logging(level: int | str = logging.INFO) -> None:
    """Configure structured JSON logging for the application.

    Installs a single StreamHandler with StructuredFormatter on the root
    logger. Calling it again replaces the previous handler.

    Args:
        level: Logging level, as an int or a level name such as "DEBUG".
    """
    handler = logging.StreamHandler()
    handler.setFormatter(StructuredFormatter())
    handler.set_name("structured")

    for existing in list(logging.root.handlers):
        if existing.get_name() == "structured":
            logging.root.removeHandler(existing)

    logging.root.addHandler(handler)
    logging.root.setLevel(level.upper() if isinstance(level, str) else level)
