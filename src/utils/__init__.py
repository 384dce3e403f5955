# src/utils/__init__.py
"""Logging and observability helpers for the dashboard."""

from src.utils.logging import (
    configure_structured_logging,
    get_request_id,
    set_request_id,
    set_user_id,
)
from src.utils.observability import setup_logfire

__all__ = [
    "setup_logfire",
    "set_request_id",
    "get_request_id",
    "set_user_id",
    "configure_structured_logging",
]
