"""Observability configuration with Pydantic Logfire."""

import logging

from fastapi import FastAPI

from src.config import settings

logger = logging.getLogger(__name__)


def setup_logfire(app: FastAPI) -> None:
    """Configure Logfire tracing for the dashboard.

    Only activates if LOGFIRE_TOKEN environment variable is set.
    Instruments the FastAPI app and every outbound httpx call
    (Discord OAuth, command listing, bot REST).
    """
    if not settings.logfire_token:
        return

    try:
        import logfire

        logfire.configure(send_to_logfire="if-token-present")
        logfire.instrument_fastapi(app)
        logfire.instrument_httpx()
    except Exception as e:
        # Log but don't fail - observability is optional
        logger.warning("Failed to configure Logfire: %s", str(e))
