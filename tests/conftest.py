# tests/conftest.py
"""Shared pytest fixtures for all test modules.

Provides common fixtures for:
- Temporary data directories
- A dashboard state wired around fakes
- The FastAPI app with that state attached
"""

import os
import tempfile
from collections.abc import Generator
from unittest.mock import patch

import pytest
from fastapi import FastAPI

from src.core.state import DashboardState
from tests.helpers import FakeCommandProvider, FakeIdentityProvider, make_state


@pytest.fixture(autouse=True)
def disable_rate_limit() -> Generator[None, None, None]:
    """Turn off slowapi limits so test request counts never hit them."""
    from src.interfaces.api.security import limiter

    limiter.enabled = False
    yield
    limiter.enabled = True


@pytest.fixture
def temp_data_dir() -> Generator[str, None, None]:
    """Create a temporary data directory.

    Yields:
        Path to temporary directory.
    """
    with tempfile.TemporaryDirectory() as tmpdir:
        yield tmpdir


@pytest.fixture
def mock_env_vars() -> Generator[dict[str, str], None, None]:
    """Provide mock environment variables for testing.

    Yields:
        Dictionary of mock environment variables that were set.
    """
    mock_vars = {
        "DISCORD_CLIENT_ID": "client-id",
        "DISCORD_CLIENT_SECRET": "client-secret",
        "DISCORD_BOT_TOKEN": "bot-token",
        "DISCORD_APPLICATION_ID": "app-id",
        "SESSION_SECRET": "test-secret",
    }

    with patch.dict(os.environ, mock_vars):
        yield mock_vars


@pytest.fixture
def command_provider() -> FakeCommandProvider:
    return FakeCommandProvider()


@pytest.fixture
def identity_provider() -> FakeIdentityProvider:
    return FakeIdentityProvider()


@pytest.fixture
def dashboard_state(
    temp_data_dir: str,
    command_provider: FakeCommandProvider,
    identity_provider: FakeIdentityProvider,
) -> DashboardState:
    return make_state(temp_data_dir, command_provider, identity_provider)


@pytest.fixture
def app(dashboard_state: DashboardState) -> FastAPI:
    """A fresh app instance with the test dashboard state attached."""
    from src.interfaces.api.main import create_app

    application = create_app()
    application.state.dashboard = dashboard_state
    return application
