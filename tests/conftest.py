"""Pytest configuration and shared fixtures for app-e2e tests.

This module provides common fixtures used across unit and e2e tests.
"""

from __future__ import annotations

import time
from collections.abc import Generator
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

import app_e2e.config as config_module
from app_e2e.config import E2EConfig
from app_e2e.models import SessionState

# ============================================================================
# Session Fixtures
# ============================================================================


@pytest.fixture
def session_state() -> SessionState:
    """Create a cached session for testing.

    Returns:
        A valid SessionState with one cookie and one localStorage entry.
    """
    return SessionState(
        session_id="abc123",
        cookies=[
            {
                "name": "session",
                "value": "session456",
                "domain": "localhost",
                "path": "/",
            }
        ],
        origins=[
            {
                "origin": "http://localhost:3000",
                "localStorage": [{"name": "authToken", "value": "token123"}],
            }
        ],
        expires_at=int(time.time()) + 3600,
        created_at=int(time.time()),
    )


@pytest.fixture
def expired_session_state() -> SessionState:
    """Create an expired session for testing."""
    return SessionState(
        session_id="expired123",
        expires_at=int(time.time()) - 3600,  # Expired 1 hour ago
        created_at=int(time.time()) - 7200,
    )


# ============================================================================
# Keyring Fixtures
# ============================================================================


@pytest.fixture
def mock_keyring() -> Generator[MagicMock, None, None]:
    """Create a mock keyring for testing credential storage.

    Yields:
        A mocked keyring module.
    """
    with patch("app_e2e.auth.credentials.keyring") as mock:
        mock.get_password.return_value = None
        yield mock


# ============================================================================
# Configuration Fixtures
# ============================================================================


@pytest.fixture
def test_config(tmp_path: Path) -> E2EConfig:
    """Configuration with every folder under tmp_path."""
    return E2EConfig(
        fixtures_folder=tmp_path / "fixtures",
        screenshots_folder=tmp_path / "screenshots",
        videos_folder=tmp_path / "videos",
        snapshots_folder=tmp_path / "snapshots",
        tasks={"db:seed": "npm run db:seed"},
    )


@pytest.fixture
def active_config(test_config: E2EConfig, monkeypatch: pytest.MonkeyPatch) -> E2EConfig:
    """Install test_config as the process-wide configuration."""
    monkeypatch.setattr(config_module, "_config", test_config)
    return test_config


# ============================================================================
# Browser Fixtures
# ============================================================================


@pytest.fixture
def mock_locator() -> MagicMock:
    """Create a mock Playwright locator with async actions."""
    locator = MagicMock()
    for name in ("click", "fill", "check", "press_sequentially", "set_input_files", "screenshot", "evaluate"):
        setattr(locator, name, AsyncMock())
    return locator


@pytest.fixture
def mock_page(mock_locator: MagicMock) -> MagicMock:
    """Create a mock Playwright page.

    page.locator() always returns mock_locator; page.context has async
    cookie and storage methods.
    """
    page = MagicMock()
    page.url = "http://localhost:3000/"
    for name in ("goto", "reload", "evaluate", "add_init_script", "add_script_tag", "screenshot", "route", "unroute"):
        setattr(page, name, AsyncMock())
    page.locator = MagicMock(return_value=mock_locator)

    page.context.add_cookies = AsyncMock()
    page.context.clear_cookies = AsyncMock()
    page.context.add_init_script = AsyncMock()
    page.context.storage_state = AsyncMock(return_value={"cookies": [], "origins": []})
    return page
