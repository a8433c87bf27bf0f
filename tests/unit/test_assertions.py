"""Unit tests for the custom assertions."""

from __future__ import annotations

import re
from collections.abc import Generator
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from app_e2e.commands.assertions import (
    assert_toast_message,
    assert_url_contains,
    assert_url_excludes,
    wait_for_loading,
)
from app_e2e.config import E2EConfig


@pytest.fixture
def mock_expect() -> Generator[MagicMock, None, None]:
    with patch("app_e2e.commands.assertions.expect") as mock:
        assertion = mock.return_value
        assertion.to_contain_text = AsyncMock()
        assertion.to_have_url = AsyncMock()
        assertion.not_to_have_url = AsyncMock()
        assertion.to_have_count = AsyncMock()
        yield mock


class TestAssertToastMessage:
    @pytest.mark.asyncio
    async def test_checks_toast_text(
        self, mock_page: MagicMock, mock_locator: MagicMock, mock_expect: MagicMock
    ) -> None:
        await assert_toast_message(mock_page, "Registration successful")

        mock_page.locator.assert_called_once_with("[data-cy=toast-message]")
        mock_expect.assert_called_once_with(mock_locator)
        mock_expect.return_value.to_contain_text.assert_awaited_once_with("Registration successful", timeout=10000)

    @pytest.mark.asyncio
    async def test_failure_is_an_assertion_error(self, mock_page: MagicMock, mock_expect: MagicMock) -> None:
        mock_expect.return_value.to_contain_text.side_effect = AssertionError("no toast")

        with pytest.raises(AssertionError, match="no toast"):
            await assert_toast_message(mock_page, "Saved")


class TestUrlAssertions:
    @pytest.mark.asyncio
    async def test_contains_escapes_the_fragment(self, mock_page: MagicMock, mock_expect: MagicMock) -> None:
        await assert_url_contains(mock_page, "/dashboard?tab=1")

        mock_expect.assert_called_once_with(mock_page)
        pattern = mock_expect.return_value.to_have_url.await_args.args[0]
        assert isinstance(pattern, re.Pattern)
        assert pattern.search("http://localhost:3000/dashboard?tab=1")
        assert not pattern.search("http://localhost:3000/dashboardXtab=1")

    @pytest.mark.asyncio
    async def test_excludes(self, mock_page: MagicMock, mock_expect: MagicMock) -> None:
        await assert_url_excludes(mock_page, "/login")

        pattern = mock_expect.return_value.not_to_have_url.await_args.args[0]
        assert pattern.search("http://localhost:3000/login")
        assert mock_expect.return_value.not_to_have_url.await_args.kwargs["timeout"] == 10000

    @pytest.mark.asyncio
    async def test_uses_configured_timeout(
        self, mock_page: MagicMock, mock_expect: MagicMock, active_config: E2EConfig
    ) -> None:
        active_config.default_command_timeout = 2500

        await assert_url_contains(mock_page, "/profile")

        assert mock_expect.return_value.to_have_url.await_args.kwargs["timeout"] == 2500


class TestWaitForLoading:
    @pytest.mark.asyncio
    async def test_waits_for_spinner_to_disappear(self, mock_page: MagicMock, mock_expect: MagicMock) -> None:
        await wait_for_loading(mock_page)

        mock_page.locator.assert_called_once_with("[data-cy=loading-spinner]")
        mock_expect.return_value.to_have_count.assert_awaited_once_with(0, timeout=10000)
