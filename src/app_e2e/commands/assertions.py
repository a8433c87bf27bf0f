"""Custom assertions.

Built on Playwright's `expect`, which retries until the command timeout
instead of checking once.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from playwright.async_api import expect

from app_e2e.config import get_config
from app_e2e.decorators import command
from app_e2e.selectors import LOADING_SPINNER, TOAST_MESSAGE

if TYPE_CHECKING:
    from playwright.async_api import Page


def _timeout() -> int:
    return get_config().default_command_timeout


@command
async def assert_toast_message(page: Page, message: str) -> None:
    """Assert that the toast contains `message`."""
    await expect(page.locator(TOAST_MESSAGE)).to_contain_text(message, timeout=_timeout())


@command
async def assert_url_contains(page: Page, url_part: str) -> None:
    """Assert that the current URL includes `url_part`."""
    await expect(page).to_have_url(re.compile(re.escape(url_part)), timeout=_timeout())


@command
async def assert_url_excludes(page: Page, url_part: str) -> None:
    """Assert that the current URL does not include `url_part`."""
    await expect(page).not_to_have_url(re.compile(re.escape(url_part)), timeout=_timeout())


@command
async def wait_for_loading(page: Page) -> None:
    """Wait until the loading spinner is gone from the DOM."""
    await expect(page.locator(LOADING_SPINNER)).to_have_count(0, timeout=_timeout())
