"""E2E test fixtures for app-e2e.

Provides the browser page, network interceptor and upload fixtures.
Every browser or API fixture depends on `app_available`, which skips the
test when the application at base_url does not answer.
"""

from __future__ import annotations

import logging
import re
from collections.abc import AsyncGenerator, Generator
from pathlib import Path
from typing import TYPE_CHECKING

import httpx
import pytest
import pytest_asyncio
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import expect

from app_e2e.browser.manager import BrowserManager
from app_e2e.commands.network import NetworkInterceptor
from app_e2e.config import E2EConfig, get_config
from app_e2e.utils.logging import setup_logging
from app_e2e.utils.retry import with_retry
from tests.e2e.helpers.constants import APP_PROBE_TIMEOUT_SECONDS
from tests.e2e.helpers.fixture_files import ensure_fixture_files

if TYPE_CHECKING:
    from playwright.async_api import Page

logger = logging.getLogger(__name__)


@pytest.hookimpl(wrapper=True)
def pytest_runtest_makereport(
    item: pytest.Item,
    call: pytest.CallInfo[None],
) -> Generator[None, pytest.TestReport, pytest.TestReport]:
    """Expose each phase's report on the item (rep_setup, rep_call)."""
    report = yield
    setattr(item, f"rep_{report.when}", report)
    return report


def _screenshot_path(folder: Path, nodeid: str) -> Path:
    name = re.sub(r"[^A-Za-z0-9._-]+", "-", nodeid).strip("-")
    return folder / f"{name} (failed).png"


@pytest.fixture(scope="session")
def e2e_config() -> E2EConfig:
    """Resolved suite configuration, with the command log enabled.

    Retrying assertions wait up to default_command_timeout.
    """
    setup_logging()
    config = get_config()
    expect.set_options(timeout=config.default_command_timeout)
    return config


@pytest_asyncio.fixture(scope="session", loop_scope="session")
async def app_available(e2e_config: E2EConfig) -> None:
    """Skip when the application does not answer at base_url."""

    async def ping() -> httpx.Response:
        async with httpx.AsyncClient(timeout=APP_PROBE_TIMEOUT_SECONDS) as client:
            return await client.get(e2e_config.base_url)

    try:
        await with_retry(ping, max_attempts=2, backoff_base=0.5)
    except httpx.HTTPError as e:
        pytest.skip(f"Application not reachable at {e2e_config.base_url}: {e}")


@pytest_asyncio.fixture(scope="session", loop_scope="session")
async def browser_manager(app_available: None) -> AsyncGenerator[BrowserManager]:
    """Browser shared by the whole session; closed at the end."""
    manager = BrowserManager.get_instance()
    yield manager
    await manager.close()


@pytest.fixture(scope="session")
def fixture_files(e2e_config: E2EConfig) -> dict[str, Path]:
    """Upload fixtures, generated on first use."""
    return ensure_fixture_files(e2e_config.fixtures_folder)


@pytest_asyncio.fixture(loop_scope="session")
async def page(
    browser_manager: BrowserManager,
    e2e_config: E2EConfig,
    request: pytest.FixtureRequest,
) -> AsyncGenerator[Page]:
    """A page in a fresh context, so no cookies or storage leak between tests.

    A screenshot is saved to screenshots_folder when the test fails.
    """
    context = await browser_manager.new_context()
    page = await context.new_page()
    try:
        yield page
    finally:
        report = getattr(request.node, "rep_call", None)
        if report is not None and report.failed and e2e_config.screenshot_on_run_failure:
            path = _screenshot_path(e2e_config.screenshots_folder, request.node.nodeid)
            path.parent.mkdir(parents=True, exist_ok=True)
            try:
                await page.screenshot(path=str(path), full_page=True)
                logger.info("Failure screenshot saved to %s", path)
            except PlaywrightError as e:
                logger.warning("Could not take failure screenshot: %s", e)
        await browser_manager.close_context(context)


@pytest_asyncio.fixture(loop_scope="session")
async def network(page: Page) -> AsyncGenerator[NetworkInterceptor]:
    """Network interceptor bound to the test's page."""
    interceptor = NetworkInterceptor(page)
    yield interceptor
    await interceptor.clear()
