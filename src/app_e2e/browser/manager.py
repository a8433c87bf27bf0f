"""Browser manager for Playwright automation.

Provides a singleton Playwright/browser instance. Every test gets a
fresh context so cookies and storage never leak between tests.
"""

from __future__ import annotations

import asyncio
import atexit
import logging
from typing import TYPE_CHECKING, Any, ClassVar

from playwright.async_api import async_playwright

from app_e2e.browser.config import get_headless_mode
from app_e2e.config import get_config

if TYPE_CHECKING:
    from playwright.async_api import Browser, BrowserContext, Page, Playwright

    from app_e2e.models import Viewport

logger = logging.getLogger(__name__)


class BrowserManager:
    """Manages the Playwright browser instance as singleton.

    Contexts are created per test and closed by the caller (or by
    close(), which closes all contexts still open).

    Class Attributes:
        _instance: Singleton instance
        _playwright: Playwright driver
        _browser: Playwright Browser instance
        _contexts: Contexts created and not yet closed
        _lock: Async lock for browser startup
    """

    _instance: ClassVar[BrowserManager | None] = None
    _playwright: Playwright | None = None
    _browser: Browser | None = None
    _contexts: ClassVar[list[BrowserContext]] = []
    _lock: asyncio.Lock | None = None

    def __init__(self) -> None:
        """Initialize browser manager.

        Should not be called directly. Use get_instance() instead.
        """
        pass

    @classmethod
    def get_instance(cls) -> BrowserManager:
        """Get singleton instance of BrowserManager.

        Returns:
            BrowserManager singleton instance
        """
        if cls._instance is None:
            cls._instance = cls()
            cls._lock = asyncio.Lock()
            atexit.register(cls._sync_cleanup)
        return cls._instance

    @classmethod
    def _sync_cleanup(cls) -> None:
        """Synchronous cleanup for atexit hook."""
        if cls._browser is not None:
            try:
                loop = asyncio.get_event_loop()
                if loop.is_running():
                    loop.create_task(cls._async_cleanup())
                else:
                    loop.run_until_complete(cls._async_cleanup())
            except RuntimeError:
                asyncio.run(cls._async_cleanup())

    @classmethod
    async def _async_cleanup(cls) -> None:
        """Async cleanup for browser resources."""
        for context in cls._contexts[:]:
            await cls._safe_close_context(context)
        cls._contexts.clear()
        if cls._browser is not None:
            await cls._safe_close_browser()
            cls._browser = None
        if cls._playwright is not None:
            await cls._safe_stop_playwright()
            cls._playwright = None

    @classmethod
    async def _safe_close_context(cls, context: BrowserContext) -> None:
        try:
            await context.close()
        except Exception:  # noqa: S110 - intentionally broad for cleanup
            pass

    @classmethod
    async def _safe_close_browser(cls) -> None:
        """Safely close browser, ignoring errors."""
        try:
            if cls._browser is not None:
                await cls._browser.close()
        except Exception:  # noqa: S110 - intentionally broad for cleanup
            pass

    @classmethod
    async def _safe_stop_playwright(cls) -> None:
        """Safely stop playwright, ignoring errors."""
        try:
            if cls._playwright is not None:
                await cls._playwright.stop()
        except Exception:  # noqa: S110 - intentionally broad for cleanup
            pass

    async def _ensure_browser(self) -> Browser:
        """Ensure the configured browser is started."""
        if self._playwright is None:
            self.__class__._playwright = await async_playwright().start()
        playwright = self._playwright
        assert playwright is not None

        if self._browser is None:
            config = get_config()
            browser_type = getattr(playwright, config.browser)
            headless = get_headless_mode()
            logger.info("Launching %s (headless=%s)", config.browser, headless)
            self.__class__._browser = await browser_type.launch(headless=headless)
        browser = self._browser
        assert browser is not None
        return browser

    def _context_options(self, viewport: Viewport | None) -> dict[str, Any]:
        config = get_config()
        options: dict[str, Any] = {
            "base_url": config.base_url,
            "viewport": (viewport or config.viewport).as_playwright(),
        }
        if config.video:
            config.videos_folder.mkdir(parents=True, exist_ok=True)
            options["record_video_dir"] = str(config.videos_folder)
        return options

    async def new_context(self, viewport: Viewport | None = None) -> BrowserContext:
        """Create a fresh browser context with the suite defaults applied.

        Args:
            viewport: Viewport override (default: configured viewport)

        Returns:
            New BrowserContext; the caller should close it when done
        """
        if self._lock is None:
            self.__class__._lock = asyncio.Lock()
        lock = self._lock
        assert lock is not None

        async with lock:
            browser = await self._ensure_browser()

        context = await browser.new_context(**self._context_options(viewport))
        config = get_config()
        context.set_default_timeout(config.default_command_timeout)
        context.set_default_navigation_timeout(config.response_timeout)
        self._contexts.append(context)
        return context

    async def new_page(self, viewport: Viewport | None = None) -> Page:
        """Open a page in a fresh context.

        Args:
            viewport: Viewport override (default: configured viewport)

        Returns:
            Playwright Page instance
        """
        context = await self.new_context(viewport)
        return await context.new_page()

    async def close_context(self, context: BrowserContext) -> None:
        """Close a context created by this manager."""
        if context in self._contexts:
            self._contexts.remove(context)
        await self._safe_close_context(context)

    async def close(self) -> None:
        """Close browser and cleanup resources."""
        if self._lock is None:
            self.__class__._lock = asyncio.Lock()
        lock = self._lock
        assert lock is not None

        async with lock:
            await self._async_cleanup()
