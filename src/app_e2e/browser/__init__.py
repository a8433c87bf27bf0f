"""Browser module for app-e2e.

Provides Playwright browser lifecycle management for the e2e suites.
"""

from app_e2e.browser.config import get_headless_mode
from app_e2e.browser.manager import BrowserManager

__all__ = ["BrowserManager", "get_headless_mode"]
