"""Performance measurement helpers.

Reads the browser's Performance APIs (Navigation Timing, Resource Timing,
PerformanceObserver) through page.evaluate(). Budgets used by the
performance suite are defined here.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any

from app_e2e.config import get_config
from app_e2e.decorators import command
from app_e2e.models import E2EError, ErrorCode, ResourceEntry

if TYPE_CHECKING:
    from playwright.async_api import Page

logger = logging.getLogger(__name__)

# Budgets (milliseconds unless noted)
PAGE_LOAD_BUDGET_MS = 3000
LCP_BUDGET_MS = 2500
FID_BUDGET_MS = 100
API_RESPONSE_BUDGET_MS = 1000
LARGE_QUERY_BUDGET_MS = 2000
JS_BUNDLE_BUDGET_BYTES = 500_000
MEMORY_GROWTH_BUDGET_BYTES = 10_000_000
VIRTUAL_SCROLL_BUDGET_MS = 100
RERENDER_BUDGET_MS = 1

DEFAULT_OBSERVER_TIMEOUT_MS = 5000

_MARK_START_SCRIPT = "performance.mark('start')"

_MARK_END_ON_LOAD_SCRIPT = """
window.addEventListener('load', () => {
  performance.mark('end');
  performance.measure('pageLoad', 'start', 'end');
});
"""

_PAGE_LOAD_SCRIPT = """
() => {
  const entry = performance.getEntriesByName('pageLoad')[0];
  return entry ? entry.duration : null;
}
"""

_NAVIGATION_ENTRY_SCRIPT = """
() => {
  const entry = performance.getEntriesByType('navigation')[0];
  return entry ? entry.toJSON() : null;
}
"""

# Resolves with the observed value, or null after the timeout
_OBSERVE_SCRIPT = """
({ type, pick, timeout }) => new Promise((resolve) => {
  const extract = {
    last_start: (entries) => entries[entries.length - 1].startTime,
    input_delay: (entries) => entries[0].processingStart - entries[0].startTime,
  }[pick];
  let done = false;
  const observer = new PerformanceObserver((list) => {
    const entries = list.getEntries();
    if (entries.length > 0 && !done) {
      done = true;
      observer.disconnect();
      resolve(extract(entries));
    }
  });
  try {
    observer.observe({ type, buffered: true });
  } catch (e) {
    resolve(null);
    return;
  }
  setTimeout(() => {
    if (!done) {
      observer.disconnect();
      resolve(null);
    }
  }, timeout);
})
"""

_RESOURCES_SCRIPT = """
() => performance.getEntriesByType('resource').map((r) => ({
  name: r.name,
  initiator_type: r.initiatorType,
  transfer_size: r.transferSize || 0,
  duration: r.duration,
}))
"""

_HEAP_SCRIPT = """
() => {
  if (typeof window.gc === 'function') window.gc();
  return performance.memory ? performance.memory.usedJSHeapSize : null;
}
"""


@command
async def measure_performance(page: Page, metric_name: str) -> float:
    """Read a field of the navigation timing entry.

    Args:
        page: Playwright page after navigation
        metric_name: Field name, e.g. "domComplete" or "loadEventEnd"

    Returns:
        The metric value

    Raises:
        E2EError: If there is no navigation entry or no such numeric field
    """
    entry: dict[str, Any] | None = await page.evaluate(_NAVIGATION_ENTRY_SCRIPT)
    if entry is None:
        raise E2EError(
            code=ErrorCode.COMMAND_FAILED,
            message="No navigation timing entry available",
            details={"metric": metric_name},
        )
    value = entry.get(metric_name)
    if not isinstance(value, (int, float)) or isinstance(value, bool):
        raise E2EError(
            code=ErrorCode.COMMAND_FAILED,
            message=f"Unknown navigation timing metric: {metric_name}",
            details={"metric": metric_name, "available": sorted(entry)},
        )
    logger.debug("navigation.%s = %.1f", metric_name, value)
    return float(value)


@command
async def measure_page_load(page: Page, path: str = "/") -> float:
    """Navigate to `path` and measure start-to-load with performance marks.

    Returns:
        pageLoad measure duration in milliseconds
    """
    await page.add_init_script(_MARK_START_SCRIPT + ";\n" + _MARK_END_ON_LOAD_SCRIPT)
    await page.goto(get_config().url(path), wait_until="load")
    duration = await page.evaluate(_PAGE_LOAD_SCRIPT)
    if duration is None:
        raise E2EError(
            code=ErrorCode.COMMAND_FAILED,
            message="pageLoad measure was not recorded",
            details={"path": path},
        )
    return float(duration)


async def largest_contentful_paint(page: Page, timeout_ms: int = DEFAULT_OBSERVER_TIMEOUT_MS) -> float | None:
    """Start time of the latest largest-contentful-paint entry, or None."""
    value = await page.evaluate(
        _OBSERVE_SCRIPT,
        {"type": "largest-contentful-paint", "pick": "last_start", "timeout": timeout_ms},
    )
    return None if value is None else float(value)


async def first_input_delay(page: Page, timeout_ms: int = DEFAULT_OBSERVER_TIMEOUT_MS) -> float | None:
    """processingStart - startTime of the first input, or None."""
    value = await page.evaluate(
        _OBSERVE_SCRIPT,
        {"type": "first-input", "pick": "input_delay", "timeout": timeout_ms},
    )
    return None if value is None else float(value)


async def resource_entries(page: Page) -> list[ResourceEntry]:
    raw = await page.evaluate(_RESOURCES_SCRIPT)
    return [ResourceEntry(**item) for item in raw or []]


def js_bundle_size(entries: list[ResourceEntry]) -> int:
    """Total transfer size of JavaScript resources in bytes."""
    return sum(e.transfer_size for e in entries if ".js" in e.name)


def cached_resource_count(entries: list[ResourceEntry]) -> int:
    """Resources served without network transfer (cache hits)."""
    return sum(1 for e in entries if e.transfer_size == 0)


async def js_heap_used(page: Page) -> int | None:
    """Used JS heap in bytes, after a GC when the browser exposes one.

    Returns None on browsers without performance.memory (non-Chromium).
    """
    value = await page.evaluate(_HEAP_SCRIPT)
    return None if value is None else int(value)


async def elapsed_ms(page: Page) -> float:
    """The page's high resolution clock (performance.now())."""
    return float(await page.evaluate("() => performance.now()"))


async def timed(page: Page, action: Callable[[], Awaitable[object]]) -> float:
    """Run an action and return its duration on the page clock (ms)."""
    start = await elapsed_ms(page)
    await action()
    end = await elapsed_ms(page)
    return end - start


async def service_worker_registered(page: Page) -> bool:
    return bool(
        await page.evaluate(
            """
            async () => {
              if (!('serviceWorker' in navigator)) return false;
              const registration = await navigator.serviceWorker.getRegistration();
              return registration !== undefined && registration !== null;
            }
            """
        )
    )


async def post_service_worker_message(page: Page, message: dict[str, Any]) -> None:
    """Post a message to the active service worker once it is ready."""
    await page.evaluate(
        """
        async (message) => {
          const registration = await navigator.serviceWorker.ready;
          registration.active.postMessage(message);
        }
        """,
        message,
    )
