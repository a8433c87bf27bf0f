"""Network request interception for browser tests.

Wraps Playwright's route API with alias-based waiting:

    network = NetworkInterceptor(page)
    await network.intercept("POST", "/api/auth/login", status_code=200,
                            body={"token": "t"}, alias="loginRequest")
    ...
    interception = await network.wait("@loginRequest")

A route with a status code or body is stubbed. A route with neither
lets the request through and only records it, with its round-trip time.
"""

from __future__ import annotations

import asyncio
import fnmatch
import json
import logging
import re
import time
from collections.abc import Callable
from typing import TYPE_CHECKING, Any
from urllib.parse import parse_qsl, urlsplit

from playwright.async_api import Error as PlaywrightError

from app_e2e.config import get_config
from app_e2e.models import E2EError, ErrorCode, Interception

if TYPE_CHECKING:
    from playwright.async_api import Page, Request, Route

logger = logging.getLogger(__name__)

UrlPattern = str | re.Pattern[str]


def url_matcher(pattern: UrlPattern) -> Callable[[str], bool]:
    """Build a URL predicate for Playwright's route API.

    - Compiled regexes are searched in the full URL.
    - Patterns starting with "/" match the request path (glob allowed);
      if the pattern has a query string, the query must match too,
      regardless of parameter order.
    - Anything else is a glob against the full URL.
    """
    if isinstance(pattern, re.Pattern):
        return lambda url: pattern.search(url) is not None

    if pattern.startswith("/"):
        expected = urlsplit(pattern)
        expected_query = sorted(parse_qsl(expected.query, keep_blank_values=True))

        def match_path(url: str) -> bool:
            actual = urlsplit(url)
            if not fnmatch.fnmatchcase(actual.path, expected.path):
                return False
            if expected.query:
                return sorted(parse_qsl(actual.query, keep_blank_values=True)) == expected_query
            return True

        return match_path

    return lambda url: fnmatch.fnmatchcase(url, pattern)


def _method_matches(expected: str, actual: str) -> bool:
    return expected == "*" or expected.upper() == actual.upper()


def _prepare_body(body: Any) -> str:
    if body is None:
        return ""
    if isinstance(body, (str, bytes)):
        return body.decode() if isinstance(body, bytes) else body
    return json.dumps(body)


def _decode(text: str) -> Any:
    if not text:
        return None
    try:
        return json.loads(text)
    except ValueError:
        return text


def _normalize_alias(alias: str) -> str:
    return alias[1:] if alias.startswith("@") else alias


class NetworkInterceptor:
    """Stubs and observes a page's network requests.

    Attributes:
        page: Page whose requests are routed
    """

    def __init__(self, page: Page) -> None:
        self.page = page
        self._routes: list[tuple[Callable[[str], bool], Callable[..., Any]]] = []
        self._records: dict[str, list[Interception]] = {}
        self._consumed: dict[str, int] = {}
        self._unaliased: list[Interception] = []
        self._condition = asyncio.Condition()

    async def intercept(
        self,
        method: str,
        url: UrlPattern,
        *,
        status_code: int | None = None,
        body: Any = None,
        headers: dict[str, str] | None = None,
        delay_ms: int = 0,
        alias: str | None = None,
    ) -> None:
        """Register a route.

        Args:
            method: HTTP method to match ("*" for any)
            url: URL pattern (see url_matcher)
            status_code: Stub status (default 200 when a body is given)
            body: Stub body; dicts and lists are sent as JSON
            headers: Extra stub response headers
            delay_ms: Delay before the stub responds
            alias: Name for wait(); "@" prefix optional
        """
        stubbed = status_code is not None or body is not None
        name = _normalize_alias(alias) if alias else None
        if name is not None:
            self._records.setdefault(name, [])
            self._consumed.setdefault(name, 0)

        matcher = url_matcher(url)

        async def handler(route: Route, request: Request) -> None:
            if not _method_matches(method, request.method):
                await route.fallback()
                return

            start = time.perf_counter()
            error: str | None = None
            if stubbed:
                if delay_ms > 0:
                    await asyncio.sleep(delay_ms / 1000)
                await route.fulfill(
                    status=status_code or 200,
                    headers={"Content-Type": "application/json", **(headers or {})},
                    body=_prepare_body(body),
                )
                status: int | None = status_code or 200
                response_body = body
            else:
                try:
                    response = await route.fetch()
                except PlaywrightError as e:
                    logger.warning("%s %s failed: %s", request.method, request.url, e.message)
                    try:
                        await route.abort()
                    except PlaywrightError as abort_error:
                        logger.debug("Could not abort %s: %s", request.url, abort_error.message)
                    status = None
                    response_body = None
                    error = e.message
                else:
                    response_body = _decode(await response.text())
                    status = response.status
                    await route.fulfill(response=response)

            record = Interception(
                alias=name,
                method=request.method,
                url=request.url,
                request_body=_decode(request.post_data or ""),
                status=status,
                response_body=response_body,
                duration_ms=(time.perf_counter() - start) * 1000,
                stubbed=stubbed,
                error=error,
            )
            logger.debug(
                "%s %s -> %s (%s, %.0fms)",
                record.method,
                record.url,
                record.status,
                "stub" if stubbed else "network",
                record.duration_ms,
            )
            await self._record(record)

        self._routes.append((matcher, handler))
        await self.page.route(matcher, handler)
        logger.debug("Intercepting %s %s%s", method, url, f" as @{name}" if name else "")

    async def _record(self, record: Interception) -> None:
        async with self._condition:
            if record.alias is None:
                self._unaliased.append(record)
            else:
                self._records[record.alias].append(record)
            self._condition.notify_all()

    async def wait(self, alias: str, timeout: int | None = None) -> Interception:
        """Wait for the next unconsumed request of an alias.

        Args:
            alias: Alias given to intercept(); "@" prefix optional
            timeout: Milliseconds to wait (default: request_timeout)

        Returns:
            The matching Interception

        Raises:
            E2EError: ALIAS_NOT_FOUND for an unknown alias, TIMEOUT if no
                      request arrives in time
        """
        name = _normalize_alias(alias)
        if name not in self._records:
            raise E2EError(
                code=ErrorCode.ALIAS_NOT_FOUND,
                message=f"No route registered with alias @{name}",
                details={"alias": name, "known": sorted(self._records)},
            )

        timeout_ms = timeout if timeout is not None else get_config().request_timeout

        async with self._condition:
            try:
                await asyncio.wait_for(
                    self._condition.wait_for(lambda: self._consumed[name] < len(self._records[name])),
                    timeout_ms / 1000,
                )
            except TimeoutError as e:
                raise E2EError(
                    code=ErrorCode.TIMEOUT,
                    message=f"Timed out after {timeout_ms}ms waiting for @{name}",
                    details={"alias": name, "timeout_ms": timeout_ms},
                ) from e

            record = self._records[name][self._consumed[name]]
            self._consumed[name] += 1
            return record

    def interceptions(self, alias: str | None = None) -> list[Interception]:
        """Recorded interceptions, for one alias or all of them."""
        if alias is not None:
            return list(self._records.get(_normalize_alias(alias), []))
        result = list(self._unaliased)
        for records in self._records.values():
            result.extend(records)
        return result

    async def clear(self) -> None:
        """Remove all routes registered by this interceptor."""
        for matcher, handler in self._routes:
            await self.page.unroute(matcher, handler)
        self._routes.clear()
