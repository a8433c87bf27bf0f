"""HTTP client for the application's API, using httpx.

Requests go straight to the backend (no browser involved) and never
fail on status code unless asked to, so scenarios can assert on error
responses.
"""

from __future__ import annotations

import logging
import time
from types import TracebackType
from typing import Any, Self

import httpx

from app_e2e.config import E2EConfig, get_config
from app_e2e.models import ApiResponse, E2EError, ErrorCode

logger = logging.getLogger(__name__)


def bearer(token: str) -> dict[str, str]:
    """Build an Authorization header for a bearer token."""
    return {"Authorization": f"Bearer {token}"}


def _parse_body(response: httpx.Response) -> Any:
    if not response.content:
        return None
    content_type = response.headers.get("content-type", "")
    if "json" in content_type:
        try:
            return response.json()
        except ValueError:
            return response.text
    return response.text


class ApiClient:
    """HTTP client for the application's API.

    Use as async context manager for proper resource management.

    Attributes:
        config: Suite configuration (base URL, timeouts)
        default_headers: Headers sent with every request
    """

    def __init__(
        self,
        config: E2EConfig | None = None,
        default_headers: dict[str, str] | None = None,
    ) -> None:
        """Initialize API client.

        Args:
            config: Suite configuration (default: process-wide config)
            default_headers: Headers sent with every request (e.g. bearer())
        """
        self.config = config or get_config()
        self.default_headers = default_headers or {}
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> Self:
        """Enter async context manager."""
        self._client = httpx.AsyncClient(
            base_url=self.config.api_base_url,
            timeout=httpx.Timeout(
                self.config.response_timeout / 1000,
                connect=self.config.request_timeout / 1000,
            ),
        )
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        """Exit async context manager."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    def _build_headers(self, headers: dict[str, str] | None, has_json: bool) -> dict[str, str]:
        result: dict[str, str] = {"Accept": "application/json", **self.default_headers}
        if has_json:
            result["Content-Type"] = "application/json"
        if headers:
            result.update(headers)
        return result

    def _handle_error_response(self, response: ApiResponse) -> None:
        """Raise for an unexpected status code.

        Args:
            response: Parsed API response

        Raises:
            E2EError: With REQUEST_FAILED code
        """
        details: dict[str, object] = {"status_code": response.status, "response": response.body}
        if response.status == 429:
            details["rate_limited"] = True
        raise E2EError(
            code=ErrorCode.REQUEST_FAILED,
            message=f"API request failed with status {response.status}.",
            details=details,
        )

    async def request(
        self,
        method: str,
        endpoint: str,
        *,
        json: Any = None,
        headers: dict[str, str] | None = None,
        params: dict[str, Any] | None = None,
        fail_on_status_code: bool = False,
    ) -> ApiResponse:
        """Make a request to the API.

        Args:
            method: HTTP method
            endpoint: Path below the API prefix (e.g. "/auth/login")
            json: JSON body
            headers: Extra headers for this request
            params: Query parameters
            fail_on_status_code: Raise E2EError for non-2xx responses

        Returns:
            ApiResponse with status, headers, parsed body and duration

        Raises:
            RuntimeError: If used outside `async with`
            E2EError: If fail_on_status_code is set and the status is not 2xx
        """
        if self._client is None:
            raise RuntimeError("Client not initialized. Use 'async with' context manager.")

        method = method.upper()
        start = time.perf_counter()
        response = await self._client.request(
            method,
            endpoint,
            json=json,
            headers=self._build_headers(headers, json is not None),
            params=params,
        )
        duration_ms = (time.perf_counter() - start) * 1000

        result = ApiResponse(
            status=response.status_code,
            headers={k.lower(): v for k, v in response.headers.items()},
            body=_parse_body(response),
            duration_ms=duration_ms,
        )
        logger.debug("%s %s -> %d (%.0fms)", method, endpoint, result.status, duration_ms)

        if fail_on_status_code and not result.is_success:
            self._handle_error_response(result)
        return result

    async def get(self, endpoint: str, **kwargs: Any) -> ApiResponse:
        return await self.request("GET", endpoint, **kwargs)

    async def post(self, endpoint: str, json: Any = None, **kwargs: Any) -> ApiResponse:
        return await self.request("POST", endpoint, json=json, **kwargs)

    async def put(self, endpoint: str, json: Any = None, **kwargs: Any) -> ApiResponse:
        return await self.request("PUT", endpoint, json=json, **kwargs)

    async def delete(self, endpoint: str, **kwargs: Any) -> ApiResponse:
        return await self.request("DELETE", endpoint, **kwargs)


async def api_request(
    method: str,
    endpoint: str,
    body: Any = None,
    *,
    headers: dict[str, str] | None = None,
) -> ApiResponse:
    """Send one API request without failing on status code.

    Args:
        method: HTTP method
        endpoint: Path below the API prefix (e.g. "/users")
        body: JSON body (optional)
        headers: Extra headers

    Returns:
        ApiResponse
    """
    async with ApiClient() as client:
        return await client.request(method, endpoint, json=body, headers=headers)
