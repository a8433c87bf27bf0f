"""Pydantic data models for app-e2e.

This module defines the data models shared by the custom commands,
including cached sessions, API responses, intercepted requests and
snapshot results, plus the error types raised by commands.
"""

from __future__ import annotations

import time
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class Viewport(BaseModel):
    """Browser viewport size.

    Attributes:
        width: Viewport width in CSS pixels
        height: Viewport height in CSS pixels
        name: Optional device label (e.g. "mobile")
    """

    width: int = Field(gt=0)
    height: int = Field(gt=0)
    name: str | None = None

    def as_playwright(self) -> dict[str, int]:
        """Return the viewport in the shape Playwright expects."""
        return {"width": self.width, "height": self.height}


class SessionState(BaseModel):
    """Cached browser session.

    Stores the storage state captured after a login so that later tests
    can restore it instead of repeating the login flow.

    Attributes:
        session_id: Cache key derived from the session id parts
        cookies: Playwright cookie dictionaries
        origins: localStorage entries per origin, as Playwright reports them
        created_at: Creation timestamp (Unix timestamp)
        expires_at: Expiration timestamp (Unix timestamp), None if no expiry
    """

    session_id: str
    cookies: list[dict[str, Any]] = []
    origins: list[dict[str, Any]] = []
    created_at: int = Field(default_factory=lambda: int(time.time()))
    expires_at: int | None = None

    def is_expired(self) -> bool:
        """Check if the session has expired.

        Returns:
            True if session has expired, False otherwise.
            Returns False if expires_at is None (no expiry set).
        """
        if self.expires_at is None:
            return False
        return time.time() > self.expires_at


class ApiResponse(BaseModel):
    """Response of a direct API request.

    Attributes:
        status: HTTP status code
        headers: Response headers (lower-cased names)
        body: Parsed JSON body, raw text, or None for an empty body
        duration_ms: Round-trip time in milliseconds
    """

    status: int
    headers: dict[str, str] = {}
    body: Any = None
    duration_ms: float = 0.0

    @property
    def is_success(self) -> bool:
        return 200 <= self.status < 300


class Interception(BaseModel):
    """A request observed or stubbed by the network interceptor.

    Attributes:
        alias: Alias the route was registered under
        method: HTTP method of the request
        url: Full request URL
        request_body: Request post data, if any
        status: Response status code (None if the request failed)
        response_body: Response body (parsed JSON when possible)
        duration_ms: Time between request and response
        stubbed: Whether the response came from a stub
        error: Failure message when the request did not complete
    """

    alias: str | None = None
    method: str
    url: str
    request_body: Any = None
    status: int | None = None
    response_body: Any = None
    duration_ms: float = 0.0
    stubbed: bool = False
    error: str | None = None


class ResourceEntry(BaseModel):
    """A `resource` performance timeline entry."""

    name: str
    initiator_type: str = ""
    transfer_size: int = 0
    duration: float = 0.0


class SnapshotResult(BaseModel):
    """Outcome of an image snapshot comparison.

    Attributes:
        name: Snapshot name as given by the test
        baseline_path: Path of the stored baseline image
        actual_path: Path of the screenshot taken in this run
        diff_path: Path of the diff image, if one was written
        diff_pixels: Number of differing pixels
        diff_ratio: Differing pixels divided by total pixels
        passed: Whether the snapshot matched within the threshold
        baseline_created: True if this run wrote a new baseline
    """

    name: str
    baseline_path: str
    actual_path: str | None = None
    diff_path: str | None = None
    diff_pixels: int = 0
    diff_ratio: float = 0.0
    passed: bool = True
    baseline_created: bool = False


class A11yViolation(BaseModel):
    """An axe-core rule violation."""

    rule_id: str
    impact: str | None = None
    description: str = ""
    help_url: str | None = None
    targets: list[str] = []


class ErrorCode(str, Enum):
    """Error codes for app-e2e command errors."""

    COMMAND_FAILED = "command_failed"
    LOGIN_FAILED = "login_failed"
    REQUEST_FAILED = "request_failed"
    TIMEOUT = "timeout"
    ALIAS_NOT_FOUND = "alias_not_found"
    FIXTURE_NOT_FOUND = "fixture_not_found"
    SNAPSHOT_MISMATCH = "snapshot_mismatch"
    A11Y_VIOLATIONS = "a11y_violations"
    TASK_FAILED = "task_failed"


class E2EError(Exception):
    """Exception raised by custom commands.

    Attributes:
        code: Error code
        message: Human-readable error message
        details: Additional error details
    """

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        details: dict[str, object] | None = None,
    ) -> None:
        """Initialize the error.

        Args:
            code: Error code from ErrorCode enum
            message: Human-readable error message
            details: Additional context (e.g., status code, selector)
        """
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)


class ConfigError(Exception):
    """Raised when the suite configuration cannot be loaded or is invalid."""
