"""Unit tests for data models."""

from __future__ import annotations

import time

import pytest
from pydantic import ValidationError

from app_e2e.models import (
    ApiResponse,
    E2EError,
    ErrorCode,
    SessionState,
    SnapshotResult,
    Viewport,
)


class TestViewport:
    """Tests for Viewport model."""

    def test_as_playwright(self) -> None:
        viewport = Viewport(name="mobile", width=375, height=667)

        assert viewport.as_playwright() == {"width": 375, "height": 667}

    def test_rejects_non_positive_size(self) -> None:
        with pytest.raises(ValidationError):
            Viewport(width=0, height=720)


class TestSessionState:
    """Tests for SessionState model."""

    def test_not_expired(self, session_state: SessionState) -> None:
        assert session_state.is_expired() is False

    def test_expired(self, expired_session_state: SessionState) -> None:
        assert expired_session_state.is_expired() is True

    def test_no_expiry_never_expires(self) -> None:
        session = SessionState(session_id="x", created_at=int(time.time()) - 10**6)

        assert session.is_expired() is False

    def test_round_trips_through_json(self, session_state: SessionState) -> None:
        restored = SessionState.model_validate_json(session_state.model_dump_json())

        assert restored == session_state


class TestApiResponse:
    """Tests for ApiResponse model."""

    @pytest.mark.parametrize(("status", "expected"), [(200, True), (204, True), (301, False), (404, False)])
    def test_is_success(self, status: int, expected: bool) -> None:
        assert ApiResponse(status=status).is_success is expected


class TestSnapshotResult:
    """Tests for SnapshotResult model."""

    def test_defaults_to_passed(self) -> None:
        result = SnapshotResult(name="homepage", baseline_path="/tmp/homepage.png")

        assert result.passed is True
        assert result.diff_pixels == 0
        assert result.baseline_created is False


class TestE2EError:
    """Tests for E2EError exception."""

    def test_attributes(self) -> None:
        error = E2EError(
            code=ErrorCode.ALIAS_NOT_FOUND,
            message="No route registered with alias @users",
            details={"alias": "users"},
        )

        assert error.code == ErrorCode.ALIAS_NOT_FOUND
        assert error.message == "No route registered with alias @users"
        assert error.details == {"alias": "users"}
        assert str(error) == "No route registered with alias @users"

    def test_details_default_to_empty(self) -> None:
        assert E2EError(code=ErrorCode.TIMEOUT, message="slow").details == {}

    def test_error_code_values(self) -> None:
        assert ErrorCode.SNAPSHOT_MISMATCH.value == "snapshot_mismatch"
