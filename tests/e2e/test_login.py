"""E2E tests for the login page.

Covers form validation and the login request outcome, with the login
API stubbed so no real account is needed.

Run with: pytest tests/e2e/test_login.py -v
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from typing import TYPE_CHECKING

import pytest
import pytest_asyncio
from playwright.async_api import expect

from app_e2e.commands import assert_toast_message, assert_url_contains, data_cy
from app_e2e.selectors import EMAIL_INPUT, LOGIN_BUTTON, PASSWORD_INPUT
from tests.e2e.helpers.constants import LOGIN_PATH, TEST_EMAIL, TEST_PASSWORD

if TYPE_CHECKING:
    from playwright.async_api import Page

    from app_e2e.commands import NetworkInterceptor

pytestmark = [
    pytest.mark.e2e,
    pytest.mark.asyncio(loop_scope="session"),
]


@pytest_asyncio.fixture(loop_scope="session")
async def login_page(page: Page) -> AsyncGenerator[Page]:
    """Page opened on /login."""
    await page.goto(LOGIN_PATH)
    yield page


async def _submit(page: Page, email: str, password: str) -> None:
    await page.locator(EMAIL_INPUT).fill(email)
    await page.locator(PASSWORD_INPUT).fill(password)
    await page.locator(LOGIN_BUTTON).click()


class TestLoginForm:
    """Login form rendering and validation."""

    async def test_displays_all_required_fields(self, login_page: Page) -> None:
        await expect(login_page.locator(EMAIL_INPUT)).to_be_visible()
        await expect(login_page.locator(PASSWORD_INPUT)).to_be_visible()
        login_button = login_page.locator(LOGIN_BUTTON)
        await expect(login_button).to_be_visible()
        await expect(login_button).to_be_disabled()

    async def test_enables_button_when_form_is_valid(self, login_page: Page) -> None:
        await login_page.locator(EMAIL_INPUT).fill(TEST_EMAIL)
        await login_page.locator(PASSWORD_INPUT).fill(TEST_PASSWORD)

        await expect(login_page.locator(LOGIN_BUTTON)).to_be_enabled()

    async def test_shows_error_for_invalid_email(self, login_page: Page) -> None:
        await _submit(login_page, "invalid-email", TEST_PASSWORD)

        await expect(login_page.locator(data_cy("email-error"))).to_contain_text("Please enter a valid email")


class TestLoginRequest:
    """Login outcome with the login API stubbed."""

    async def test_valid_credentials_redirect_to_dashboard(
        self,
        login_page: Page,
        network: NetworkInterceptor,
    ) -> None:
        # Arrange
        await network.intercept(
            "POST",
            "/api/auth/login",
            status_code=200,
            body={"token": "fake-jwt-token", "user": {"id": 1, "email": TEST_EMAIL}},
            alias="loginRequest",
        )

        # Act
        await _submit(login_page, TEST_EMAIL, TEST_PASSWORD)

        # Assert
        await network.wait("@loginRequest")
        await assert_url_contains(login_page, "/dashboard")
        await assert_toast_message(login_page, "Login successful")

    async def test_invalid_credentials_show_error(
        self,
        login_page: Page,
        network: NetworkInterceptor,
    ) -> None:
        await network.intercept(
            "POST",
            "/api/auth/login",
            status_code=401,
            body={"error": "Invalid credentials"},
            alias="loginRequest",
        )

        await _submit(login_page, TEST_EMAIL, "wrongpassword")

        interception = await network.wait("@loginRequest")
        assert interception.status == 401
        await assert_toast_message(login_page, "Invalid credentials")
