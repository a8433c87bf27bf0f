"""Login command with session caching.

The first login for a given [email, password] pair drives the real
login form and caches the resulting cookies and localStorage. Later
logins with the same pair restore the cached state instead. Either way
the page ends on about:blank, so the test decides where to go next.
"""

from __future__ import annotations

import json
import logging
import re
from typing import TYPE_CHECKING, Any

from playwright.async_api import expect

from app_e2e.auth.session import SessionCache, get_session_cache, session_key
from app_e2e.config import get_config
from app_e2e.decorators import command
from app_e2e.models import E2EError, ErrorCode, SessionState
from app_e2e.selectors import EMAIL_INPUT, LOGIN_BUTTON, PASSWORD_INPUT

if TYPE_CHECKING:
    from playwright._impl._api_structures import SetCookieParam
    from playwright.async_api import Page

logger = logging.getLogger(__name__)

LOGIN_PATH = "/login"
BLANK_PAGE = "about:blank"

# Runs in every new document; seeds localStorage for the matching origin
_RESTORE_STORAGE_SCRIPT = """
(() => {{
  const origins = {origins};
  const entry = origins.find((o) => o.origin === window.location.origin);
  if (!entry) return;
  for (const item of entry.localStorage) {{
    window.localStorage.setItem(item.name, item.value);
  }}
}})();
"""


async def _restore_session(page: Page, session: SessionState) -> None:
    """Load cached cookies and localStorage into the page's context."""
    if session.cookies:
        cookies: list[SetCookieParam] = session.cookies  # type: ignore[assignment]
        await page.context.add_cookies(cookies)
    origins = [o for o in session.origins if o.get("localStorage")]
    if origins:
        await page.context.add_init_script(_RESTORE_STORAGE_SCRIPT.format(origins=json.dumps(origins)))


async def _run_login_form(page: Page, email: str, password: str) -> dict[str, Any]:
    """Drive the login form and return the resulting storage state.

    Raises:
        E2EError: If the app stays on the login page
    """
    await page.context.clear_cookies()
    await page.goto(get_config().url(LOGIN_PATH))
    await page.locator(EMAIL_INPUT).fill(email)
    await page.locator(PASSWORD_INPUT).fill(password)
    await page.locator(LOGIN_BUTTON).click()

    try:
        await expect(page).not_to_have_url(
            re.compile(re.escape(LOGIN_PATH)),
            timeout=get_config().default_command_timeout,
        )
    except AssertionError as e:
        raise E2EError(
            code=ErrorCode.LOGIN_FAILED,
            message=f"Login for {email} did not leave {LOGIN_PATH}",
            details={"email": email, "url": page.url},
        ) from e

    state: dict[str, Any] = dict(await page.context.storage_state())
    return state


@command(redact={"password"})
async def login(
    page: Page,
    email: str,
    password: str,
    *,
    cache: SessionCache | None = None,
) -> SessionState:
    """Log in through the UI once per credential pair, then reuse the session.

    Args:
        page: Playwright page whose context receives the session
        email: Account email
        password: Account password
        cache: Session cache (default: process-wide cache)

    Returns:
        The cached or newly created SessionState

    Raises:
        E2EError: If the login form does not redirect away from /login
    """
    cache = cache or get_session_cache()
    key = session_key([email, password])

    session = cache.get(key)
    if session is not None:
        logger.info("Restoring cached session for %s", email)
        await page.goto(BLANK_PAGE)
        await _restore_session(page, session)
        return session

    logger.info("Creating session for %s", email)
    state = await _run_login_form(page, email, password)
    session = SessionState(
        session_id=key,
        cookies=list(state.get("cookies", [])),
        origins=list(state.get("origins", [])),
    )
    cache.put(session)

    await page.goto(BLANK_PAGE)
    return session
