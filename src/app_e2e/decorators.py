"""Decorators for custom test commands.

`command` gives every custom command the same behavior:
- a DEBUG entry in the command log with the command's arguments
- Playwright failures converted to E2EError with the command name

Assertion failures are left alone so pytest reports them as test
failures, not errors.
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Awaitable, Callable, Collection
from functools import wraps
from typing import ParamSpec, TypeVar, overload

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from app_e2e.models import E2EError, ErrorCode

logger = logging.getLogger("app_e2e.commands")

REDACTED = "[MASKED]"

P = ParamSpec("P")
R = TypeVar("R")


def _describe(
    param_names: list[str],
    args: tuple[object, ...],
    kwargs: dict[str, object],
    redact: frozenset[str],
) -> str:
    # Pages and locators have noisy reprs; they are left out
    shown: list[str] = []
    for index, arg in enumerate(args):
        if type(arg).__module__.startswith(("playwright", "unittest.mock")):
            continue
        param = param_names[index] if index < len(param_names) else None
        shown.append(REDACTED if param in redact else repr(arg))
    for key, value in kwargs.items():
        shown.append(f"{key}={REDACTED if key in redact else repr(value)}")
    return ", ".join(shown)


@overload
def command(func: Callable[P, Awaitable[R]], /) -> Callable[P, Awaitable[R]]: ...


@overload
def command(
    *, redact: Collection[str] = ...
) -> Callable[[Callable[P, Awaitable[R]]], Callable[P, Awaitable[R]]]: ...


def command(
    func: Callable[P, Awaitable[R]] | None = None,
    /,
    *,
    redact: Collection[str] = (),
) -> Callable[P, Awaitable[R]] | Callable[[Callable[P, Awaitable[R]]], Callable[P, Awaitable[R]]]:
    """Decorator for custom commands.

    Usage:
        @command
        async def assert_toast_message(page: Page, message: str) -> None:
            ...

        @command(redact={"password"})
        async def login(page: Page, email: str, password: str) -> SessionState:
            ...

    Args:
        func: The async command to wrap.
        redact: Parameter names whose values never reach the command log.

    Returns:
        Wrapped command that logs its call and normalizes Playwright errors.
    """
    redacted = frozenset(redact)

    def decorate(func: Callable[P, Awaitable[R]]) -> Callable[P, Awaitable[R]]:
        name = func.__name__
        param_names = list(inspect.signature(func).parameters)

        @wraps(func)
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            logger.debug("%s(%s)", name, _describe(param_names, args, kwargs, redacted))
            try:
                return await func(*args, **kwargs)
            except PlaywrightTimeoutError as e:
                logger.error("Command %s timed out: %s", name, e.message)
                raise E2EError(
                    code=ErrorCode.TIMEOUT,
                    message=f"{name} timed out: {e.message}",
                    details={"command": name},
                ) from e
            except PlaywrightError as e:
                logger.error("Command %s failed: %s", name, e.message)
                raise E2EError(
                    code=ErrorCode.COMMAND_FAILED,
                    message=f"{name} failed: {e.message}",
                    details={"command": name},
                ) from e

        return wrapper

    if func is not None:
        return decorate(func)
    return decorate
