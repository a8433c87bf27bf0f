"""Selectors shared by the commands and scenarios.

The application marks testable elements with `data-cy` attributes.
"""


def data_cy(name: str) -> str:
    """Build a selector for a data-cy attribute.

    Example:
        >>> data_cy("login-button")
        '[data-cy=login-button]'
    """
    return f"[data-cy={name}]"


EMAIL_INPUT = data_cy("email-input")
PASSWORD_INPUT = data_cy("password-input")
LOGIN_BUTTON = data_cy("login-button")
LOADING_SPINNER = data_cy("loading-spinner")
TOAST_MESSAGE = data_cy("toast-message")
