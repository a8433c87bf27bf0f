"""Test account credentials.

Passwords for test accounts come from the environment first
(APP_E2E_PASSWORD_<USER>) and otherwise from the system keyring, so
they never need to be committed next to the scenarios.
"""

from __future__ import annotations

import os
import platform
import re

import keyring
from keyring.errors import PasswordDeleteError


class KeyringError(Exception):
    """Exception raised when keyring operations fail.

    Attributes:
        message: Human-readable error message
        os_info: Operating system information
        backend_info: Keyring backend information
        setup_instructions: Steps to configure keyring
    """

    def __init__(
        self,
        message: str,
        os_info: str,
        backend_info: str | None = None,
        setup_instructions: list[str] | None = None,
    ) -> None:
        self.message = message
        self.os_info = os_info
        self.backend_info = backend_info
        self.setup_instructions = setup_instructions or []
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        parts = [self.message]
        parts.append(f"\nOS: {self.os_info}")
        if self.backend_info:
            parts.append(f"Backend: {self.backend_info}")
        if self.setup_instructions:
            parts.append("\nSetup instructions:")
            for instruction in self.setup_instructions:
                parts.append(f"  - {instruction}")
        return "\n".join(parts)


def _get_os_info() -> str:
    return f"{platform.system()} {platform.release()}"


def _get_backend_info() -> str | None:
    try:
        backend = keyring.get_keyring()
        return type(backend).__name__
    except Exception:
        return None


def _get_setup_instructions() -> list[str]:
    system = platform.system()
    if system == "Linux":
        return [
            "Install a keyring backend: sudo apt-get install gnome-keyring",
            "For CI or headless servers, set APP_E2E_PASSWORD_<USER> instead",
            "Or install keyrings.alt: pip install keyrings.alt",
        ]
    if system == "Darwin":
        return [
            "macOS should use Keychain automatically",
            "If issues persist, try: security unlock-keychain",
        ]
    if system == "Windows":
        return ["Windows should use Windows Credential Locker automatically"]
    return ["Install a compatible keyring backend", "See: https://pypi.org/project/keyring/"]


def env_var_for(email: str) -> str:
    """Environment variable holding the password for an account.

    Example:
        >>> env_var_for("admin@example.com")
        'APP_E2E_PASSWORD_ADMIN'
    """
    user = email.split("@", 1)[0]
    return "APP_E2E_PASSWORD_" + re.sub(r"[^A-Za-z0-9]", "_", user).upper()


class CredentialStore:
    """Resolves and stores passwords for test accounts.

    Attributes:
        service_name: The keyring service name used for storage
    """

    DEFAULT_SERVICE_NAME = "app-e2e"

    def __init__(self, service_name: str | None = None) -> None:
        self.service_name = service_name or self.DEFAULT_SERVICE_NAME

    def password_for(self, email: str, default: str | None = None) -> str | None:
        """Look up the password of a test account.

        Args:
            email: Account email
            default: Value returned when no password is configured

        Returns:
            Password from the environment or keyring, else `default`

        Raises:
            KeyringError: If the keyring backend fails
        """
        env_value = os.environ.get(env_var_for(email))
        if env_value:
            return env_value

        try:
            stored = keyring.get_password(self.service_name, email)
        except Exception as e:
            raise KeyringError(
                message=f"Failed to read password for {email} from keyring: {e}",
                os_info=_get_os_info(),
                backend_info=_get_backend_info(),
                setup_instructions=_get_setup_instructions(),
            ) from e
        return stored if stored is not None else default

    def save(self, email: str, password: str) -> None:
        """Store a password in the keyring.

        Raises:
            KeyringError: If keyring operation fails
        """
        try:
            keyring.set_password(self.service_name, email, password)
        except Exception as e:
            raise KeyringError(
                message=f"Failed to save password for {email} to keyring: {e}",
                os_info=_get_os_info(),
                backend_info=_get_backend_info(),
                setup_instructions=_get_setup_instructions(),
            ) from e

    def clear(self, email: str) -> None:
        """Remove a stored password. Missing entries are ignored."""
        try:
            keyring.delete_password(self.service_name, email)
        except PasswordDeleteError:
            pass
