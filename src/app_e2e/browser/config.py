"""Browser configuration utilities.

Provides configuration functions for browser automation.
"""

from app_e2e.config import env_flag, get_config

# Environment variable name for headless mode configuration
HEADLESS_ENV_VAR = "APP_E2E_HEADLESS"


def get_headless_mode() -> bool:
    """Get headless mode from APP_E2E_HEADLESS, falling back to the config.

    Default: True (headless mode for CI/CD stability)
    Set APP_E2E_HEADLESS=false (or 0, no, off) to show the browser window
    for debugging.

    Returns:
        True if headless mode is enabled (default)

    Raises:
        ConfigError: If APP_E2E_HEADLESS is not a recognizable boolean
    """
    return env_flag(HEADLESS_ENV_VAR, get_config().headless)
