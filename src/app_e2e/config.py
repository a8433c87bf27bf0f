"""Suite configuration for app-e2e.

Configuration is layered:
    1. Model defaults (the values below)
    2. YAML file (explicit path, $APP_E2E_CONFIG, or ./app_e2e.yaml)
    3. APP_E2E_* environment variables
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field, TypeAdapter, ValidationError

from app_e2e.models import ConfigError, Viewport

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "APP_E2E_CONFIG"
DEFAULT_CONFIG_FILENAME = "app_e2e.yaml"

# Environment variable -> config field
_ENV_OVERRIDES: dict[str, str] = {
    "APP_E2E_BASE_URL": "base_url",
    "APP_E2E_HEADLESS": "headless",
    "APP_E2E_BROWSER": "browser",
    "APP_E2E_VIDEO": "video",
    "APP_E2E_DEFAULT_COMMAND_TIMEOUT": "default_command_timeout",
}

_config: E2EConfig | None = None

_BOOL = TypeAdapter(bool)


class RetryPolicy(BaseModel):
    """How many times a failing test is retried.

    Attributes:
        run_mode: Retries for headless `app-e2e run`
        open_mode: Retries for interactive (`--open`) runs
    """

    run_mode: int = Field(default=2, ge=0)
    open_mode: int = Field(default=0, ge=0)

    def for_mode(self, interactive: bool) -> int:
        return self.open_mode if interactive else self.run_mode


class E2EConfig(BaseModel):
    """Resolved configuration for the e2e suites.

    Timeouts are in milliseconds, matching Playwright.
    """

    base_url: str = "http://localhost:3000"
    viewport: Viewport = Viewport(width=1280, height=720)
    video: bool = True
    screenshot_on_run_failure: bool = True
    default_command_timeout: int = Field(default=10000, gt=0)
    request_timeout: int = Field(default=10000, gt=0)
    response_timeout: int = Field(default=10000, gt=0)
    retries: RetryPolicy = RetryPolicy()
    spec_patterns: list[str] = [
        "tests/e2e/**/test_*.py",
        "tests/e2e/**/*_spec.py",
    ]
    fixtures_folder: Path = Path("tests/e2e/fixtures")
    screenshots_folder: Path = Path("artifacts/screenshots")
    videos_folder: Path = Path("artifacts/videos")
    snapshots_folder: Path = Path("tests/e2e/__image_snapshots__")
    api_prefix: str = "/api"
    headless: bool = True
    browser: Literal["chromium", "firefox", "webkit"] = "chromium"
    tasks: dict[str, str] = {}

    def url(self, path: str = "/") -> str:
        """Join a path onto base_url."""
        if path.startswith(("http://", "https://")):
            return path
        return self.base_url.rstrip("/") + "/" + path.lstrip("/")

    @property
    def api_base_url(self) -> str:
        return self.base_url.rstrip("/") + self.api_prefix


def _find_config_file(path: Path | None) -> Path | None:
    if path is not None:
        return path
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path)
    default = Path.cwd() / DEFAULT_CONFIG_FILENAME
    return default if default.exists() else None


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except FileNotFoundError as e:
        raise ConfigError(f"Config file not found: {path}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a mapping, got {type(data).__name__}")
    return data


def _env_overrides() -> dict[str, Any]:
    overrides: dict[str, Any] = {}
    for env_var, field in _ENV_OVERRIDES.items():
        value = os.environ.get(env_var)
        if value is None:
            continue
        # Raw strings; pydantic parses "0", "no", "off" and friends
        overrides[field] = value
    return overrides


def env_flag(name: str, default: bool) -> bool:
    """Read a boolean environment variable.

    Accepts the spellings pydantic accepts for booleans
    (true/false, 1/0, yes/no, on/off), case-insensitive.

    Raises:
        ConfigError: If the variable is set to anything else
    """
    value = os.environ.get(name)
    if value is None:
        return default
    try:
        return _BOOL.validate_python(value)
    except ValidationError as e:
        raise ConfigError(f"Invalid boolean for {name}: {value!r}") from e


def load_config(path: Path | None = None) -> E2EConfig:
    """Load configuration from defaults, YAML file and environment.

    Args:
        path: Explicit YAML file. If None, $APP_E2E_CONFIG or
              ./app_e2e.yaml is used when present.

    Returns:
        Resolved E2EConfig

    Raises:
        ConfigError: If the file cannot be parsed or values are invalid
    """
    data: dict[str, Any] = {}
    config_file = _find_config_file(path)
    if config_file is not None:
        logger.debug("Loading config from %s", config_file)
        data.update(_read_yaml(config_file))
    data.update(_env_overrides())

    try:
        return E2EConfig(**data)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration: {e}") from e


def get_config() -> E2EConfig:
    """Get the process-wide configuration, loading it on first use."""
    global _config
    if _config is None:
        _config = load_config()
    return _config


def reset_config() -> None:
    """Forget the cached configuration (used by tests and the CLI)."""
    global _config
    _config = None
