"""Fixtures applied to every unit test.

Unit tests run in an empty working directory with no APP_E2E_*
variables, so neither a local app_e2e.yaml nor the developer's
environment changes the configuration under test.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Generator
from pathlib import Path
from unittest.mock import patch

import pytest

import app_e2e.auth.session as session_module
from app_e2e.config import reset_config


@pytest.fixture(autouse=True)
def isolated_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Clean environment, cwd, cached config and session cache."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(session_module, "_default_cache", None)

    package_logger = logging.getLogger("app_e2e")
    saved_level = package_logger.level
    saved_handlers = package_logger.handlers[:]
    package_logger.setLevel(logging.NOTSET)
    for handler in saved_handlers:
        package_logger.removeHandler(handler)

    with patch.dict(os.environ):
        for key in [k for k in os.environ if k.startswith("APP_E2E_")]:
            del os.environ[key]
        reset_config()
        yield
        reset_config()

    for handler in package_logger.handlers[:]:
        package_logger.removeHandler(handler)
    for handler in saved_handlers:
        package_logger.addHandler(handler)
    package_logger.setLevel(saved_level)
