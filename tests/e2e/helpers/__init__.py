"""Helper modules for E2E testing.

Modules:
    constants: Pages, test accounts and viewports
    fixture_files: Upload fixture generation
"""

from .constants import (
    ADMIN_EMAIL,
    DEFAULT_ADMIN_PASSWORD,
    TEST_EMAIL,
    TEST_PASSWORD,
    VIEWPORTS,
)
from .fixture_files import create_test_jpeg, create_test_pdf, ensure_fixture_files

__all__ = [
    "ADMIN_EMAIL",
    "DEFAULT_ADMIN_PASSWORD",
    "TEST_EMAIL",
    "TEST_PASSWORD",
    "VIEWPORTS",
    "create_test_jpeg",
    "create_test_pdf",
    "ensure_fixture_files",
]
