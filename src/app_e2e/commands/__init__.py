"""Custom commands for the e2e scenarios.

Every command is an async function taking a Playwright page (where one
is needed), so scenarios read as a sequence of awaited steps.
"""

from app_e2e.api.client import api_request
from app_e2e.auth.login import login
from app_e2e.commands.a11y import check_a11y, inject_axe
from app_e2e.commands.assertions import (
    assert_toast_message,
    assert_url_contains,
    assert_url_excludes,
    wait_for_loading,
)
from app_e2e.commands.network import NetworkInterceptor, url_matcher
from app_e2e.commands.performance import measure_page_load, measure_performance
from app_e2e.commands.tasks import cleanup_test_data, run_task
from app_e2e.commands.upload import upload_file
from app_e2e.commands.visual import SnapshotMatcher, match_image_snapshot
from app_e2e.selectors import data_cy

__all__ = [
    "NetworkInterceptor",
    "SnapshotMatcher",
    "api_request",
    "assert_toast_message",
    "assert_url_contains",
    "assert_url_excludes",
    "check_a11y",
    "cleanup_test_data",
    "data_cy",
    "inject_axe",
    "login",
    "match_image_snapshot",
    "measure_page_load",
    "measure_performance",
    "run_task",
    "upload_file",
    "url_matcher",
    "wait_for_loading",
]
