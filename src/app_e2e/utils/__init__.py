"""Utility modules for app-e2e."""

from app_e2e.utils.logging import get_logger, setup_logging
from app_e2e.utils.retry import with_retry

__all__ = ["get_logger", "setup_logging", "with_retry"]
