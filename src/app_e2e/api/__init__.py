"""API module for app-e2e.

Provides direct HTTP access to the application's API.
"""

from app_e2e.api.client import ApiClient, api_request, bearer

__all__ = ["ApiClient", "api_request", "bearer"]
