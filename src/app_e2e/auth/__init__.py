"""Authentication module for app-e2e.

Provides the cached login command, the session cache and test
account credential lookup.
"""

from app_e2e.auth.credentials import CredentialStore, KeyringError
from app_e2e.auth.login import login
from app_e2e.auth.session import SessionCache, get_session_cache

__all__ = ["CredentialStore", "KeyringError", "SessionCache", "get_session_cache", "login"]
