"""Session cache for the login command.

Caches the browser storage state produced by a login so later tests can
restore it instead of driving the login form again. Entries live in memory
for the lifetime of the test process and, when persistence is enabled,
also as JSON files so they survive across runs.
"""

from __future__ import annotations

import hashlib
import json
import logging
import os
from pathlib import Path
from typing import TYPE_CHECKING

from pydantic import ValidationError

from app_e2e.config import env_flag
from app_e2e.models import SessionState

if TYPE_CHECKING:
    from collections.abc import Sequence

logger = logging.getLogger(__name__)

SESSIONS_DIRNAME = "sessions"


def _get_default_data_dir() -> Path:
    """Get the default data directory for persisted sessions.

    Returns:
        Path to data directory. Priority:
        1. APP_E2E_DATA_DIR environment variable
        2. ./.app-e2e (project local)
    """
    env_dir = os.environ.get("APP_E2E_DATA_DIR")
    if env_dir:
        return Path(env_dir)
    return Path.cwd() / ".app-e2e"


def session_key(parts: Sequence[object]) -> str:
    """Derive a stable cache key from session id parts.

    The parts usually contain credentials, so the key is a digest
    rather than the parts themselves.

    Args:
        parts: Values identifying the session (e.g. [email, password])

    Returns:
        Hex digest usable as a file name
    """
    encoded = json.dumps(list(parts), sort_keys=True, default=str)
    return hashlib.sha256(encoded.encode("utf-8")).hexdigest()[:32]


class SessionCache:
    """Storage for cached login sessions.

    Attributes:
        persist: Whether sessions are also written to disk
        data_dir: Directory holding the sessions folder
        sessions_dir: Folder with one JSON file per session
    """

    def __init__(self, data_dir: Path | None = None, persist: bool = False) -> None:
        """Initialize SessionCache.

        Args:
            data_dir: Storage directory for persisted sessions.
                      Default: $APP_E2E_DATA_DIR or ./.app-e2e
            persist: Write sessions to disk in addition to memory
        """
        self.persist = persist
        self.data_dir = data_dir or _get_default_data_dir()
        self.sessions_dir = self.data_dir / SESSIONS_DIRNAME
        self._memory: dict[str, SessionState] = {}

    def _path(self, key: str) -> Path:
        return self.sessions_dir / f"{key}.json"

    def put(self, session: SessionState) -> None:
        """Store a session.

        Args:
            session: Session state to cache

        Raises:
            OSError: If persistence is enabled and the file cannot be written
        """
        self._memory[session.session_id] = session
        if not self.persist:
            return

        self.sessions_dir.mkdir(parents=True, exist_ok=True)
        with open(self._path(session.session_id), "w", encoding="utf-8") as f:
            json.dump(session.model_dump(), f, ensure_ascii=False, indent=2)
        logger.debug(f"Session saved to {self._path(session.session_id)}")

    def get(self, key: str) -> SessionState | None:
        """Look up a session.

        Expired sessions are dropped and reported as missing.

        Returns:
            SessionState if found and valid, None otherwise
        """
        session = self._memory.get(key)
        if session is None and self.persist:
            session = self._load(key)
            if session is not None:
                self._memory[key] = session

        if session is not None and session.is_expired():
            logger.debug(f"Session {key} expired")
            self.clear(key)
            return None
        return session

    def _load(self, key: str) -> SessionState | None:
        path = self._path(key)
        if not path.exists():
            return None

        try:
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
            return SessionState(**data)
        except json.JSONDecodeError as e:
            logger.error(f"Session file corrupted (invalid JSON): {e}")
            logger.info(f"Consider deleting corrupted file: {path}")
            return None
        except (TypeError, ValidationError) as e:
            logger.error(f"Session file has invalid data structure: {e}")
            logger.info(f"Consider deleting invalid file: {path}")
            return None
        except OSError as e:
            logger.warning(f"Failed to read session file: {e}")
            return None

    def has(self, key: str) -> bool:
        return self.get(key) is not None

    def clear(self, key: str | None = None) -> int:
        """Remove one session, or all of them.

        Args:
            key: Session key to remove; None removes every session

        Returns:
            Number of persisted session files deleted
        """
        if key is None:
            self._memory.clear()
            paths = list(self.sessions_dir.glob("*.json")) if self.sessions_dir.exists() else []
        else:
            self._memory.pop(key, None)
            paths = [self._path(key)] if self._path(key).exists() else []

        deleted = 0
        for path in paths:
            try:
                path.unlink()
                deleted += 1
            except OSError as e:
                logger.error(f"Failed to delete session file {path}: {e}")
        return deleted


_default_cache: SessionCache | None = None


def get_session_cache() -> SessionCache:
    """Get the process-wide session cache.

    Persistence is enabled with APP_E2E_CACHE_SESSIONS=true.
    """
    global _default_cache
    if _default_cache is None:
        persist = env_flag("APP_E2E_CACHE_SESSIONS", False)
        _default_cache = SessionCache(persist=persist)
    return _default_cache
