"""
Persistent local storage for authentication state.

A small JSON file of string keys to string values. The key layout matches what
the admin dashboard keeps in browser local storage: the session document under
``auth-storage`` plus a few legacy token keys.
"""

import json
import os
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

from .config import settings
from .logging_config import get_logger

logger = get_logger(__name__)

AUTH_STORAGE_KEY = "auth-storage"
REMEMBER_ME_EXPIRY_KEY = "rememberMeExpiry"
LEGACY_TOKEN_KEYS = ("access_token", "token", "authToken")
AUTH_KEYS = (
    AUTH_STORAGE_KEY,
    "token",
    "access_token",
    "authToken",
    "user",
    REMEMBER_ME_EXPIRY_KEY,
)


class TokenStore:
    """
    File-backed key/value store holding the bearer token.

    The file is re-read on every access so that a token written by another
    process (or another client instance) is picked up by the next request.

    Attributes:
        path: Location of the JSON storage file
    """

    def __init__(self, path: Optional[Path] = None) -> None:
        self.path = Path(path) if path is not None else settings.AUTH_STORAGE_PATH

    def _load(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            with self.path.open("r", encoding="utf-8") as handle:
                data = json.load(handle)
        except (OSError, ValueError) as error:
            logger.error(
                "Could not read token storage",
                extra={
                    "extra_fields": {
                        "path": str(self.path),
                        "error_type": type(error).__name__,
                    }
                },
            )
            return {}
        if not isinstance(data, dict):
            return {}
        return {str(key): str(value) for key, value in data.items()}

    def _save(self, data: Dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(
            dir=str(self.path.parent), prefix=".storage-", suffix=".json"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(data, handle, indent=2)
            os.replace(tmp_path, self.path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise

    def get_item(self, key: str) -> Optional[str]:
        """Return the stored value for ``key`` or None."""
        return self._load().get(key)

    def set_item(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``."""
        data = self._load()
        data[key] = value
        self._save(data)

    def remove_item(self, key: str) -> None:
        """Remove ``key`` if present."""
        data = self._load()
        if key in data:
            del data[key]
            self._save(data)

    def clear_auth(self) -> None:
        """Remove every key that holds authentication state."""
        data = self._load()
        removed = [key for key in AUTH_KEYS if data.pop(key, None) is not None]
        if removed:
            self._save(data)
            logger.info(
                "Cleared stored auth state",
                extra={"extra_fields": {"keys": removed}},
            )

    def save_session(
        self,
        token: str,
        user: Optional[Dict[str, Any]] = None,
        expires_at: Optional[datetime] = None,
    ) -> None:
        """
        Persist a logged-in session.

        Args:
            token: Bearer token returned by the login endpoint
            user: User document returned alongside the token
            expires_at: When the remembered session stops being valid
        """
        data = self._load()
        data[AUTH_STORAGE_KEY] = json.dumps(
            {
                "state": {
                    "user": user,
                    "token": token,
                    "isAuthenticated": True,
                },
                "version": 0,
            }
        )
        if expires_at is not None:
            data[REMEMBER_ME_EXPIRY_KEY] = expires_at.isoformat()
        self._save(data)

    def _session_expired(self, data: Dict[str, str]) -> bool:
        raw_expiry = data.get(REMEMBER_ME_EXPIRY_KEY)
        if not raw_expiry:
            return False
        try:
            expiry = datetime.fromisoformat(raw_expiry.replace("Z", "+00:00"))
        except ValueError:
            logger.warning(
                "Ignoring unparseable session expiry",
                extra={"extra_fields": {"value": raw_expiry}},
            )
            return False
        if expiry.tzinfo is None:
            expiry = expiry.replace(tzinfo=timezone.utc)
        return datetime.now(timezone.utc) > expiry

    def _expire_session(self, data: Dict[str, str]) -> None:
        """Null the session token and user and drop the expiry marker."""
        data.pop(REMEMBER_ME_EXPIRY_KEY, None)
        if AUTH_STORAGE_KEY in data:
            try:
                session = json.loads(data[AUTH_STORAGE_KEY])
            except ValueError:
                session = None
            if not isinstance(session, dict):
                session = {"version": 0}
            state = session.get("state")
            if not isinstance(state, dict):
                state = {}
            state.update({"token": None, "user": None, "isAuthenticated": False})
            session["state"] = state
            data[AUTH_STORAGE_KEY] = json.dumps(session)
        self._save(data)

    def get_token(self) -> Optional[str]:
        """
        Resolve the bearer token to send with API requests.

        Looks at the ``auth-storage`` session document first, then the legacy
        keys ``access_token``, ``token`` and ``authToken`` in that order.
        An expired remembered session yields no token and its expiry marker
        is removed.

        Returns:
            The token, or None when nobody is logged in
        """
        data = self._load()

        if self._session_expired(data):
            logger.info("Stored session has expired")
            self._expire_session(data)
            return None

        token: Optional[str] = None
        raw_session = data.get(AUTH_STORAGE_KEY)
        if raw_session:
            try:
                session = json.loads(raw_session)
                state = session.get("state") if isinstance(session, dict) else None
                if isinstance(state, dict) and state.get("token"):
                    token = str(state["token"])
            except ValueError as error:
                logger.error(
                    "Error parsing auth-storage",
                    extra={"extra_fields": {"error_message": str(error)}},
                )

        if not token:
            for key in LEGACY_TOKEN_KEYS:
                if data.get(key):
                    token = data[key]
                    logger.debug(
                        "Using legacy fallback token",
                        extra={"extra_fields": {"key": key}},
                    )
                    break

        return token
