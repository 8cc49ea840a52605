"""
Login and logout against the backend, with the session kept in the token store.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict

from ..exceptions import FleetAdminException, ValidationException
from ..logging_config import get_logger
from .base import Resource

logger = get_logger(__name__)

REMEMBER_ME_DAYS = 30


class AuthResource(Resource):
    """Endpoints under ``/users/auth/``."""

    async def login(self, email: str, password: str) -> Dict[str, Any]:
        """
        Log in and persist the session.

        The access token (``access``, or ``token`` on older backends) and
        the user are written to the token store, remembered for 30 days.

        Returns:
            The login response body

        Raises:
            ApiRequestError: Backend rejected the credentials
            ValidationException: Response carried no token
        """
        data = await self.client.post(
            "users/auth/login/",
            json={"email": email, "password": password},
            action="logging in",
        )
        data = data or {}
        token = data.get("access") or data.get("token")
        if not token:
            raise ValidationException("token", None, "Login response did not include a token")

        expires_at = datetime.now(timezone.utc) + timedelta(days=REMEMBER_ME_DAYS)
        self.client.token_store.save_session(token, data.get("user"), expires_at=expires_at)
        logger.info(
            "Logged in",
            extra={"extra_fields": {"email": email, "expires_at": expires_at.isoformat()}},
        )
        return data

    async def logout(self) -> None:
        """
        Log out on the backend if a session exists, then drop local auth state.

        A failing logout call is logged; local state is cleared regardless.
        """
        token_store = self.client.token_store
        try:
            if token_store.get_token():
                await self.client.post("users/auth/logout/", action="logging out")
        except FleetAdminException as error:
            logger.warning(
                "Logout API call failed, clearing local session anyway",
                extra={"extra_fields": {"error": error.message}},
            )
        finally:
            token_store.clear_auth()
