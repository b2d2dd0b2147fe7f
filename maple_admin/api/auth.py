"""Auth API Client - exchanges admin credentials for a bearer token."""

from typing import Any, Optional

from ..exceptions import MapleAuthenticationError
from ..utils.logger import get_logger, log_operation
from .base import MapleAPIClient

logger = get_logger(__name__)


class AuthAPI(MapleAPIClient):
    """Client for /auth/login."""

    @log_operation("admin_login")
    def login(self, email: str, password: str) -> str:
        """
        POST credentials and return the issued token.

        Raises:
            MapleAuthenticationError: rejected credentials or no token in the response
        """
        payload = self._request(
            "POST",
            "/auth/login",
            operation="admin_login",
            json={"email": email, "password": password},
        )
        token = _extract_token(payload)
        if not token:
            raise MapleAuthenticationError(
                "Login response did not include a token", operation="admin_login"
            )
        return token


def _extract_token(payload: Any) -> Optional[str]:
    if not isinstance(payload, dict):
        return None
    for key in ("token", "accessToken"):
        if isinstance(payload.get(key), str) and payload[key]:
            return payload[key]
    data = payload.get("data")
    if isinstance(data, dict):
        return _extract_token(data)
    return None
