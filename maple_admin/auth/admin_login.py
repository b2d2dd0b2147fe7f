"""
Admin login gate.

Issues and stores the admin bearer token, either by calling the API's login
endpoint (remote mode) or by comparing against configured credentials
(local mode).
"""

import hmac
from datetime import datetime, timezone
from typing import Optional

from ..api.auth import AuthAPI
from ..config.settings import Settings
from ..domain.session import AdminSession
from ..exceptions import MapleAuthenticationError, NotAuthenticatedError
from ..utils.logger import get_logger, mask_email
from .token_store import TokenStore

logger = get_logger(__name__)

LOCAL_SESSION_TOKEN = "authenticated"
INVALID_CREDENTIALS_MESSAGE = "Invalid email or password"


class AdminAuthenticator:
    """Login, logout and the "must be logged in" check for every command."""

    def __init__(
        self,
        settings: Settings,
        token_store: TokenStore,
        auth_api: Optional[AuthAPI] = None,
    ):
        self.settings = settings
        self.token_store = token_store
        self.auth_api = auth_api

    def login(self, email: str, password: str, force: bool = False) -> AdminSession:
        """
        Log in and persist the session.

        An existing session is returned unchanged unless force is set.

        Raises:
            MapleAuthenticationError: If the credentials are rejected
        """
        existing = self.token_store.get_session()
        if existing and not force:
            logger.info(
                "Already logged in; reusing stored session",
                operation="admin_login",
                context={"email": mask_email(existing.email)},
            )
            return existing

        if not email or not password:
            raise MapleAuthenticationError(INVALID_CREDENTIALS_MESSAGE, operation="admin_login")

        if self.settings.is_local_auth():
            token = self._local_login(email, password)
        else:
            token = self._remote_login(email, password)

        session = AdminSession(
            token=token,
            email=email,
            issued_at=datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
        )
        if not self.token_store.save_session(session):
            logger.warning(
                "Login succeeded but the session could not be stored",
                operation="admin_login",
            )
        logger.info(
            "Admin logged in",
            operation="admin_login",
            context={"email": mask_email(email), "mode": self.settings.auth_mode},
        )
        return session

    def _remote_login(self, email: str, password: str) -> str:
        if self.auth_api is None:
            self.auth_api = AuthAPI(
                base_url=self.settings.api_base_url,
                timeout=self.settings.api_timeout,
            )
        return self.auth_api.login(email=email, password=password)

    def _local_login(self, email: str, password: str) -> str:
        expected = self.settings.load_admin_credentials()
        email_ok = hmac.compare_digest(email.encode(), expected["email"].encode())
        password_ok = hmac.compare_digest(password.encode(), expected["password"].encode())
        if not (email_ok and password_ok):
            logger.warning(
                "Rejected admin login",
                operation="admin_login",
                context={"email": mask_email(email)},
            )
            raise MapleAuthenticationError(INVALID_CREDENTIALS_MESSAGE, operation="admin_login")
        return LOCAL_SESSION_TOKEN

    def logout(self) -> bool:
        return self.token_store.clear_session()

    def is_authenticated(self) -> bool:
        return self.token_store.get_session() is not None

    def require_session(self) -> AdminSession:
        """
        Raises:
            NotAuthenticatedError: If no admin session is stored
        """
        session = self.token_store.get_session()
        if session is None:
            raise NotAuthenticatedError("Not logged in; run `maple-admin login`")
        return session

    def invalidate(self, error: Optional[MapleAuthenticationError] = None) -> None:
        """Drop the stored token after the API rejected it."""
        logger.warning(
            "Stored admin token rejected by the API; clearing session",
            operation="admin_session_invalidate",
            context={"status_code": getattr(error, "status_code", None)},
            error=str(error) if error else None,
        )
        self.token_store.clear_session()
