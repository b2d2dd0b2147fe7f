"""
Unit tests for AdminAuthenticator.

Remote mode is exercised with a mocked AuthAPI; local mode with credentials
from the environment.
"""

from unittest.mock import Mock

import pytest

from maple_admin.api.auth import AuthAPI
from maple_admin.auth.admin_login import (
    INVALID_CREDENTIALS_MESSAGE,
    LOCAL_SESSION_TOKEN,
    AdminAuthenticator,
)
from maple_admin.auth.token_store import TokenStore
from maple_admin.config.settings import Settings
from maple_admin.domain.session import AdminSession
from maple_admin.exceptions import MapleAuthenticationError, NotAuthenticatedError


@pytest.fixture
def token_store(tmp_path):
    return TokenStore(tmp_path / "session.json")


@pytest.fixture
def auth_api():
    api = Mock(spec=AuthAPI)
    api.login.return_value = "jwt-token-123"
    return api


@pytest.fixture
def remote_authenticator(token_store, auth_api):
    return AdminAuthenticator(Settings(), token_store, auth_api=auth_api)


@pytest.fixture
def local_authenticator(monkeypatch, token_store):
    monkeypatch.setenv("MAPLE_AUTH_MODE", "local")
    monkeypatch.setenv("MAPLE_ADMIN_EMAIL", "ops@maple.com")
    monkeypatch.setenv("MAPLE_ADMIN_PASSWORD", "correct-horse")
    return AdminAuthenticator(Settings(), token_store)


class TestRemoteLogin:
    def test_login_stores_issued_token(self, remote_authenticator, auth_api, token_store):
        session = remote_authenticator.login("ops@maple.com", "pw")

        auth_api.login.assert_called_once_with(email="ops@maple.com", password="pw")
        assert session.token == "jwt-token-123"
        assert session.email == "ops@maple.com"
        assert session.issued_at.endswith("Z")
        assert token_store.get_token() == "jwt-token-123"

    def test_existing_session_is_reused(self, remote_authenticator, auth_api, token_store):
        token_store.save_session(AdminSession(token="kept-token", email="ops@maple.com"))

        session = remote_authenticator.login("ops@maple.com", "pw")

        assert session.token == "kept-token"
        auth_api.login.assert_not_called()

    def test_force_logs_in_again(self, remote_authenticator, auth_api, token_store):
        token_store.save_session(AdminSession(token="old-token"))

        remote_authenticator.login("ops@maple.com", "pw", force=True)

        assert token_store.get_token() == "jwt-token-123"

    def test_rejected_credentials_store_nothing(self, remote_authenticator, auth_api, token_store):
        auth_api.login.side_effect = MapleAuthenticationError("Invalid credentials", status_code=401)

        with pytest.raises(MapleAuthenticationError):
            remote_authenticator.login("ops@maple.com", "wrong")

        assert token_store.get_session() is None

    @pytest.mark.parametrize("email,password", [("", "pw"), ("ops@maple.com", "")])
    def test_blank_credentials_rejected(self, remote_authenticator, auth_api, email, password):
        with pytest.raises(MapleAuthenticationError, match=INVALID_CREDENTIALS_MESSAGE):
            remote_authenticator.login(email, password)
        auth_api.login.assert_not_called()


class TestLocalLogin:
    def test_matching_credentials(self, local_authenticator, token_store):
        session = local_authenticator.login("ops@maple.com", "correct-horse")

        assert session.token == LOCAL_SESSION_TOKEN
        assert token_store.get_token() == LOCAL_SESSION_TOKEN

    def test_wrong_password(self, local_authenticator, token_store):
        with pytest.raises(MapleAuthenticationError, match=INVALID_CREDENTIALS_MESSAGE):
            local_authenticator.login("ops@maple.com", "battery-staple")

        assert token_store.get_session() is None

    def test_wrong_email(self, local_authenticator):
        with pytest.raises(MapleAuthenticationError):
            local_authenticator.login("someone@maple.com", "correct-horse")

    @pytest.mark.parametrize("email", ["Ops@Maple.com", " ops@maple.com"])
    def test_email_must_match_exactly(self, local_authenticator, token_store, email):
        with pytest.raises(MapleAuthenticationError):
            local_authenticator.login(email, "correct-horse")
        assert token_store.get_session() is None


class TestSessionGate:
    def test_require_session_without_login(self, remote_authenticator):
        with pytest.raises(NotAuthenticatedError, match="maple-admin login"):
            remote_authenticator.require_session()

    def test_require_session_after_login(self, remote_authenticator):
        remote_authenticator.login("ops@maple.com", "pw")

        assert remote_authenticator.is_authenticated() is True
        assert remote_authenticator.require_session().token == "jwt-token-123"

    def test_logout_clears_session(self, remote_authenticator):
        remote_authenticator.login("ops@maple.com", "pw")

        assert remote_authenticator.logout() is True
        assert remote_authenticator.is_authenticated() is False

    def test_invalidate_clears_session(self, remote_authenticator):
        remote_authenticator.login("ops@maple.com", "pw")

        remote_authenticator.invalidate(MapleAuthenticationError("expired", status_code=401))

        assert remote_authenticator.is_authenticated() is False
