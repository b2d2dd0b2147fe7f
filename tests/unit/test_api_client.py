"""
Unit tests for MapleAPIClient and AuthAPI.

Covers URL building, bearer headers, response unwrapping and the mapping of
HTTP failures onto the exception hierarchy.
"""

import pytest
import requests

from maple_admin.api.auth import AuthAPI
from maple_admin.api.base import MapleAPIClient
from maple_admin.auth.token_store import TokenStore
from maple_admin.domain.session import AdminSession
from maple_admin.exceptions import MapleAPIError, MapleAuthenticationError, NotFoundError

BASE_URL = "http://api.test/api"


@pytest.fixture
def token_store(tmp_path):
    store = TokenStore(tmp_path / "session.json")
    store.save_session(AdminSession(token="jwt-abc"))
    return store


@pytest.fixture
def client(http_session, token_store):
    return MapleAPIClient(session=http_session, base_url=BASE_URL + "/", token_store=token_store, timeout=5)


def test_request_sends_bearer_token_and_timeout(client, http_session, response_factory):
    http_session.request.return_value = response_factory([{"_id": "p1"}])

    result = client._request("GET", "/packages", operation="list_packages")

    assert result == [{"_id": "p1"}]
    call = http_session.request.call_args
    assert call.args == ("GET", "http://api.test/api/packages")
    assert call.kwargs["headers"]["Authorization"] == "Bearer jwt-abc"
    assert call.kwargs["headers"]["Accept"] == "application/json"
    assert call.kwargs["timeout"] == 5


def test_request_without_token_omits_authorization(http_session, response_factory):
    http_session.request.return_value = response_factory({"ok": True})
    client = MapleAPIClient(session=http_session, base_url=BASE_URL)

    client._request("GET", "packages", operation="list_packages")

    assert "Authorization" not in http_session.request.call_args.kwargs["headers"]


def test_empty_body_returns_none(client, http_session, response_factory):
    http_session.request.return_value = response_factory(None)

    assert client._request("DELETE", "/packages/p1", operation="delete_package") is None


def test_non_json_body_raises(client, http_session, response_factory):
    http_session.request.return_value = response_factory(text="<html>maintenance</html>")

    with pytest.raises(MapleAPIError) as exc_info:
        client._request("GET", "/packages", operation="list_packages")

    assert exc_info.value.response_snippet == "<html>maintenance</html>"


@pytest.mark.parametrize("status_code", [401, 403])
def test_auth_failures_raise_authentication_error(client, http_session, response_factory, status_code):
    http_session.request.return_value = response_factory({"message": "Token expired"}, status_code)

    with pytest.raises(MapleAuthenticationError) as exc_info:
        client._request("GET", "/bookings", operation="list_bookings")

    assert exc_info.value.status_code == status_code
    assert str(exc_info.value) == "Token expired"


def test_not_found_raises_not_found(client, http_session, response_factory):
    http_session.request.return_value = response_factory({"error": "Package not found"}, 404)

    with pytest.raises(NotFoundError, match="Package not found"):
        client._request("GET", "/packages/nope", operation="get_package")


def test_server_error_without_message(client, http_session, response_factory):
    http_session.request.return_value = response_factory(text="Internal Server Error", status_code=500)

    with pytest.raises(MapleAPIError) as exc_info:
        client._request("GET", "/contacts", operation="list_contacts")

    error = exc_info.value
    assert not isinstance(error, (MapleAuthenticationError, NotFoundError))
    assert str(error) == "Maple API request failed during list_contacts (HTTP 500)"
    assert error.operation == "list_contacts"
    assert error.response_snippet == "Internal Server Error"


def test_network_failure_wrapped(client, http_session):
    http_session.request.side_effect = requests.ConnectionError("connection refused")

    with pytest.raises(MapleAPIError, match="Could not reach the Maple API during list_users"):
        client._request("GET", "/admin/users", operation="list_users")


def test_unwrap_list_accepts_envelope(client):
    assert client._unwrap_list({"data": [{"_id": "1"}]}, "list") == [{"_id": "1"}]
    assert client._unwrap_list([{"_id": "2"}], "list") == [{"_id": "2"}]
    assert client._unwrap_list({"unexpected": True}, "list") == []


def test_unwrap_list_drops_non_objects(client):
    assert client._unwrap_list([{"_id": "1"}, "garbage", None, 3], "list") == [{"_id": "1"}]
    assert client._unwrap_list({"data": [None]}, "list") == []


def test_build_records_skips_failed_transforms(client):
    def factory(record):
        if record["_id"] == "bad":
            raise ValueError("unparseable")
        return record["_id"]

    payload = [{"_id": "1"}, {"_id": "bad"}, "garbage", {"_id": "2"}]

    assert client._build_records(payload, "list", factory) == ["1", "2"]


def test_unwrap_item(client):
    assert client._unwrap_item({"data": {"_id": "1"}}) == {"_id": "1"}
    assert client._unwrap_item({"_id": "2"}) == {"_id": "2"}
    assert client._unwrap_item(None) == {}


class TestAuthAPI:
    def test_login_posts_credentials(self, http_session, response_factory):
        http_session.request.return_value = response_factory({"token": "jwt-new"})
        api = AuthAPI(session=http_session, base_url=BASE_URL)

        assert api.login(email="ops@maple.com", password="pw") == "jwt-new"

        call = http_session.request.call_args
        assert call.args == ("POST", "http://api.test/api/auth/login")
        assert call.kwargs["json"] == {"email": "ops@maple.com", "password": "pw"}

    def test_login_reads_nested_token(self, http_session, response_factory):
        http_session.request.return_value = response_factory({"data": {"accessToken": "jwt-nested"}})
        api = AuthAPI(session=http_session, base_url=BASE_URL)

        assert api.login(email="ops@maple.com", password="pw") == "jwt-nested"

    def test_login_without_token(self, http_session, response_factory):
        http_session.request.return_value = response_factory({"message": "ok"})
        api = AuthAPI(session=http_session, base_url=BASE_URL)

        with pytest.raises(MapleAuthenticationError, match="did not include a token"):
            api.login(email="ops@maple.com", password="pw")

    def test_login_rejected(self, http_session, response_factory):
        http_session.request.return_value = response_factory({"message": "Invalid credentials"}, 401)
        api = AuthAPI(session=http_session, base_url=BASE_URL)

        with pytest.raises(MapleAuthenticationError, match="Invalid credentials"):
            api.login(email="ops@maple.com", password="bad")
