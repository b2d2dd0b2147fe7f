"""
Maple Tours API Client

Shared HTTP plumbing for every resource client: base URL, bearer token,
timeouts, response-envelope unwrapping and error translation.
"""

from typing import Any, Callable, Dict, List, Optional, TypeVar, TYPE_CHECKING

import requests

from ..exceptions import MapleAPIError, MapleAuthenticationError, NotFoundError
from ..utils.logger import get_logger

if TYPE_CHECKING:
    from ..auth.token_store import TokenStore

logger = get_logger(__name__)

T = TypeVar("T")


class MapleAPIClient:
    """
    Base client for the Maple Tours REST API.

    Every request carries "Authorization: Bearer <token>" when the token
    store holds an admin session.
    """

    DEFAULT_BASE_URL = "https://maple-server-e7ye.onrender.com/api"
    DEFAULT_TIMEOUT = 10.0
    SNIPPET_LENGTH = 200

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        base_url: Optional[str] = None,
        token_store: Optional["TokenStore"] = None,
        timeout: Optional[float] = None,
    ):
        """
        Initialize API client.

        Args:
            session: requests.Session to send through (a new one if None)
            base_url: API root, e.g. "https://host/api"
            token_store: Source of the admin bearer token
            timeout: Per-request timeout in seconds
        """
        self.session = session or requests.Session()
        self.base_url = (base_url or self.DEFAULT_BASE_URL).rstrip("/")
        self.token_store = token_store
        self.timeout = timeout or self.DEFAULT_TIMEOUT

    def _url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    def _headers(self, extra: Optional[Dict[str, str]] = None) -> Dict[str, str]:
        headers = {"Accept": "application/json"}
        token = self.token_store.get_token() if self.token_store else None
        if token:
            headers["Authorization"] = f"Bearer {token}"
        if extra:
            headers.update(extra)
        return headers

    def _request(
        self,
        method: str,
        path: str,
        operation: str,
        context: Optional[Dict[str, Any]] = None,
        **kwargs: Any,
    ) -> Any:
        """
        Send a request and return the decoded JSON body (None when empty).

        Raises:
            MapleAuthenticationError: HTTP 401/403
            NotFoundError: HTTP 404
            MapleAPIError: any other HTTP error, network failure or bad JSON
        """
        url = self._url(path)
        headers = self._headers(kwargs.pop("headers", None))
        context = dict(context or {})

        logger.debug(f"{method} {path}", operation=operation, context=context)

        try:
            response = self.session.request(
                method, url, headers=headers, timeout=self.timeout, **kwargs
            )
            response.raise_for_status()
        except requests.HTTPError as http_err:
            raise self._translate_http_error(http_err, operation, context) from http_err
        except requests.RequestException as e:
            logger.error(
                "Request to Maple API failed",
                operation=operation,
                context=context,
                error=str(e),
            )
            raise MapleAPIError(
                f"Could not reach the Maple API during {operation}: {e}",
                operation=operation,
            ) from e

        if not response.content:
            return None

        try:
            return response.json()
        except ValueError as e:
            snippet = self._snippet(response)
            logger.error(
                "Maple API returned a non-JSON body",
                operation=operation,
                context=context,
                error=str(e),
            )
            raise MapleAPIError(
                f"Unexpected response from the Maple API during {operation}",
                operation=operation,
                status_code=response.status_code,
                response_snippet=snippet,
            ) from e

    def _translate_http_error(
        self,
        http_err: requests.HTTPError,
        operation: str,
        context: Dict[str, Any],
    ) -> MapleAPIError:
        response_obj = getattr(http_err, "response", None)
        status_code = getattr(response_obj, "status_code", None)
        snippet = self._snippet(response_obj) if response_obj is not None else None
        server_message = self._server_message(response_obj) if response_obj is not None else None

        status_fragment = f" (HTTP {status_code})" if status_code is not None else ""
        message = server_message or f"Maple API request failed during {operation}{status_fragment}"

        log_context = {**context, "status": status_code or "unknown"}
        if status_code in (401, 403):
            logger.error(
                "Authentication rejected by Maple API",
                operation=operation,
                context=log_context,
                error=str(http_err),
            )
            error_cls = MapleAuthenticationError
        elif status_code == 404:
            logger.warning(
                "Maple API record not found",
                operation=operation,
                context=log_context,
                error=str(http_err),
            )
            error_cls = NotFoundError
        else:
            logger.error(
                "Maple API request failed (HTTP error)",
                operation=operation,
                context=log_context,
                error=str(http_err),
            )
            error_cls = MapleAPIError

        return error_cls(
            message,
            operation=operation,
            status_code=status_code,
            response_snippet=snippet,
            server_message=server_message,
        )

    def _snippet(self, response: Any) -> Optional[str]:
        try:
            text = response.text
        except Exception:  # noqa: BLE001
            return None
        if not isinstance(text, str):
            return None
        return text[: self.SNIPPET_LENGTH]

    @staticmethod
    def _server_message(response: Any) -> Optional[str]:
        try:
            body = response.json()
        except Exception:  # noqa: BLE001
            return None
        if isinstance(body, dict):
            message = body.get("message") or body.get("error")
            if isinstance(message, str) and message.strip():
                return message.strip()
        return None

    def _unwrap_list(self, payload: Any, operation: str) -> List[Dict[str, Any]]:
        """
        Accept a bare JSON list or a {"data": [...]} envelope.

        Any other shape is logged and treated as empty.
        """
        if isinstance(payload, dict) and isinstance(payload.get("data"), list):
            payload = payload["data"]
        if not isinstance(payload, list):
            logger.warning(
                "Unexpected list response format",
                operation=operation,
                context={"type": type(payload).__name__},
            )
            return []

        records = [record for record in payload if isinstance(record, dict)]
        if len(records) != len(payload):
            logger.warning(
                "Dropped list entries that are not JSON objects",
                operation=operation,
                context={"dropped": len(payload) - len(records)},
            )
        return records

    def _build_records(
        self, payload: Any, operation: str, factory: Callable[[Dict[str, Any]], T]
    ) -> List[T]:
        """
        Unwrap a list response and transform each record with factory.

        Records that fail to transform are logged and skipped.
        """
        results = []
        for record in self._unwrap_list(payload, operation):
            try:
                results.append(factory(record))
            except (AttributeError, KeyError, TypeError, ValueError) as e:
                logger.warning(
                    f"Failed to transform record {record.get('_id')}",
                    operation=operation,
                    error=str(e),
                )
        return results

    @staticmethod
    def _unwrap_item(payload: Any) -> Dict[str, Any]:
        if isinstance(payload, dict) and isinstance(payload.get("data"), dict):
            return payload["data"]
        if isinstance(payload, dict):
            return payload
        return {}
