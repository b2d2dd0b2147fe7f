"""
Exception hierarchy for Maple Tours API operations.

Every failure reported to the operator is one of these, so the CLI can map
them to a message and exit code without inspecting requests internals.
"""

from typing import Optional


class MapleAPIError(RuntimeError):
    """
    Base exception for all API-related errors.

    Attributes:
        operation: Client operation that failed (e.g. "list_bookings")
        status_code: HTTP status code, when a response was received
        response_snippet: First 200 characters of the response body
        server_message: The API's own "message" field, when present
    """

    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        status_code: Optional[int] = None,
        response_snippet: Optional[str] = None,
        server_message: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.operation = operation
        self.status_code = status_code
        self.response_snippet = response_snippet
        self.server_message = server_message


class MapleAuthenticationError(MapleAPIError):
    """
    Raised when the API rejects the stored token (HTTP 401/403)
    or the login credentials are wrong.
    """

    pass


class NotFoundError(MapleAPIError):
    """Raised when the requested record does not exist (HTTP 404)."""

    pass


class ValidationError(ValueError):
    """
    Raised when a form fails client-side validation.

    No request is sent when this is raised.
    """

    pass


class NotAuthenticatedError(RuntimeError):
    """Raised when an operation needs a stored admin token and none exists."""

    pass
