"""
Admin session domain model.

Holds the bearer token issued at login, persisted between CLI invocations
by the token store.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass
class AdminSession:
    """
    Stored admin login.

    Attributes:
        token: Bearer token sent with every API request
        email: Email the operator logged in with
        issued_at: ISO-8601 timestamp of the login
    """

    token: str
    email: Optional[str] = None
    issued_at: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AdminSession":
        """Create AdminSession from the stored JSON document."""
        return cls(
            token=data.get("token", ""),
            email=data.get("email"),
            issued_at=data.get("issued_at"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"token": self.token, "email": self.email, "issued_at": self.issued_at}

    def is_empty(self) -> bool:
        """Check if the session carries no usable token."""
        return not (self.token or "").strip()
