"""Users API Client"""

from typing import List

from ..domain.user import User
from .base import MapleAPIClient


class UsersAPI(MapleAPIClient):
    """Client for /admin/users. Read-only."""

    def list_users(self) -> List[User]:
        payload = self._request("GET", "/admin/users", operation="list_users")
        return self._build_records(payload, "list_users", User.from_dict)
