"""Registered site user domain model."""

from dataclasses import dataclass
from typing import Any, Dict


@dataclass
class User:
    user_id: str
    first_name: str = ""
    email: str = ""
    phone: str = ""
    role: str = "user"

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "User":
        return cls(
            user_id=str(data.get("_id", "")),
            first_name=data.get("firstName") or data.get("name") or "",
            email=data.get("email") or "",
            phone=data.get("phone") or "",
            role=data.get("role") or "user",
        )
