"""Contact-form submission domain model."""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

STATUS_NEW = "new"
STATUS_READ = "read"
STATUS_RESPONDED = "responded"
CONTACT_STATUSES = (STATUS_NEW, STATUS_READ, STATUS_RESPONDED)

# Triage cycle used by the status selector: new -> read -> responded -> new
NEXT_STATUS = {
    STATUS_NEW: STATUS_READ,
    STATUS_READ: STATUS_RESPONDED,
    STATUS_RESPONDED: STATUS_NEW,
}


@dataclass
class Contact:
    contact_id: str
    first_name: str = ""
    last_name: str = ""
    email: str = ""
    phone: str = ""
    message: str = ""
    status: str = STATUS_NEW
    created_at: Optional[str] = None
    extra_fields: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Contact":
        handled = {"_id", "firstName", "lastName", "email", "phone", "message", "status", "createdAt"}
        status = str(data.get("status") or STATUS_NEW).lower()
        if status not in CONTACT_STATUSES:
            status = STATUS_NEW
        return cls(
            contact_id=str(data.get("_id", "")),
            first_name=data.get("firstName") or "",
            last_name=data.get("lastName") or "",
            email=data.get("email") or "",
            phone=data.get("phone") or "",
            message=data.get("message") or "",
            status=status,
            created_at=data.get("createdAt"),
            extra_fields={k: v for k, v in data.items() if k not in handled},
        )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def next_status(self) -> str:
        return NEXT_STATUS[self.status]
