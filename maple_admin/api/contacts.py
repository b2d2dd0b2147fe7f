"""
Contacts API Client

Contact-form submissions and their triage status.
"""

from typing import List, Optional

from ..domain.contact import CONTACT_STATUSES, Contact
from ..exceptions import ValidationError
from ..utils.logger import get_logger, log_operation
from .base import MapleAPIClient

logger = get_logger(__name__)


class ContactsAPI(MapleAPIClient):
    """Client for /contacts."""

    @log_operation("list_contacts")
    def list_contacts(self, status: Optional[str] = None) -> List[Contact]:
        if status is not None and status not in CONTACT_STATUSES:
            raise ValidationError(f"Unknown contact status '{status}'")

        payload = self._request("GET", "/contacts", operation="list_contacts")
        contacts = self._build_records(payload, "list_contacts", Contact.from_dict)
        if status is not None:
            contacts = [c for c in contacts if c.status == status]
        return contacts

    def update_status(self, contact_id: str, status: str) -> str:
        if status not in CONTACT_STATUSES:
            raise ValidationError(
                f"Contact status must be one of {', '.join(CONTACT_STATUSES)}"
            )
        self._request(
            "PUT",
            f"/contacts/{contact_id}",
            operation="update_contact_status",
            context={"contact_id": contact_id, "status": status},
            json={"status": status},
        )
        logger.info(
            "Contact status updated",
            operation="update_contact_status",
            context={"contact_id": contact_id, "status": status},
        )
        return status

    def advance_status(self, contact: Contact) -> str:
        """Move a submission one step along new -> read -> responded -> new."""
        applied = self.update_status(contact.contact_id, contact.next_status())
        contact.status = applied
        return applied

    def find_contact(self, contact_id: str) -> Contact:
        for contact in self.list_contacts():
            if contact.contact_id == contact_id:
                return contact
        raise ValidationError(f"Contact {contact_id} not found")
