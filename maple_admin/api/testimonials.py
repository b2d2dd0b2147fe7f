"""
Testimonials API Client

Moderation of customer testimonials: approve, reject, delete.
"""

from typing import List

from ..domain.testimonial import Testimonial
from ..utils.logger import get_logger, log_operation
from .base import MapleAPIClient

logger = get_logger(__name__)


class TestimonialsAPI(MapleAPIClient):
    """Client for /testimonials."""

    # Not a test class, despite the name
    __test__ = False

    @log_operation("list_testimonials")
    def list_testimonials(self, pending_only: bool = False) -> List[Testimonial]:
        payload = self._request("GET", "/testimonials", operation="list_testimonials")
        testimonials = self._build_records(payload, "list_testimonials", Testimonial.from_dict)
        if pending_only:
            testimonials = [t for t in testimonials if not t.approved]
        return testimonials

    def set_approval(self, testimonial_id: str, approved: bool) -> bool:
        self._request(
            "PUT",
            f"/testimonials/{testimonial_id}",
            operation="update_testimonial_approval",
            context={"testimonial_id": testimonial_id, "approved": approved},
            json={"isApproved": approved},
        )
        logger.info(
            f"Testimonial {'approved' if approved else 'rejected'}",
            operation="update_testimonial_approval",
            context={"testimonial_id": testimonial_id},
        )
        return approved

    def approve(self, testimonial_id: str) -> bool:
        return self.set_approval(testimonial_id, True)

    def reject(self, testimonial_id: str) -> bool:
        return self.set_approval(testimonial_id, False)

    @log_operation("delete_testimonial")
    def delete_testimonial(self, testimonial_id: str) -> None:
        self._request(
            "DELETE",
            f"/testimonials/{testimonial_id}",
            operation="delete_testimonial",
            context={"testimonial_id": testimonial_id},
        )
