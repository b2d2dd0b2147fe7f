"""
Dashboard statistics.

Aggregates the five resource lists into the headline numbers shown on the
admin home page. A failure in any fetch resets every number to zero and
records the error, so the dashboard still renders.
"""

from dataclasses import dataclass, field
from typing import List, Optional

from ..api.bookings import BookingsAPI
from ..api.contacts import ContactsAPI
from ..api.packages import PackagesAPI
from ..api.testimonials import TestimonialsAPI
from ..api.users import UsersAPI
from ..domain.booking import STATUS_CANCELLED, STATUS_CONFIRMED, STATUS_PENDING, Booking
from ..domain.contact import Contact
from ..domain.package import Package
from ..exceptions import MapleAPIError
from ..utils.logger import get_logger

logger = get_logger(__name__)

RECENT_LIMIT = 5


@dataclass
class DashboardStats:
    active_packages: int = 0
    total_users: int = 0
    testimonial_count: int = 0
    contact_form_count: int = 0
    total_bookings: int = 0
    pending_bookings: int = 0
    confirmed_bookings: int = 0
    cancelled_bookings: int = 0
    total_revenue: float = 0.0
    recent_packages: List[Package] = field(default_factory=list)
    recent_contacts: List[Contact] = field(default_factory=list)
    recent_bookings: List[Booking] = field(default_factory=list)
    error: Optional[str] = None

    def summary_rows(self) -> List[dict]:
        """Metric/Count rows for the report's summary sheet."""
        return [
            {"Metric": "Active Packages", "Count": self.active_packages},
            {"Metric": "Total Users", "Count": self.total_users},
            {"Metric": "Total Testimonials", "Count": self.testimonial_count},
            {"Metric": "Contact Inquiries", "Count": self.contact_form_count},
            {"Metric": "Total Bookings", "Count": self.total_bookings},
            {"Metric": "Pending Bookings", "Count": self.pending_bookings},
            {"Metric": "Confirmed Bookings", "Count": self.confirmed_bookings},
            {"Metric": "Cancelled Bookings", "Count": self.cancelled_bookings},
            {"Metric": "Total Revenue", "Count": self.total_revenue},
        ]


def summarize_bookings(bookings: List[Booking], stats: DashboardStats) -> None:
    stats.total_bookings = len(bookings)
    stats.pending_bookings = sum(1 for b in bookings if b.booking_status == STATUS_PENDING)
    stats.confirmed_bookings = sum(1 for b in bookings if b.booking_status == STATUS_CONFIRMED)
    stats.cancelled_bookings = sum(1 for b in bookings if b.booking_status == STATUS_CANCELLED)
    stats.total_revenue = sum(b.total_amount for b in bookings if b.counts_towards_revenue())
    stats.recent_bookings = bookings[:RECENT_LIMIT]


def collect_dashboard_stats(
    packages_api: PackagesAPI,
    users_api: UsersAPI,
    testimonials_api: TestimonialsAPI,
    contacts_api: ContactsAPI,
    bookings_api: BookingsAPI,
) -> DashboardStats:
    """
    Fetch every list and compute the dashboard numbers.

    Never raises MapleAPIError; the returned stats carry the error instead.
    Authentication failures are re-raised so the caller can clear the token.
    """
    try:
        packages = packages_api.list_packages()
        users = users_api.list_users()
        testimonials = testimonials_api.list_testimonials()
        contacts = contacts_api.list_contacts()
        bookings = bookings_api.list_bookings()
    except MapleAPIError as e:
        if e.status_code in (401, 403):
            raise
        logger.error(
            "Failed to load dashboard statistics",
            operation="collect_dashboard_stats",
            error=str(e),
        )
        return DashboardStats(error=f"Failed to load dashboard statistics: {e}")

    stats = DashboardStats(
        active_packages=len(packages),
        total_users=len(users),
        testimonial_count=len(testimonials),
        contact_form_count=len(contacts),
        recent_packages=packages[:RECENT_LIMIT],
        recent_contacts=contacts[:RECENT_LIMIT],
    )
    summarize_bookings(bookings, stats)
    logger.info(
        "Dashboard statistics loaded",
        operation="collect_dashboard_stats",
        context={"packages": stats.active_packages, "bookings": stats.total_bookings},
    )
    return stats
