"""API module - clients for the Maple Tours REST API."""

from .auth import AuthAPI
from .availability import AvailabilityAPI
from .base import MapleAPIClient
from .bookings import BookingsAPI
from .contacts import ContactsAPI
from .packages import PackagesAPI
from .testimonials import TestimonialsAPI
from .users import UsersAPI

__all__ = [
    "AuthAPI",
    "AvailabilityAPI",
    "BookingsAPI",
    "ContactsAPI",
    "MapleAPIClient",
    "PackagesAPI",
    "TestimonialsAPI",
    "UsersAPI",
]
