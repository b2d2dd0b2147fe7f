"""Domain models - records mirrored from the Maple Tours API."""

from .booking import Booking
from .contact import Contact
from .package import Package
from .session import AdminSession
from .testimonial import Testimonial
from .user import User

__all__ = ["AdminSession", "Booking", "Contact", "Package", "Testimonial", "User"]
