"""
Bookings API Client

Fetches bookings and applies single-field status updates.
"""

from typing import List, Optional

from ..domain.booking import (
    BOOKING_STATUSES,
    PAYMENT_STATUSES,
    STATUS_CANCELLED,
    STATUS_CONFIRMED,
    STATUS_PENDING,
    Booking,
)
from ..exceptions import ValidationError
from ..utils.logger import get_logger, log_operation
from .base import MapleAPIClient

logger = get_logger(__name__)


class BookingsAPI(MapleAPIClient):
    """Client for /bookings."""

    @log_operation("list_bookings")
    def list_bookings(self, status: Optional[str] = None) -> List[Booking]:
        """
        Fetch all bookings, optionally keeping only one booking status.

        Records that fail to transform are logged and skipped.
        """
        if status is not None and status not in BOOKING_STATUSES:
            raise ValidationError(f"Unknown booking status '{status}'")

        payload = self._request("GET", "/bookings", operation="list_bookings")
        bookings = self._build_records(payload, "list_bookings", Booking.from_dict)

        if status is not None:
            bookings = [b for b in bookings if b.booking_status == status]
        return bookings

    def set_booking_status(self, booking_id: str, status: str) -> str:
        """
        PATCH the booking status.

        Returns:
            The status that was applied
        """
        if status not in BOOKING_STATUSES:
            raise ValidationError(
                f"Booking status must be one of {', '.join(BOOKING_STATUSES)}"
            )
        self._request(
            "PATCH",
            f"/bookings/{booking_id}",
            operation="update_booking_status",
            context={"booking_id": booking_id, "status": status},
            json={"bookingStatus": status},
        )
        logger.info(
            "Booking status updated",
            operation="update_booking_status",
            context={"booking_id": booking_id, "status": status},
        )
        return status

    def confirm_booking(self, booking_id: str) -> str:
        return self.set_booking_status(booking_id, STATUS_CONFIRMED)

    def cancel_booking(self, booking_id: str) -> str:
        return self.set_booking_status(booking_id, STATUS_CANCELLED)

    def toggle_confirmation(self, booking: Booking) -> str:
        """Confirmed bookings go back to pending; anything else is confirmed."""
        new_status = STATUS_PENDING if booking.is_confirmed else STATUS_CONFIRMED
        applied = self.set_booking_status(booking.booking_id, new_status)
        booking.booking_status = applied
        return applied

    def set_payment_status(self, booking_id: str, status: str) -> str:
        if status not in PAYMENT_STATUSES:
            raise ValidationError(
                f"Payment status must be one of {', '.join(PAYMENT_STATUSES)}"
            )
        self._request(
            "PATCH",
            f"/bookings/{booking_id}",
            operation="update_payment_status",
            context={"booking_id": booking_id, "status": status},
            json={"paymentStatus": status},
        )
        return status

    def find_booking(self, booking_id: str) -> Booking:
        """
        Look up one booking from the full list.

        The API exposes no single-booking read, so the list is searched.

        Raises:
            ValidationError: If no booking has that id
        """
        for booking in self.list_bookings():
            if booking.booking_id == booking_id:
                return booking
        raise ValidationError(f"Booking {booking_id} not found")
