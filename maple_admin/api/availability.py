"""
Availability API Client

Marks calendar dates as open or closed for bookings.
"""

from datetime import date
from typing import List, Union

from ..exceptions import ValidationError
from ..utils.logger import get_logger
from .base import MapleAPIClient

logger = get_logger(__name__)


class AvailabilityAPI(MapleAPIClient):
    """Client for /availability."""

    def list_available_dates(self) -> List[str]:
        payload = self._request(
            "GET", "/availability/available-dates", operation="list_available_dates"
        )
        if isinstance(payload, dict) and isinstance(payload.get("dates"), list):
            return [str(value) for value in payload["dates"]]
        return [str(value) for value in self._unwrap_list(payload, "list_available_dates")]

    def set_availability(self, day: Union[str, date], is_available: bool = True) -> str:
        """
        Open or close one date.

        Returns:
            The server's confirmation message
        """
        iso_day = _normalize_day(day)
        payload = self._request(
            "POST",
            "/availability/set",
            operation="set_availability",
            context={"date": iso_day, "is_available": is_available},
            json={"date": iso_day, "isAvailable": is_available},
        )
        message = payload.get("message") if isinstance(payload, dict) else None
        logger.info(
            "Availability saved",
            operation="set_availability",
            context={"date": iso_day, "is_available": is_available},
        )
        return message or "Availability saved"


def _normalize_day(day: Union[str, date]) -> str:
    if isinstance(day, date):
        return day.isoformat()
    try:
        return date.fromisoformat(str(day).strip()).isoformat()
    except ValueError as e:
        raise ValidationError(f"Invalid date '{day}'; expected YYYY-MM-DD") from e
