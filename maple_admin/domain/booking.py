"""
Booking domain model.

Mirrors the booking records returned by the API. Two record shapes exist in
the wild: the current one (bookingStatus/paymentStatus/totalAmount/startDate)
and a legacy one (status "Confirmed"/"Not Confirmed", date, card fields).
Both are normalised into the same model.
"""

from dataclasses import dataclass, field, asdict
from typing import Any, Dict, Optional

STATUS_PENDING = "pending"
STATUS_CONFIRMED = "confirmed"
STATUS_CANCELLED = "cancelled"
BOOKING_STATUSES = (STATUS_PENDING, STATUS_CONFIRMED, STATUS_CANCELLED)

PAYMENT_PENDING = "pending"
PAYMENT_COMPLETED = "completed"
PAYMENT_FAILED = "failed"
PAYMENT_STATUSES = (PAYMENT_PENDING, PAYMENT_COMPLETED, PAYMENT_FAILED)

# Legacy "status" values from the first version of the bookings page
_LEGACY_STATUS_MAP = {
    "confirmed": STATUS_CONFIRMED,
    "not confirmed": STATUS_PENDING,
}

# API keys mapped onto model attributes
_CORE_KEYS = {
    "_id": "booking_id",
    "firstName": "first_name",
    "lastName": "last_name",
    "email": "email",
    "phone": "phone",
    "adults": "adults",
    "children": "children",
    "cardName": "card_name",
    "cardNumber": "card_number",
    "expiryDate": "expiry_date",
    "cvv": "cvv",
    "totalAmount": "total_amount",
    "paymentStatus": "payment_status",
}
_HANDLED_KEYS = set(_CORE_KEYS) | {"package", "startDate", "date", "bookingStatus", "status"}


def normalize_booking_status(value: Optional[str]) -> str:
    """
    Map any booking status the API has ever produced onto
    pending/confirmed/cancelled. Missing values mean pending.
    """
    if not value:
        return STATUS_PENDING
    lowered = str(value).strip().lower()
    if lowered in BOOKING_STATUSES:
        return lowered
    return _LEGACY_STATUS_MAP.get(lowered, STATUS_PENDING)


@dataclass
class Booking:
    """
    Booking domain model.

    Attributes:
        booking_id: API record id ("_id")
        package_id: Booked package id, when the API sends an object or id
        package_title: Booked package title for display
        start_date: Travel date as sent by the API (ISO-8601 string)
        booking_status: pending | confirmed | cancelled
        payment_status: pending | completed | failed
        total_amount: Amount charged, in the package currency
    """

    booking_id: str
    package_id: Optional[str] = None
    package_title: Optional[str] = None
    start_date: Optional[str] = None
    adults: int = 0
    children: int = 0
    first_name: str = ""
    last_name: str = ""
    email: str = ""
    phone: str = ""
    card_name: Optional[str] = None
    card_number: Optional[str] = None
    expiry_date: Optional[str] = None
    cvv: Optional[str] = None
    booking_status: str = STATUS_PENDING
    payment_status: str = PAYMENT_PENDING
    total_amount: float = 0.0
    extra_fields: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Booking":
        """
        Create Booking from an API record.

        The package may arrive as an id string, a title string, or an
        object with _id/title.
        """
        kwargs: Dict[str, Any] = {}
        for api_key, attr in _CORE_KEYS.items():
            if data.get(api_key) is not None:
                kwargs[attr] = data[api_key]

        package = data.get("package")
        if isinstance(package, dict):
            kwargs["package_id"] = package.get("_id")
            kwargs["package_title"] = package.get("title")
        elif package:
            kwargs["package_title"] = str(package)

        kwargs["start_date"] = data.get("startDate") or data.get("date")
        kwargs["booking_status"] = normalize_booking_status(
            data.get("bookingStatus") or data.get("status")
        )
        kwargs["payment_status"] = (kwargs.get("payment_status") or PAYMENT_PENDING).lower()
        kwargs["booking_id"] = str(kwargs.get("booking_id", ""))
        kwargs["total_amount"] = _to_float(kwargs.get("total_amount"))
        kwargs["adults"] = _to_int(kwargs.get("adults"))
        kwargs["children"] = _to_int(kwargs.get("children"))

        extra = {k: v for k, v in data.items() if k not in _HANDLED_KEYS}
        return cls(**kwargs, extra_fields=extra)

    def to_dict(self, include_extra: bool = True) -> Dict[str, Any]:
        """Convert Booking to a plain dictionary (snake_case keys)."""
        data = asdict(self)
        extra = data.pop("extra_fields", {})
        if include_extra:
            data.update(extra)
        return data

    @property
    def customer_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def is_confirmed(self) -> bool:
        return self.booking_status == STATUS_CONFIRMED

    @property
    def is_paid(self) -> bool:
        return self.payment_status == PAYMENT_COMPLETED

    def counts_towards_revenue(self) -> bool:
        """Only confirmed bookings with a completed payment are revenue."""
        return self.is_confirmed and self.is_paid


def _to_int(value: Any) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


def _to_float(value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0
