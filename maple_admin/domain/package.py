"""
Tour package domain model.

Packages are the only records the admin creates from scratch, so this model
also owns the form validation that runs before anything is sent.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ..exceptions import ValidationError

DEFAULT_CURRENCY = "₹"
MAX_IMAGES = 3


@dataclass
class Price:
    amount: float = 0.0
    currency: str = DEFAULT_CURRENCY

    @classmethod
    def from_value(cls, value: Any) -> "Price":
        # Legacy records store a bare number
        if isinstance(value, dict):
            return cls(
                amount=_to_float(value.get("amount")),
                currency=value.get("currency") or DEFAULT_CURRENCY,
            )
        return cls(amount=_to_float(value))

    def to_dict(self) -> Dict[str, Any]:
        return {"amount": self.amount, "currency": self.currency}

    def __str__(self) -> str:
        amount = int(self.amount) if float(self.amount).is_integer() else self.amount
        return f"{self.currency}{amount:,}"


@dataclass
class Duration:
    days: int = 0
    nights: int = 0

    @classmethod
    def from_value(cls, value: Any) -> "Duration":
        if isinstance(value, dict):
            return cls(days=_to_int(value.get("days")), nights=_to_int(value.get("nights")))
        return cls(days=_to_int(value))

    def to_dict(self) -> Dict[str, int]:
        return {"days": self.days, "nights": self.nights}

    def __str__(self) -> str:
        return f"{self.days}D/{self.nights}N"


@dataclass
class ItineraryDay:
    day: int
    title: str = ""
    description: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {"day": self.day, "title": self.title, "description": self.description}


@dataclass
class Package:
    """
    Tour package as stored by the API.

    Attributes:
        package_id: API record id ("_id"); None for packages not yet created
        price: Price with currency (defaults to rupees)
        duration: Days and nights
        itinerary: Ordered day-by-day plan
        active: Whether the package is offered on the public site
    """

    title: str = ""
    description: str = ""
    destination: str = ""
    price: Price = field(default_factory=Price)
    duration: Duration = field(default_factory=Duration)
    itinerary: List[ItineraryDay] = field(default_factory=list)
    inclusions: List[str] = field(default_factory=list)
    exclusions: List[str] = field(default_factory=list)
    cancellation_policy: str = ""
    active: bool = True
    images: List[str] = field(default_factory=list)
    package_id: Optional[str] = None
    extra_fields: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Package":
        handled = {
            "_id",
            "title",
            "description",
            "destination",
            "price",
            "duration",
            "itinerary",
            "inclusions",
            "exclusions",
            "cancellationPolicy",
            "active",
            "images",
        }
        itinerary = []
        for index, entry in enumerate(data.get("itinerary") or [], start=1):
            if isinstance(entry, dict):
                itinerary.append(
                    ItineraryDay(
                        day=_to_int(entry.get("day")) or index,
                        title=entry.get("title") or "",
                        description=entry.get("description") or "",
                    )
                )
            else:
                # Legacy itinerary: list of plain strings
                itinerary.append(ItineraryDay(day=index, title=str(entry)))

        return cls(
            package_id=data.get("_id"),
            title=data.get("title") or "",
            description=data.get("description") or "",
            destination=data.get("destination") or "",
            price=Price.from_value(data.get("price")),
            duration=Duration.from_value(data.get("duration")),
            itinerary=itinerary,
            inclusions=_clean_list(data.get("inclusions")),
            exclusions=_clean_list(data.get("exclusions")),
            cancellation_policy=data.get("cancellationPolicy") or "",
            active=bool(data.get("active", True)),
            images=[str(image) for image in data.get("images") or []],
            extra_fields={k: v for k, v in data.items() if k not in handled},
        )

    def to_payload(self) -> Dict[str, Any]:
        """Build the camelCase "packageData" document the API expects."""
        return {
            "title": self.title,
            "description": self.description,
            "destination": self.destination,
            "price": self.price.to_dict(),
            "duration": self.duration.to_dict(),
            "itinerary": [day.to_dict() for day in self.itinerary],
            "inclusions": [item for item in self.inclusions if item.strip()],
            "exclusions": [item for item in self.exclusions if item.strip()],
            "cancellationPolicy": self.cancellation_policy,
            "active": self.active,
        }

    def validate(self) -> None:
        """
        Check the package form before it is submitted.

        Raises:
            ValidationError: with the first problem found
        """
        if not self.title.strip():
            raise ValidationError("Please enter a title")
        if not self.description.strip():
            raise ValidationError("Please enter a description")
        if not self.destination.strip():
            raise ValidationError("Please enter a destination")
        if self.price.amount <= 0:
            raise ValidationError("Please enter a valid price")
        if self.duration.days <= 0:
            raise ValidationError("Please enter a valid duration")
        if self.duration.nights < 0:
            raise ValidationError("Nights cannot be negative")


def _clean_list(value: Any) -> List[str]:
    if not value:
        return []
    if isinstance(value, str):
        return [part.strip() for part in value.split(",") if part.strip()]
    return [str(item) for item in value if str(item).strip()]


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
