"""Customer testimonial domain model."""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

MAX_RATING = 5


@dataclass
class Testimonial:
    """
    Testimonial awaiting or past moderation.

    Attributes:
        testimonial_id: API record id ("_id")
        name: Customer display name
        text: Testimonial body ("testimonial" in the API)
        rating: Star rating, clamped to 0..5
        approved: Whether it is shown on the public site ("isApproved")
    """

    testimonial_id: str
    name: str = ""
    text: str = ""
    rating: int = 0
    approved: bool = False
    created_at: Optional[str] = None
    extra_fields: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Testimonial":
        handled = {"_id", "name", "testimonial", "rating", "isApproved", "createdAt"}
        try:
            rating = int(data.get("rating") or 0)
        except (TypeError, ValueError):
            rating = 0
        return cls(
            testimonial_id=str(data.get("_id", "")),
            name=data.get("name") or "",
            text=data.get("testimonial") or "",
            rating=max(0, min(MAX_RATING, rating)),
            approved=bool(data.get("isApproved", False)),
            created_at=data.get("createdAt"),
            extra_fields={k: v for k, v in data.items() if k not in handled},
        )

    @property
    def status_label(self) -> str:
        return "Approved" if self.approved else "Pending"

    def stars(self) -> str:
        """Render the rating as five star characters."""
        return "★" * self.rating + "☆" * (MAX_RATING - self.rating)
