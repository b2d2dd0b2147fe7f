"""
Timezone utilities for the Maple Tours admin client.

The business operates in India Standard Time (IST). API timestamps arrive as
ISO-8601 strings in UTC, so display dates are converted before rendering.
"""

from datetime import date, datetime, timedelta, timezone
from typing import Optional, Union

# Reusable timezone instance for IST (UTC+5:30)
IST = timezone(timedelta(hours=5, minutes=30))

DISPLAY_DATE_FORMAT = "%b %d, %Y"


def now_ist(aware: bool = False) -> datetime:
    """
    Return the current time in India Standard Time (IST).

    Args:
        aware: When True, returns a timezone-aware datetime. When False (default),
            returns a naive datetime stripped of tzinfo.

    Returns:
        datetime: Current time in IST.
    """
    current = datetime.now(timezone.utc).astimezone(IST)
    return current if aware else current.replace(tzinfo=None)


def parse_api_datetime(value: Union[str, datetime, date, None]) -> Optional[datetime]:
    """
    Parse a timestamp as returned by the API into an aware datetime.

    Accepts "2025-03-05T10:00:00.000Z", offsets like "+05:30", and plain
    dates ("2025-03-05", interpreted as midnight UTC). Naive datetimes are
    assumed to be UTC.

    Returns:
        Aware datetime, or None when the value is empty or unparsable.
    """
    if value is None or value == "":
        return None

    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    else:
        text = str(value).strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def format_display_date(value: Union[str, datetime, date, None]) -> str:
    """Render a date as "Mar 05, 2025" in IST, or "-" when unknown."""
    parsed = parse_api_datetime(value)
    if parsed is None:
        return "-"
    return parsed.astimezone(IST).strftime(DISPLAY_DATE_FORMAT)
