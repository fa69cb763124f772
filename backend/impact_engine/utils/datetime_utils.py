"""
Date and datetime utilities.

Schedule milestones are calendar dates; upstream bookings are instants.
Keep the two apart: milestones are compared as ``date`` objects so that
no timezone conversion can shift them by a day.
"""

from datetime import date, datetime, timezone
from typing import Optional

# UTC timezone constant
UTC = timezone.utc


def now_utc() -> datetime:
    """
    Get current UTC datetime (timezone-aware).

    Returns:
        datetime: Current UTC time with tzinfo set to UTC
    """
    return datetime.now(UTC)


def parse_calendar_date(value: str) -> date:
    """
    Parse a milestone value into a calendar date.

    Accepts ``YYYY-MM-DD`` or a full ISO 8601 datetime, in which case the
    date part as written is used (no conversion to another timezone).

    Raises:
        ValueError: If the string cannot be parsed
    """
    text = value.strip()
    try:
        return date.fromisoformat(text)
    except ValueError:
        pass
    return datetime.fromisoformat(text.replace("Z", "+00:00")).date()


def ensure_utc(dt: Optional[datetime]) -> Optional[datetime]:
    """
    Ensure datetime is timezone-aware and in UTC.

    Naive datetimes are assumed to already be UTC.
    """
    if dt is None:
        return None

    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)

    return dt.astimezone(UTC)


def parse_optional_instant(value: Optional[str]) -> Optional[datetime]:
    """Parse an ISO datetime (or date) to UTC, returning None for blanks and junk."""
    if not value or not str(value).strip():
        return None
    try:
        return ensure_utc(datetime.fromisoformat(str(value).strip().replace("Z", "+00:00")))
    except ValueError:
        return None


def format_display_date(value: date) -> str:
    """``Mar 10, 2024`` style label used in reports."""
    return f"{value:%b} {value.day}, {value.year}"
