"""
Date parsing and formatting utilities.
"""

from datetime import date, datetime, time, timezone
from pathlib import Path
from typing import Optional


def parse_date(date_str: Optional[str]) -> Optional[date]:
    """
    Parse a date string into a date object.

    Handles various formats:
    - ISO format (YYYY-MM-DD)
    - ISO datetime (YYYY-MM-DDTHH:MM:SS)

    Args:
        date_str: Date string to parse

    Returns:
        Parsed date object or None if invalid
    """
    if not date_str:
        return None

    # Take only date part if it's a datetime string
    if 'T' in date_str:
        date_str = date_str.split('T')[0]

    try:
        return datetime.strptime(date_str, '%Y-%m-%d').date()
    except ValueError:
        return None


def format_date(d: Optional[date]) -> Optional[str]:
    """Format a date object as ISO string (YYYY-MM-DD)."""
    if not d:
        return None

    return d.strftime('%Y-%m-%d')


def dates_equal(date1: Optional[date], date2: Optional[date]) -> bool:
    """
    Check if two optional dates fall on the same day.

    Args:
        date1: First date
        date2: Second date

    Returns:
        True if both are None or both name the same day
    """
    # One is None
    if date1 is None or date2 is None:
        return date1 is date2

    return date1 == date2


def parse_rfc3339(value: str) -> datetime:
    """Parse an RFC 3339 timestamp into an aware datetime.

    Raises ValueError for malformed input. Naive values are taken as UTC.
    """
    parsed = datetime.fromisoformat(value.strip().replace('Z', '+00:00'))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def format_due_rfc3339(d: Optional[date]) -> Optional[str]:
    """Format a due date as midnight UTC, the only precision the task API keeps."""
    if d is None:
        return None
    return datetime.combine(d, time(0, 0), tzinfo=timezone.utc).strftime('%Y-%m-%dT%H:%M:%S.000Z')


def parse_filename_day(path: Path) -> date:
    """Day a journal file governs, from a ``YYYY-MM-DD.norg`` style name.

    Raises ValueError if the stem is not a date.
    """
    return datetime.strptime(Path(path).stem, '%Y-%m-%d').date()
