"""
Date and duration helpers shared by services and analytics.

SQLite hands back naive datetimes for values stored as UTC, so anything
compared against "now" goes through ensure_utc first.
"""

from datetime import datetime, timezone

MONTH_ABBREVIATIONS = [
    "Jan",
    "Feb",
    "Mar",
    "Apr",
    "May",
    "Jun",
    "Jul",
    "Aug",
    "Sep",
    "Oct",
    "Nov",
    "Dec",
]


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def ensure_utc(dt: datetime | None) -> datetime | None:
    """
    Attach UTC to a naive datetime read back from the database.

    Args:
        dt: Datetime, naive (assumed UTC) or aware, or None

    Returns:
        Aware datetime in UTC, or None
    """
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def format_duration(total_seconds: int) -> str:
    """
    Format a duration in seconds as "{h}h {m}m".

    The hour part is omitted when zero, so 300 seconds is "5m" and
    3900 seconds is "1h 5m".
    """
    total_seconds = max(int(total_seconds or 0), 0)
    hours = total_seconds // 3600
    minutes = (total_seconds % 3600) // 60
    if hours:
        return f"{hours}h {minutes}m"
    return f"{minutes}m"


def shift_month(year: int, month: int, delta: int) -> tuple[int, int]:
    """Move (year, month) by delta months, delta may be negative."""
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1


def recent_months(count: int, now: datetime | None = None) -> list[tuple[int, int]]:
    """
    Return the last `count` (year, month) pairs, oldest first.

    The current month is the last entry.
    """
    now = now or utc_now()
    return [
        shift_month(now.year, now.month, -offset)
        for offset in range(count - 1, -1, -1)
    ]


def month_label(year: int, month: int) -> str:
    """Short chart label such as "Mar 2025"."""
    return f"{MONTH_ABBREVIATIONS[month - 1]} {year}"
