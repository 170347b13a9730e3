"""
Timezone-aware datetime utilities.

All datetime operations should use these helpers to ensure consistent
timezone handling across the codebase. Display formats are rendered in UTC.
"""
from datetime import datetime, timezone
from typing import Optional, Union

BASE36_ALPHABET = "0123456789abcdefghijklmnopqrstuvwxyz"


def utc_now() -> datetime:
    """
    Get current UTC time as timezone-aware datetime.

    Use this instead of datetime.utcnow() which returns naive datetime.
    """
    return datetime.now(timezone.utc)


def parse_timestamp(value: Optional[Union[str, datetime]]) -> Optional[datetime]:
    """
    Parse an ISO-8601 timestamp, ensuring timezone-aware UTC.

    Handles:
    - ISO format strings with Z suffix
    - ISO format strings with +00:00 (or any other) offset
    - Naive datetimes (assumed UTC)
    - Already timezone-aware datetimes

    Args:
        value: Timestamp (string or datetime)

    Returns:
        Timezone-aware datetime in UTC, or None if input is None/empty/invalid
    """
    if value is None:
        return None

    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
        if value.endswith("Z") or value.endswith("z"):
            value = value[:-1] + "+00:00"
        try:
            dt = datetime.fromisoformat(value)
        except ValueError:
            return None
    elif isinstance(value, datetime):
        dt = value
    else:
        return None

    # Ensure timezone-aware (assume UTC if naive)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)

    return dt.astimezone(timezone.utc)


def _hour_12(dt: datetime) -> str:
    hour = dt.hour % 12 or 12
    return f"{hour:02d}"


def _meridiem(dt: datetime) -> str:
    return "AM" if dt.hour < 12 else "PM"


def format_short(dt: datetime) -> str:
    """Signature block date: 'Jan 1, 2024, 12:00 PM UTC'."""
    dt = dt.astimezone(timezone.utc)
    return (
        f"{dt.strftime('%b')} {dt.day}, {dt.year}, "
        f"{_hour_12(dt)}:{dt.minute:02d} {_meridiem(dt)} UTC"
    )


def format_long(dt: datetime) -> str:
    """Certificate date: 'January 1, 2024 at 12:00:00 PM UTC'."""
    dt = dt.astimezone(timezone.utc)
    return (
        f"{dt.strftime('%B')} {dt.day}, {dt.year} at "
        f"{_hour_12(dt)}:{dt.minute:02d}:{dt.second:02d} {_meridiem(dt)} UTC"
    )


def format_audit(dt: datetime) -> str:
    """Audit trail date: 'Jan 1, 2024, 12:00 PM'."""
    dt = dt.astimezone(timezone.utc)
    return (
        f"{dt.strftime('%b')} {dt.day}, {dt.year}, "
        f"{_hour_12(dt)}:{dt.minute:02d} {_meridiem(dt)}"
    )


def to_iso_z(dt: datetime) -> str:
    """
    ISO-8601 in UTC with millisecond precision and Z suffix.

    Example: 2024-01-01T12:00:00.000Z
    """
    dt = dt.astimezone(timezone.utc)
    millis = dt.microsecond // 1000
    return f"{dt.strftime('%Y-%m-%dT%H:%M:%S')}.{millis:03d}Z"


def epoch_millis(dt: datetime) -> int:
    """Milliseconds since the Unix epoch."""
    return int(dt.timestamp() * 1000)


def to_base36(number: int) -> str:
    """Encode a non-negative integer in lowercase base 36."""
    if number < 0:
        raise ValueError("Only non-negative integers can be encoded")
    if number == 0:
        return "0"
    digits = []
    while number:
        number, rem = divmod(number, 36)
        digits.append(BASE36_ALPHABET[rem])
    return "".join(reversed(digits))
