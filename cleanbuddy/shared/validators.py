"""Shared validation utilities"""

import re
from typing import Optional

TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")
MINUTES_PER_DAY = 24 * 60


def validate_email(email: Optional[str]) -> Optional[str]:
    """
    Validate email format.

    Args:
        email: Email address string

    Returns:
        Lowercase email address

    Raises:
        ValueError: If email format is invalid
    """
    if not email:
        return email

    email = email.strip().lower()

    # Basic email validation pattern
    email_pattern = r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$"

    if not re.match(email_pattern, email):
        raise ValueError("Invalid email format")

    return email


def validate_hhmm(value: Optional[str]) -> Optional[str]:
    """
    Validate a wall-clock time of day.

    All times are local to the single platform locale; no timezone
    normalization is applied anywhere.

    Raises:
        ValueError: If the value is not a 24h "HH:MM" string
    """
    if value is None:
        return value

    value = value.strip()
    if not TIME_PATTERN.match(value):
        raise ValueError("Time must be in HH:MM format (00:00-23:59)")
    return value


def time_to_minutes(value: str) -> int:
    """Convert "HH:MM" to minutes since midnight"""
    hours, minutes = validate_hhmm(value).split(":")
    return int(hours) * 60 + int(minutes)


def minutes_to_time(total_minutes: int) -> str:
    """Convert minutes since midnight to "HH:MM", clamped to the end of the day"""
    total_minutes = max(0, min(total_minutes, MINUTES_PER_DAY - 1))
    return f"{total_minutes // 60:02d}:{total_minutes % 60:02d}"


def window_end_minutes(start_time: str, duration_hours: float) -> int:
    """End of a [start, start + duration) window in minutes since midnight, cut off at midnight"""
    return min(time_to_minutes(start_time) + int(round(duration_hours * 60)), MINUTES_PER_DAY)


def intervals_overlap(start1: int, end1: int, start2: int, end2: int) -> bool:
    """Half-open intervals [start1, end1) and [start2, end2) share at least one minute"""
    return start1 < end2 and start2 < end1


def normalize_text(value: Optional[str]) -> Optional[str]:
    """Trim surrounding whitespace, treating blank strings as missing"""
    if value is None:
        return None
    value = value.strip()
    return value or None
