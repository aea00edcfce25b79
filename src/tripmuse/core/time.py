"""
Time helpers.

Behavior events carry epoch-millisecond timestamps, and their context stores
coarse time buckets (time-of-day, day-of-week) rather than raw datetimes so the
learner can count them like any other feature.
"""

from __future__ import annotations

import time
from datetime import datetime
from zoneinfo import ZoneInfo


def ensure_tz(dt: datetime, timezone: str) -> datetime:
    """Ensure `dt` has tzinfo; attach `timezone` if naive."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=ZoneInfo(timezone))
    return dt


def parse_datetime(value: str, timezone: str) -> datetime:
    """Parse ISO-8601 datetime string and ensure tzinfo is present.

    Accepts a trailing `Z` (UTC) and converts it to `+00:00` for `fromisoformat`.
    """
    value = value.strip()
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    dt = datetime.fromisoformat(value)
    return ensure_tz(dt, timezone)


def now_millis() -> int:
    """Current wall-clock time as epoch milliseconds."""
    return int(time.time() * 1000)


def time_of_day_bucket(moment: datetime) -> str:
    """Map a datetime to morning/afternoon/evening/night using its local hour."""
    hour = moment.hour
    if hour < 6:
        return "night"
    if hour < 12:
        return "morning"
    if hour < 17:
        return "afternoon"
    if hour < 21:
        return "evening"
    return "night"


def day_of_week_index(moment: datetime) -> int:
    """Day of week with 0 = Sunday ... 6 = Saturday."""
    return (moment.weekday() + 1) % 7
