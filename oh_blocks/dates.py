"""Date helpers for weekly opening hours.

Weekdays are numbered 0-6 starting on Sunday throughout this package, to
match the order the weekly table is rendered in.
"""

from __future__ import annotations

from datetime import datetime, time, timedelta, tzinfo
from typing import Callable, List

from .models import DateRange

DAYS_PER_WEEK = 7

# 0-6: Sunday-Saturday.
WEEKDAY_NAMES = (
    "Sunday",
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
)


def local_midnight(now: datetime, tz: tzinfo) -> datetime:
    """Return midnight of the day ``now`` falls on in ``tz``.

    A naive ``now`` is taken to already be local to ``tz``.
    """
    if now.tzinfo is None:
        now = now.replace(tzinfo=tz)
    return datetime.combine(now.astimezone(tz).date(), time.min, tzinfo=tz)


def week_range(now: datetime, tz: tzinfo) -> DateRange:
    """Return the range from today's local midnight to the same wall time a week later."""
    start = local_midnight(now, tz)
    # One week into the future, by calendar days so DST changes keep midnight.
    end = datetime.combine(start.date() + timedelta(days=DAYS_PER_WEEK), time.min, tzinfo=tz)
    return DateRange(start=start, end=end)


def weekday_number(moment: datetime, tz: tzinfo) -> int:
    """Return the 0 (Sunday) to 6 (Saturday) weekday of ``moment`` in ``tz``."""
    # datetime.weekday() counts from Monday.
    return (moment.astimezone(tz).weekday() + 1) % DAYS_PER_WEEK


def format_time(moment: datetime, tz: tzinfo) -> str:
    """Format ``moment`` on a 12 hour clock, e.g. ``9:00am`` or ``12:30pm``."""
    local = moment.astimezone(tz)
    hour = local.hour % 12 or 12
    suffix = "am" if local.hour < 12 else "pm"
    return f"{hour}:{local.minute:02d}{suffix}"


def week_days(translate: Callable[[str], str]) -> List[str]:
    """Return the translated weekday names, indexed by weekday number."""
    return [translate(name) for name in WEEKDAY_NAMES]
