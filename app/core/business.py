# app/core/business.py
from __future__ import annotations

import re
from datetime import date, datetime, time, timedelta, tzinfo
from typing import Optional
from zoneinfo import ZoneInfo

from app.core.logging import get_logger

logger = get_logger(__name__)

UTC = ZoneInfo("UTC")

DEFAULT_BOOKING_TIME = time(10, 0)

_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_CLOCK_TIME = re.compile(r"(\d{1,2})(?::(\d{2}))?\s*(am|pm)?", re.IGNORECASE)


def _at(day: date, at: time, tz: tzinfo) -> datetime:
    return datetime.combine(day, at, tzinfo=tz)


def _resolve_date(value: Optional[str], today: date) -> date:
    if not value:
        return today + timedelta(days=1)
    value = value.strip()
    if _ISO_DATE.match(value):
        return date.fromisoformat(value)
    lowered = value.lower()
    if lowered == "tomorrow":
        return today + timedelta(days=1)
    if lowered == "today":
        return today
    # Weekday names, "next week" etc. are not understood; book for tomorrow
    return today + timedelta(days=1)


def _resolve_time(value: Optional[str]) -> time:
    if not value:
        return DEFAULT_BOOKING_TIME
    m = _CLOCK_TIME.search(value)
    if not m:
        return DEFAULT_BOOKING_TIME

    hour = int(m.group(1))
    minute = int(m.group(2) or 0)
    meridiem = (m.group(3) or "").lower()
    if meridiem == "pm" and hour < 12:
        hour += 12
    elif meridiem == "am" and hour == 12:
        hour = 0
    return time(hour, minute)


def parse_preferred_datetime(
    preferred_date: Optional[str],
    preferred_time: Optional[str],
    *,
    now: Optional[datetime] = None,
    tz: tzinfo = UTC,
) -> datetime:
    """
    Turn the caller's spoken preference into a concrete appointment time.

    Never raises: anything it cannot make sense of becomes tomorrow at 10:00
    in the workshop's timezone.
    """
    now = (now or datetime.now(tz)).astimezone(tz)
    today = now.date()
    try:
        return _at(_resolve_date(preferred_date, today), _resolve_time(preferred_time), tz)
    except (ValueError, TypeError) as e:
        logger.warning("preferred_datetime_unparseable",
                       preferred_date=preferred_date, preferred_time=preferred_time, error=str(e))
        return _at(today + timedelta(days=1), DEFAULT_BOOKING_TIME, tz)
