"""
Business date resolution. Pure functions; the venue boundary and timezone are always passed in.

A venue's "day" runs from the day-switch boundary to just before the same
boundary on the next calendar day, so a clock-in at 02:00 with a 05:00
boundary belongs to the previous calendar date.
"""

from datetime import date, datetime, timedelta, timezone as dt_timezone
from typing import Optional
from zoneinfo import ZoneInfo

from pickup_backend.domain.models import AttendanceRecord, BusinessDateSpan, DaySwitchBoundary

DEFAULT_DAY_SWITCH = DaySwitchBoundary(5, 0)


def parse_day_switch_time(value: Optional[str]) -> DaySwitchBoundary:
    """Convierte 'HH:MM' o 'HH:MM:SS' a DaySwitchBoundary. Vacío -> 05:00."""
    if value is None:
        return DEFAULT_DAY_SWITCH
    value = value.strip()
    if not value:
        return DEFAULT_DAY_SWITCH
    parts = value.split(":")
    if len(parts) not in (2, 3):
        raise ValueError(f"Invalid day switch time {value!r}; expected HH:MM")
    try:
        hour, minute = int(parts[0]), int(parts[1])
    except ValueError as e:
        raise ValueError(f"Invalid day switch time {value!r}; expected HH:MM") from e
    return DaySwitchBoundary(hour, minute)


def _to_local(timestamp: datetime, timezone: str) -> datetime:
    tz = ZoneInfo(timezone)
    if timestamp.tzinfo is None:
        # Naive timestamps are already venue wall-clock time.
        return timestamp.replace(tzinfo=tz)
    return timestamp.astimezone(tz)


def resolve(timestamp: datetime, boundary: DaySwitchBoundary, timezone: str) -> date:
    """
    Business date of `timestamp`: local date if local (hour, minute) >= boundary,
    otherwise the day before.
    """
    local = _to_local(timestamp, timezone)
    if (local.hour, local.minute) >= boundary.as_tuple():
        return local.date()
    return local.date() - timedelta(days=1)


def current_business_date(
    boundary: DaySwitchBoundary,
    timezone: str,
    now: Optional[datetime] = None,
) -> date:
    if now is None:
        now = datetime.now(dt_timezone.utc)
    return resolve(now, boundary, timezone)


def business_date_span(business_date: date, boundary: DaySwitchBoundary) -> BusinessDateSpan:
    """
    Calendar dates a business date can touch. Events after midnight but before
    the boundary on the next calendar day still belong to `business_date`.
    """
    return BusinessDateSpan(
        start_calendar_date=business_date,
        end_calendar_date=business_date + timedelta(days=1),
    )


def resolve_record(
    record: AttendanceRecord,
    boundary: DaySwitchBoundary,
    timezone: str,
) -> date:
    """Business date of a time card: by clock-in when present, else its work_date."""
    if record.clock_in is None:
        return record.work_date
    return resolve(record.clock_in, boundary, timezone)
