from datetime import date, datetime, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest

from pickup_backend.domain.business_date import (
    DEFAULT_DAY_SWITCH,
    business_date_span,
    current_business_date,
    parse_day_switch_time,
    resolve,
    resolve_record,
)
from pickup_backend.domain.models import AttendanceRecord, DaySwitchBoundary

TOKYO = "Asia/Tokyo"
JST = ZoneInfo(TOKYO)


def test_one_second_before_boundary_belongs_to_previous_day():
    ts = datetime(2026, 10, 16, 4, 59, 59, tzinfo=JST)
    assert resolve(ts, DaySwitchBoundary(5, 0), TOKYO) == date(2026, 10, 15)


def test_exactly_at_boundary_belongs_to_same_day():
    ts = datetime(2026, 10, 16, 5, 0, 0, tzinfo=JST)
    assert resolve(ts, DaySwitchBoundary(5, 0), TOKYO) == date(2026, 10, 16)


def test_utc_timestamp_is_converted_to_venue_time():
    # 19:59 UTC == 04:59 JST next day
    before = datetime(2026, 10, 15, 19, 59, tzinfo=timezone.utc)
    after = datetime(2026, 10, 15, 20, 30, tzinfo=timezone.utc)
    assert resolve(before, DEFAULT_DAY_SWITCH, TOKYO) == date(2026, 10, 15)
    assert resolve(after, DEFAULT_DAY_SWITCH, TOKYO) == date(2026, 10, 16)


def test_minutes_are_compared_after_hours():
    boundary = DaySwitchBoundary(5, 30)
    assert resolve(datetime(2026, 10, 16, 5, 29, tzinfo=JST), boundary, TOKYO) == date(2026, 10, 15)
    assert resolve(datetime(2026, 10, 16, 5, 30, tzinfo=JST), boundary, TOKYO) == date(2026, 10, 16)
    assert resolve(datetime(2026, 10, 16, 6, 0, tzinfo=JST), boundary, TOKYO) == date(2026, 10, 16)


def test_naive_timestamp_is_venue_wall_clock():
    assert resolve(datetime(2026, 10, 16, 2, 0), DEFAULT_DAY_SWITCH, TOKYO) == date(2026, 10, 15)


def test_midnight_boundary_always_gives_calendar_date():
    boundary = DaySwitchBoundary(0, 0)
    start = datetime(2026, 10, 16, 0, 0, tzinfo=JST)
    for minutes in range(0, 24 * 60, 7):
        ts = start + timedelta(minutes=minutes)
        assert resolve(ts, boundary, TOKYO) == ts.date()


@pytest.mark.parametrize("boundary", [DaySwitchBoundary(0, 0), DaySwitchBoundary(5, 0), DaySwitchBoundary(23, 59)])
def test_business_date_never_exceeds_calendar_date(boundary):
    start = datetime(2026, 12, 31, 0, 0, tzinfo=JST)
    for minutes in range(0, 48 * 60, 13):
        ts = start + timedelta(minutes=minutes)
        first = resolve(ts, boundary, TOKYO)
        assert first == resolve(ts, boundary, TOKYO)
        assert ts.date() - timedelta(days=1) <= first <= ts.date()


def test_year_boundary_rolls_back():
    ts = datetime(2027, 1, 1, 3, 0, tzinfo=JST)
    assert resolve(ts, DEFAULT_DAY_SWITCH, TOKYO) == date(2026, 12, 31)


def test_current_business_date_uses_injected_now():
    now = datetime(2026, 10, 16, 18, 0, tzinfo=timezone.utc)  # 03:00 JST on the 17th
    assert current_business_date(DEFAULT_DAY_SWITCH, TOKYO, now=now) == date(2026, 10, 16)


def test_current_business_date_defaults_to_now():
    result = current_business_date(DEFAULT_DAY_SWITCH, TOKYO)
    today = datetime.now(JST).date()
    assert today - timedelta(days=1) <= result <= today


def test_span_covers_business_date_and_next_calendar_day():
    span = business_date_span(date(2026, 10, 16), DEFAULT_DAY_SWITCH)
    assert span.start_calendar_date == date(2026, 10, 16)
    assert span.end_calendar_date == date(2026, 10, 17)


@pytest.mark.parametrize(
    "value,expected",
    [
        ("05:00", DaySwitchBoundary(5, 0)),
        ("06:30:00", DaySwitchBoundary(6, 30)),
        (" 00:00 ", DaySwitchBoundary(0, 0)),
        (None, DaySwitchBoundary(5, 0)),
        ("", DaySwitchBoundary(5, 0)),
    ],
)
def test_parse_day_switch_time(value, expected):
    assert parse_day_switch_time(value) == expected


@pytest.mark.parametrize("value", ["5", "aa:bb", "24:00", "05:60", "1:2:3:4"])
def test_parse_day_switch_time_rejects_malformed(value):
    with pytest.raises(ValueError):
        parse_day_switch_time(value)


def test_boundary_validates_ranges():
    with pytest.raises(ValueError):
        DaySwitchBoundary(-1, 0)
    with pytest.raises(ValueError):
        DaySwitchBoundary(0, 60)


def test_resolve_record_prefers_clock_in():
    late = AttendanceRecord(
        profile_id="c1",
        work_date=date(2026, 10, 17),
        clock_in=datetime(2026, 10, 17, 2, 0, tzinfo=JST),
    )
    scheduled = AttendanceRecord(profile_id="c2", work_date=date(2026, 10, 17))
    assert resolve_record(late, DEFAULT_DAY_SWITCH, TOKYO) == date(2026, 10, 16)
    assert resolve_record(scheduled, DEFAULT_DAY_SWITCH, TOKYO) == date(2026, 10, 17)
