from datetime import date, datetime, timedelta, timezone
from zoneinfo import ZoneInfo

from app.services.schedules import (
    CurrentWeekStartDate,
    LocalNow,
    ResolveTimezone,
    WeekRange,
    WeekStart,
    WeekStartDate,
)


def test_week_start_for_every_day_of_the_week():
    monday = datetime(2026, 10, 12, 0, 0, 0)
    for offset in range(7):
        now = monday + timedelta(days=offset, hours=15, minutes=42, seconds=7, microseconds=500)
        assert WeekStart(now) == monday


def test_sunday_belongs_to_the_week_that_started_six_days_earlier():
    sunday = datetime(2026, 10, 18, 23, 59, 59)
    assert WeekStart(sunday) == datetime(2026, 10, 12)


def test_monday_midnight_starts_a_new_week():
    assert WeekStart(datetime(2026, 10, 19, 0, 0, 0)) == datetime(2026, 10, 19)


def test_week_start_keeps_timezone():
    zone = ZoneInfo("Australia/Sydney")
    now = datetime(2026, 10, 15, 9, 30, tzinfo=zone)
    start = WeekStart(now)
    assert start.tzinfo is zone
    assert start == datetime(2026, 10, 12, tzinfo=zone)


def test_week_range_covers_monday_to_sunday_end_of_day():
    start, end = WeekRange(datetime(2026, 10, 14, 12, 0))
    assert start == datetime(2026, 10, 12, 0, 0, 0)
    assert end == datetime(2026, 10, 18, 23, 59, 59, 999000)
    assert end - start == timedelta(days=7) - timedelta(milliseconds=1)


def test_week_range_crosses_month_and_year():
    start, end = WeekRange(datetime(2027, 1, 1, 8, 0))
    assert start == datetime(2026, 12, 28)
    assert end.date() == date(2027, 1, 3)


def test_week_start_date():
    assert WeekStartDate(date(2026, 10, 12)) == date(2026, 10, 12)
    assert WeekStartDate(date(2026, 10, 16)) == date(2026, 10, 12)
    assert WeekStartDate(date(2026, 10, 18)) == date(2026, 10, 12)
    assert WeekStartDate(date(2026, 10, 19)) == date(2026, 10, 19)


def test_resolve_timezone_falls_back_to_utc():
    assert ResolveTimezone(None).key == "UTC"
    assert ResolveTimezone("").key == "UTC"
    assert ResolveTimezone("Not/AZone").key == "UTC"
    assert ResolveTimezone("Europe/London").key == "Europe/London"


def test_local_now_uses_configured_timezone(monkeypatch):
    monkeypatch.setenv("GROCERY_TIMEZONE", "Asia/Tokyo")
    now = LocalNow()
    assert now.utcoffset() == timedelta(hours=9)


def test_current_week_start_date_is_a_monday():
    value = CurrentWeekStartDate("UTC")
    assert value.weekday() == 0
    today = datetime.now(tz=timezone.utc).date()
    assert 0 <= (today - value).days <= 6
