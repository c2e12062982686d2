import os
from datetime import date, datetime, timedelta, timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

DEFAULT_TIMEZONE = "UTC"

# Sunday is 0 and Monday is 1.
SUNDAY_INDEX = 0


def NowUtc() -> datetime:
    return datetime.now(tz=timezone.utc)


def _DayIndex(value: date) -> int:
    return (value.weekday() + 1) % 7


def _DaysSinceMonday(value: date) -> int:
    index = _DayIndex(value)
    if index == SUNDAY_INDEX:
        return 6
    return index - 1


def WeekStart(now: datetime) -> datetime:
    """Monday 00:00:00 of the week containing ``now``; tzinfo is kept as-is."""
    monday = now - timedelta(days=_DaysSinceMonday(now.date()))
    return monday.replace(hour=0, minute=0, second=0, microsecond=0)


def WeekStartDate(day: date) -> date:
    return day - timedelta(days=_DaysSinceMonday(day))


def WeekRange(now: datetime) -> tuple[datetime, datetime]:
    """Return (Monday 00:00:00, Sunday 23:59:59.999) for the week of ``now``."""
    start = WeekStart(now)
    end = start + timedelta(days=7) - timedelta(milliseconds=1)
    return start, end


def ResolveTimezone(value: str | None) -> ZoneInfo:
    if not value:
        return ZoneInfo(DEFAULT_TIMEZONE)
    try:
        return ZoneInfo(value)
    except (ZoneInfoNotFoundError, ValueError):
        return ZoneInfo(DEFAULT_TIMEZONE)


def LocalNow(tz_name: str | None = None) -> datetime:
    zone = ResolveTimezone(tz_name or os.getenv("GROCERY_TIMEZONE", DEFAULT_TIMEZONE))
    return NowUtc().astimezone(zone)


def CurrentWeekStartDate(tz_name: str | None = None) -> date:
    return WeekStartDate(LocalNow(tz_name).date())
