"""Datetime utilities: UTC now and report-day boundaries."""

from datetime import date, datetime, time, timedelta, timezone
from zoneinfo import ZoneInfo

from config.settings import settings


def utc_now() -> datetime:
    """Return timezone-aware UTC now."""
    return datetime.now(timezone.utc)


def report_zone() -> ZoneInfo:
    return ZoneInfo(settings.REPORT_TIMEZONE)


def day_range(
    start_date: date | None, end_date: date | None
) -> tuple[datetime | None, datetime | None]:
    """Translate an inclusive calendar-day range into a half-open UTC interval.

    start_date maps to 00:00:00 local time; end_date maps to 00:00:00 of the
    following day (exclusive), which covers everything up to 23:59:59.999999.
    Either bound may be None.
    """
    tz = report_zone()
    lower = None
    upper = None
    if start_date is not None:
        lower = datetime.combine(start_date, time.min, tzinfo=tz).astimezone(timezone.utc)
    if end_date is not None:
        next_day = end_date + timedelta(days=1)
        upper = datetime.combine(next_day, time.min, tzinfo=tz).astimezone(timezone.utc)
    return lower, upper
