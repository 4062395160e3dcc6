"""Tests for bs_common.datetime_utils: report day boundaries."""

from datetime import date, datetime, timezone

from config.settings import settings
from src.bs_common.datetime_utils import day_range, utc_now


def test_utc_now_is_aware() -> None:
    assert utc_now().tzinfo is not None


class TestDayRange:
    def test_open_range(self) -> None:
        assert day_range(None, None) == (None, None)

    def test_jakarta_boundaries(self, monkeypatch) -> None:
        monkeypatch.setattr(settings, "REPORT_TIMEZONE", "Asia/Jakarta")
        lower, upper = day_range(date(2024, 1, 1), date(2024, 1, 31))
        # UTC+7: local midnight is 17:00 UTC the previous day
        assert lower == datetime(2023, 12, 31, 17, 0, tzinfo=timezone.utc)
        assert upper == datetime(2024, 1, 31, 17, 0, tzinfo=timezone.utc)

    def test_end_date_is_inclusive(self, monkeypatch) -> None:
        monkeypatch.setattr(settings, "REPORT_TIMEZONE", "UTC")
        lower, upper = day_range(date(2024, 3, 5), date(2024, 3, 5))
        late_evening = datetime(2024, 3, 5, 23, 59, 59, 999999, tzinfo=timezone.utc)
        assert lower is not None and upper is not None
        assert lower <= late_evening < upper
        assert upper == datetime(2024, 3, 6, tzinfo=timezone.utc)

    def test_single_bound(self, monkeypatch) -> None:
        monkeypatch.setattr(settings, "REPORT_TIMEZONE", "UTC")
        lower, upper = day_range(date(2024, 3, 5), None)
        assert lower == datetime(2024, 3, 5, tzinfo=timezone.utc)
        assert upper is None
