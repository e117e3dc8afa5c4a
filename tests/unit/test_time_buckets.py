"""
Unit Tests - Time Bucketing
"""
from datetime import datetime, timezone
from zoneinfo import ZoneInfo

import pytest

from backoffice.utils.time_buckets import (
    HOURS_IN_DAY,
    comparison_windows,
    daily_bucket_keys,
    day_key,
    day_span_window,
    hour_label,
    hour_of_day,
    localize,
    lookback_window,
    week_windows,
)

UTC = timezone.utc
KOLKATA = ZoneInfo("Asia/Kolkata")
NOW = datetime(2026, 3, 12, 15, 30, tzinfo=UTC)


class TestDailyBuckets:
    """Tests for day keys"""

    @pytest.mark.parametrize("period", [1, 7, 30, 365])
    def test_one_key_per_day_including_today(self, period):
        """period + 1 keys, ascending, ending today"""
        keys = daily_bucket_keys(period, NOW)

        assert len(keys) == period + 1
        assert keys == sorted(keys)
        assert len(set(keys)) == len(keys)
        assert keys[-1] == "2026-03-12"

    def test_keys_cross_month_boundary(self):
        keys = daily_bucket_keys(12, NOW)

        assert keys[0] == "2026-02-28"
        assert "2026-03-01" in keys

    def test_day_key_uses_reporting_timezone(self):
        """20:00 UTC is already the next day in India"""
        late_evening = datetime(2026, 3, 11, 20, 0, tzinfo=UTC)

        assert day_key(late_evening, ZoneInfo("UTC")) == "2026-03-11"
        assert day_key(late_evening, KOLKATA) == "2026-03-12"

    def test_naive_timestamps_are_read_as_utc(self):
        naive = datetime(2026, 3, 11, 20, 0)

        assert localize(naive, KOLKATA) == datetime(2026, 3, 12, 1, 30, tzinfo=KOLKATA)
        assert hour_of_day(naive, KOLKATA) == 1


class TestWindows:
    """Tests for report windows"""

    def test_lookback_window_is_open_ended(self):
        window = lookback_window(7, NOW)

        assert window.start == datetime(2026, 3, 5, 15, 30, tzinfo=UTC)
        assert window.end is None
        assert window.contains(NOW)
        assert not window.contains(datetime(2026, 3, 5, 15, 29, tzinfo=UTC))

    def test_comparison_windows_are_adjacent(self):
        current, previous = comparison_windows(7, NOW)

        assert previous.start == datetime(2026, 2, 26, 15, 30, tzinfo=UTC)
        assert previous.end == current.start
        assert not previous.closed
        assert not previous.contains(current.start)
        assert current.contains(current.start)

    def test_day_span_window_covers_whole_days(self):
        window = day_span_window(1, NOW)

        assert window.start == datetime(2026, 3, 12, 0, 0, tzinfo=UTC)
        assert window.end == datetime(2026, 3, 12, 23, 59, 59, 999999, tzinfo=UTC)
        assert window.closed
        assert window.contains(window.end)

    def test_day_span_window_extends_back_for_longer_periods(self):
        window = day_span_window(3, NOW)

        assert window.start == datetime(2026, 3, 10, 0, 0, tzinfo=UTC)


class TestHourBuckets:
    """Tests for hour labels"""

    @pytest.mark.parametrize("hour,label", [
        (0, "12:00 AM"),
        (1, "1:00 AM"),
        (11, "11:00 AM"),
        (12, "12:00 PM"),
        (14, "2:00 PM"),
        (23, "11:00 PM"),
    ])
    def test_hour_label(self, hour, label):
        assert hour_label(hour) == label

    def test_twenty_four_hours(self):
        assert HOURS_IN_DAY == 24


class TestWeekWindows:
    """Tests for Monday-based week windows"""

    def test_weeks_are_oldest_first_and_numbered(self):
        weeks = week_windows(3, NOW)

        assert [week.week_number for week in weeks] == [1, 2, 3]
        assert weeks[-1].start == datetime(2026, 3, 9, 0, 0, tzinfo=UTC)
        assert weeks[0].start == datetime(2026, 2, 23, 0, 0, tzinfo=UTC)

    def test_week_runs_monday_to_sunday(self):
        week = week_windows(1, NOW)[0]

        assert week.start.weekday() == 0
        assert week.end.weekday() == 6
        assert week.end == datetime(2026, 3, 15, 23, 59, 59, 999999, tzinfo=UTC)
        assert week.window.closed

    def test_week_label(self):
        weeks = week_windows(2, NOW)

        assert weeks[0].label == "Mar 02-08"
        assert weeks[1].label == "Mar 09-15"

    def test_consecutive_weeks_do_not_overlap(self):
        weeks = week_windows(4, NOW)

        for earlier, later in zip(weeks, weeks[1:]):
            assert earlier.end < later.start
            assert (later.start - earlier.start).days == 7

    def test_sunday_belongs_to_the_week_that_started_monday(self):
        sunday = datetime(2026, 3, 15, 22, 0, tzinfo=UTC)

        assert week_windows(1, sunday)[0].start == datetime(2026, 3, 9, 0, 0, tzinfo=UTC)
