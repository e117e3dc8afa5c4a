"""
Time bucketing for analytics reports

Day keys, hour-of-day buckets and Monday-based week windows, all expressed in
the reporting timezone. Stored timestamps are UTC; naive values coming back
from the database are read as UTC before conversion.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import List, Optional, Tuple
from zoneinfo import ZoneInfo

from backoffice.core.config import settings

HOURS_IN_DAY = 24
DAY_KEY_FORMAT = "%Y-%m-%d"


def get_report_timezone(name: Optional[str] = None) -> ZoneInfo:
    """Resolve the reporting timezone (defaults to ANALYTICS_TIMEZONE)"""
    return ZoneInfo(name or settings.ANALYTICS_TIMEZONE)


def current_time(tz: ZoneInfo) -> datetime:
    return datetime.now(tz)


def localize(moment: datetime, tz: ZoneInfo) -> datetime:
    """Express a timestamp in the reporting timezone"""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(tz)


def to_utc(moment: datetime) -> datetime:
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


def start_of_day(moment: datetime) -> datetime:
    return moment.replace(hour=0, minute=0, second=0, microsecond=0)


def end_of_day(moment: datetime) -> datetime:
    return moment.replace(hour=23, minute=59, second=59, microsecond=999999)


def day_key(moment: datetime, tz: ZoneInfo) -> str:
    """Canonical YYYY-MM-DD key of the local calendar day"""
    return localize(moment, tz).strftime(DAY_KEY_FORMAT)


def hour_of_day(moment: datetime, tz: ZoneInfo) -> int:
    return localize(moment, tz).hour


def hour_label(hour: int) -> str:
    """12-hour clock label, e.g. 0 -> '12:00 AM', 14 -> '2:00 PM'"""
    suffix = "AM" if hour < 12 else "PM"
    return f"{hour % 12 or 12}:00 {suffix}"


@dataclass(frozen=True)
class TimeWindow:
    """Creation-date range; start inclusive, end exclusive unless closed"""

    start: datetime
    end: Optional[datetime] = None
    closed: bool = False

    def contains(self, moment: datetime) -> bool:
        moment = to_utc(moment)
        if moment < to_utc(self.start):
            return False
        if self.end is None:
            return True
        end = to_utc(self.end)
        return moment <= end if self.closed else moment < end


def lookback_window(period: int, now: datetime) -> TimeWindow:
    """Everything created since `period` days before now"""
    return TimeWindow(start=now - timedelta(days=period))


def comparison_windows(period: int, now: datetime) -> Tuple[TimeWindow, TimeWindow]:
    """Current window and the equal-length window immediately before it"""
    boundary = now - timedelta(days=period)
    current = TimeWindow(start=boundary)
    previous = TimeWindow(start=now - timedelta(days=period * 2), end=boundary)
    return current, previous


def day_span_window(period: int, now: datetime) -> TimeWindow:
    """Whole calendar days: the last `period` days including today"""
    return TimeWindow(
        start=start_of_day(now - timedelta(days=period - 1)),
        end=end_of_day(now),
        closed=True,
    )


def daily_bucket_keys(period: int, now: datetime) -> List[str]:
    """
    One key per calendar day from now - period days to today.

    Offsets are generated newest first; keys are returned in ascending
    date order, which for ISO dates is plain string order.
    """
    keys = [
        (now - timedelta(days=offset)).strftime(DAY_KEY_FORMAT)
        for offset in range(period + 1)
    ]
    return sorted(keys)


@dataclass(frozen=True)
class WeekWindow:
    """Monday 00:00 to Sunday 23:59:59.999999 in the reporting timezone"""

    week_number: int
    start: datetime
    end: datetime

    @property
    def label(self) -> str:
        return f"{self.start:%b %d}-{self.end:%d}"

    @property
    def window(self) -> TimeWindow:
        return TimeWindow(start=self.start, end=self.end, closed=True)


def week_windows(weeks: int, now: datetime) -> List[WeekWindow]:
    """`weeks` consecutive weeks ending with the current one, oldest first"""
    current_week_start = start_of_day(now - timedelta(days=now.weekday()))

    spans = []
    for offset in range(weeks):
        start = current_week_start - timedelta(weeks=offset)
        spans.append((start, end_of_day(start + timedelta(days=6))))
    spans.reverse()

    return [
        WeekWindow(week_number=number, start=start, end=end)
        for number, (start, end) in enumerate(spans, start=1)
    ]
