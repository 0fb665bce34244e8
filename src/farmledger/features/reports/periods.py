"""
Report periods: date windows, bucket labels and their inverse.

Every report buckets records with `bucket_key`, so a label produced by one
report (e.g. ``2024-W9``) can be handed back to `period_to_date_range` to
drill into exactly the records that made up that bucket. All datetimes are
naive UTC.
"""

import calendar
import datetime
import re
from typing import Callable, Optional, Tuple

from ...common.dates import as_naive_utc
from .exceptions import InvalidGroupError, InvalidPeriodError, InvalidRangeError

GROUPS = ("day", "week", "month")
DEFAULT_GROUP = "day"
DEFAULT_WINDOW_DAYS = 30

DateRange = Tuple[datetime.datetime, datetime.datetime]

_DAY_RE = re.compile(r"^(\d{4})-(\d{1,2})-(\d{1,2})$")
_MONTH_RE = re.compile(r"^(\d{4})-(\d{1,2})$")
_WEEK_RE = re.compile(r"^(\d{4})-W(\d{1,2})$")

_END_OF_DAY = datetime.time(23, 59, 59, 999000)


def start_of_day(day: datetime.date) -> datetime.datetime:
    return datetime.datetime.combine(day, datetime.time.min)


def end_of_day(day: datetime.date) -> datetime.datetime:
    return datetime.datetime.combine(day, _END_OF_DAY)


def normalize_group(group: Optional[str]) -> str:
    """Lower-cases `group`, defaulting to ``day``."""
    if group is None or not group.strip():
        return DEFAULT_GROUP
    normalized = group.strip().lower()
    if normalized not in GROUPS:
        raise InvalidGroupError(f"Unsupported group '{group}', expected one of: {', '.join(GROUPS)}")
    return normalized


def _parse_instant(value: str, name: str) -> datetime.datetime:
    try:
        parsed = datetime.datetime.fromisoformat(value.strip())
    except ValueError:
        raise InvalidRangeError(f"Invalid {name} date: '{value}'")
    return as_naive_utc(parsed)


def resolve_date_range(
    start: Optional[str], end: Optional[str], now: datetime.datetime
) -> DateRange:
    """
    Resolves the report window from optional ISO 8601 query values.

    A missing `end` defaults to the last instant of today and a missing
    `start` to the first instant of the day 29 days before the (default) end,
    giving a 30-day window. Supplied values are used exactly as parsed.

    Args:
        start: ISO 8601 date or datetime, or None.
        end: ISO 8601 date or datetime, or None.
        now: The current time (naive UTC).

    Returns:
        The (start, end) pair as naive UTC datetimes.

    Raises:
        InvalidRangeError: If a value cannot be parsed or start is after end.
    """
    today = now.date()
    default_end = end_of_day(today)
    default_start = start_of_day(today - datetime.timedelta(days=DEFAULT_WINDOW_DAYS - 1))

    range_start = _parse_instant(start, "start") if start else default_start
    range_end = _parse_instant(end, "end") if end else default_end
    if range_start > range_end:
        raise InvalidRangeError("start must not be after end")
    return range_start, range_end


def period_to_date_range(period: Optional[str], group: Optional[str]) -> DateRange:
    """
    Maps a bucket label back to the first and last instant it covers.

    ``2024-03-05`` (day), ``2024-03`` (month) and ``2024-W9`` or
    ``2024-W09`` (ISO week, Monday to Sunday) are accepted.
    """
    if not period or not group:
        raise InvalidPeriodError("period and group are required")
    group = normalize_group(group)
    period = period.strip()

    try:
        if group == "day":
            match = _DAY_RE.match(period)
            if not match:
                raise InvalidPeriodError(f"Invalid day period '{period}', expected YYYY-MM-DD")
            day = datetime.date(*(int(part) for part in match.groups()))
            return start_of_day(day), end_of_day(day)

        if group == "month":
            match = _MONTH_RE.match(period)
            if not match:
                raise InvalidPeriodError(f"Invalid month period '{period}', expected YYYY-MM")
            year, month = (int(part) for part in match.groups())
            first = datetime.date(year, month, 1)
            last = first.replace(day=calendar.monthrange(year, month)[1])
            return start_of_day(first), end_of_day(last)

        match = _WEEK_RE.match(period)
        if not match:
            raise InvalidPeriodError(f"Invalid week period '{period}', expected YYYY-Www")
        year, week = (int(part) for part in match.groups())
        monday = datetime.date.fromisocalendar(year, week, 1)
        return start_of_day(monday), end_of_day(monday + datetime.timedelta(days=6))
    except ValueError as e:
        # Out-of-range month, day or ISO week
        raise InvalidPeriodError(f"Invalid {group} period '{period}': {e}")


def _day_label(value: datetime.datetime) -> str:
    return f"{value:%Y-%m-%d}"


def _month_label(value: datetime.datetime) -> str:
    return f"{value:%Y-%m}"


def _week_label(value: datetime.datetime) -> str:
    iso_year, iso_week, _ = value.isocalendar()
    return f"{iso_year}-W{iso_week}"


_LABELLERS = {"day": _day_label, "week": _week_label, "month": _month_label}


def bucket_key(group: str) -> Callable[[datetime.datetime], str]:
    """Returns the function labelling a timestamp with its `group` bucket."""
    labeller = _LABELLERS.get(group)
    if labeller is None:
        raise InvalidGroupError(f"Unsupported group '{group}', expected one of: {', '.join(GROUPS)}")

    def key(value: datetime.datetime) -> str:
        return labeller(as_naive_utc(value))

    return key


def period_sort_key(period: str) -> Tuple[int, ...]:
    """Chronological sort key for bucket labels, so 2024-W9 sorts before 2024-W10."""
    return tuple(int(part) for part in re.findall(r"\d+", period))
