"""
Date normalization for report periods.

Inputs may be date objects, datetimes or strings (YYYY-MM-DD or ISO 8601
datetimes). The calendar day of the input is kept as-is and pinned to UTC
day boundaries; no timezone conversion happens first, so callers should
send plain YYYY-MM-DD strings.
"""
import calendar
from datetime import date, datetime, time, timezone as dt_timezone
from typing import NamedTuple

from django.utils.dateparse import parse_date, parse_datetime

from .exceptions import InvalidDateFormatError, InvalidDateRangeError, ValidationError

DAY_END = time(23, 59, 59, 999000)


class NormalizedRange(NamedTuple):
    start_utc: datetime
    end_utc: datetime
    start_str: str
    end_str: str

    @property
    def start_date(self) -> date:
        return self.start_utc.date()

    @property
    def end_date(self) -> date:
        return self.end_utc.date()


class NormalizedDate(NamedTuple):
    date_utc: datetime
    date_str: str

    @property
    def date(self) -> date:
        return self.date_utc.date()

    @property
    def day_end_utc(self) -> datetime:
        return datetime.combine(self.date_utc.date(), DAY_END, tzinfo=dt_timezone.utc)


def parse_day(value, field: str = None) -> date:
    """Resolve a date-like value to its calendar day."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        raise InvalidDateFormatError(field=field, value=value)

    text = value.strip()
    try:
        parsed = parse_date(text)
        if parsed is not None:
            return parsed
        parsed_dt = parse_datetime(text)
    except ValueError:
        # Well formed but impossible, e.g. 2024-02-30
        raise InvalidDateFormatError(field=field, value=value)

    if parsed_dt is None:
        raise InvalidDateFormatError(field=field, value=value)
    return parsed_dt.date()


def day_start_utc(day: date) -> datetime:
    return datetime.combine(day, time.min, tzinfo=dt_timezone.utc)


def day_end_utc(day: date) -> datetime:
    return datetime.combine(day, DAY_END, tzinfo=dt_timezone.utc)


def normalize_date_range(start, end) -> NormalizedRange:
    """
    Normalize a start/end pair to UTC day boundaries.

    Raises:
        ValidationError: either value missing
        InvalidDateFormatError: either value unparseable
        InvalidDateRangeError: end before start
    """
    if start in (None, '') or end in (None, ''):
        raise ValidationError('Start date and end date are required')

    start_day = parse_day(start, field='start_date')
    end_day = parse_day(end, field='end_date')

    if end_day < start_day:
        raise InvalidDateRangeError(start=start_day, end=end_day)

    return NormalizedRange(
        start_utc=day_start_utc(start_day),
        end_utc=day_end_utc(end_day),
        start_str=start_day.isoformat(),
        end_str=end_day.isoformat(),
    )


def normalize_date(value) -> NormalizedDate:
    """Normalize a single date to 00:00:00 UTC of its day."""
    if value in (None, ''):
        raise ValidationError('Report date is required', field='report_date')

    day = parse_day(value, field='report_date')
    return NormalizedDate(date_utc=day_start_utc(day), date_str=day.isoformat())


def month_range(year: int, month: int):
    """First and last day of a calendar month."""
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)
