"""Period identifier parsing and date-range derivation."""

import calendar
import re
from datetime import date, timedelta

from ghstars.errors import ValidationError
from ghstars.models import Period, PeriodKind

DAY_SHAPE = re.compile(r"(\d{4})-(\d{2})-(\d{2})", re.ASCII)
WEEK_SHAPE = re.compile(r"(\d{4})-W(\d+)", re.ASCII)
MONTH_SHAPE = re.compile(r"(\d{4})-(\d{2})", re.ASCII)
WEEK_GRAMMAR = re.compile(r"\d{4}-W(0?[1-9]|[1-4][0-9]|5[0-2])", re.ASCII)

DAY_FORMAT_ERROR = "Invalid date format. Use YYYY-MM-DD"
WEEK_FORMAT_ERROR = "Invalid week format. Use YYYY-W1 to YYYY-W52"
MONTH_FORMAT_ERROR = "Invalid month format. Use YYYY-MM"
UNKNOWN_FORMAT_ERROR = "Please fetch YYYY-MM-DD, YYYY-W1-52, or YYYY-MM"


def week_dates(year: int, week: int) -> tuple[date, date]:
    """Compute the first and last day of a numbered week.

    Weeks are counted from the week holding January 1st, starting on
    Monday, except when January 1st is a Sunday: week 1 then starts on
    January 2nd. This is not ISO-8601 week numbering.

    Args:
        year: Calendar year.
        week: Week number (1-52).

    Returns:
        Tuple of (start_date, end_date), seven days inclusive.
    """
    january_first = date(year, 1, 1)
    # Sunday = 0 ... Saturday = 6
    day_of_week = (january_first.weekday() + 1) % 7
    days_to_add = (week - 1) * 7 - day_of_week + 1

    start_date = january_first + timedelta(days=days_to_add)
    return start_date, start_date + timedelta(days=6)


def days_in_month(year: int, month: int) -> int:
    """Number of days in a month, leap years included."""
    return calendar.monthrange(year, month)[1]


def _parse_day(raw: str, match: re.Match) -> Period:
    year, month, day = (int(part) for part in match.groups())
    try:
        value = date(year, month, day)
    except ValueError as e:
        raise ValidationError(DAY_FORMAT_ERROR) from e
    return Period(PeriodKind.DAY, raw, value, value)


def _parse_week(raw: str, match: re.Match) -> Period:
    if not WEEK_GRAMMAR.fullmatch(raw):
        raise ValidationError(WEEK_FORMAT_ERROR)
    year, week = int(match.group(1)), int(match.group(2))
    try:
        start_date, end_date = week_dates(year, week)
    except (ValueError, OverflowError) as e:
        raise ValidationError(WEEK_FORMAT_ERROR) from e
    return Period(PeriodKind.WEEK, raw, start_date, end_date)


def _parse_month(raw: str, match: re.Match) -> Period:
    year, month = int(match.group(1)), int(match.group(2))
    if not 1 <= month <= 12 or year < 1:
        raise ValidationError(MONTH_FORMAT_ERROR)
    start_date = date(year, month, 1)
    end_date = date(year, month, days_in_month(year, month))
    return Period(PeriodKind.MONTH, raw, start_date, end_date)


def parse_period(raw: str) -> Period:
    """Parse and validate a period identifier.

    The identifier is classified by shape first, so a string that looks
    like a day but is not a calendar date reports the day format error.

    Args:
        raw: Identifier such as "2024-01-31", "2024-W5" or "2024-01".

    Returns:
        The resolved Period.

    Raises:
        ValidationError: When the identifier is invalid for its grammar
            or matches no grammar at all.
    """
    if match := DAY_SHAPE.fullmatch(raw):
        return _parse_day(raw, match)
    if match := WEEK_SHAPE.fullmatch(raw):
        return _parse_week(raw, match)
    if match := MONTH_SHAPE.fullmatch(raw):
        return _parse_month(raw, match)
    raise ValidationError(UNKNOWN_FORMAT_ERROR)
