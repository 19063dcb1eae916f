"""Tests for period parsing."""

from datetime import date

import pytest

from ghstars.errors import ValidationError
from ghstars.models import PeriodKind
from ghstars.periods import days_in_month, parse_period, week_dates


class TestParsePeriod:
    """Tests for parse_period."""

    def test_day(self) -> None:
        """Test a calendar day resolves to a one-day range."""
        period = parse_period("2024-01-01")

        assert period.kind is PeriodKind.DAY
        assert period.start_date == period.end_date == date(2024, 1, 1)
        assert period.days() == [date(2024, 1, 1)]

    @pytest.mark.parametrize("raw", ["2024-13-40", "2023-02-29", "2024-00-10"])
    def test_day_not_on_calendar(self, raw: str) -> None:
        """Test day-shaped strings that are not real dates."""
        with pytest.raises(ValidationError, match="Invalid date format"):
            parse_period(raw)

    @pytest.mark.parametrize("raw", ["2024-W1", "2024-W01", "2024-W52", "2024-W30"])
    def test_week_accepted(self, raw: str) -> None:
        """Test week numbers 1-52 with optional leading zero."""
        period = parse_period(raw)

        assert period.kind is PeriodKind.WEEK
        assert period.identifier == raw
        assert len(period.days()) == 7

    @pytest.mark.parametrize("raw", ["2024-W53", "2024-W0", "2024-W00", "2024-W052"])
    def test_week_out_of_range(self, raw: str) -> None:
        """Test week numbers outside 1-52 are rejected."""
        with pytest.raises(ValidationError, match="Invalid week format"):
            parse_period(raw)

    def test_month(self) -> None:
        """Test a month spans all its days."""
        period = parse_period("2024-02")

        assert period.kind is PeriodKind.MONTH
        assert period.start_date == date(2024, 2, 1)
        assert period.end_date == date(2024, 2, 29)

    @pytest.mark.parametrize("raw", ["2024-13", "2024-00"])
    def test_month_invalid(self, raw: str) -> None:
        """Test months outside 01-12."""
        with pytest.raises(ValidationError, match="Invalid month format"):
            parse_period(raw)

    @pytest.mark.parametrize(
        "raw",
        ["2024-01-01\n", "2024-W5\n", "2024-02\n", " 2024-02", "2024-01-01 ", "٢٠٢٤-٠٢"],
    )
    def test_surrounding_characters_rejected(self, raw: str) -> None:
        """Test identifiers must match a grammar exactly."""
        with pytest.raises(ValidationError):
            parse_period(raw)

    @pytest.mark.parametrize("raw", ["", "today", "2024", "2024-1-1", "24-01-01"])
    def test_unknown_shape(self, raw: str) -> None:
        """Test strings matching no grammar."""
        with pytest.raises(ValidationError, match="Please fetch"):
            parse_period(raw)


class TestWeekDates:
    """Tests for the week numbering."""

    def test_year_starting_monday(self) -> None:
        """2024-01-01 is a Monday, so week 1 starts on it."""
        assert week_dates(2024, 1) == (date(2024, 1, 1), date(2024, 1, 7))

    def test_year_starting_sunday(self) -> None:
        """2023-01-01 is a Sunday, so week 1 starts the day after."""
        assert week_dates(2023, 1) == (date(2023, 1, 2), date(2023, 1, 8))

    def test_year_starting_midweek(self) -> None:
        """2025-01-01 is a Wednesday, so week 1 starts in the prior year."""
        assert week_dates(2025, 1) == (date(2024, 12, 30), date(2025, 1, 5))

    def test_later_week(self) -> None:
        """Test weeks advance by seven days."""
        assert week_dates(2024, 10) == (date(2024, 3, 4), date(2024, 3, 10))


def test_days_in_month_leap_years() -> None:
    """Test February length across leap rules."""
    assert days_in_month(2024, 2) == 29
    assert days_in_month(2023, 2) == 28
    assert days_in_month(2000, 2) == 29
    assert days_in_month(1900, 2) == 28
    assert days_in_month(2024, 12) == 31
