"""Unit tests for period_service module."""

from datetime import date

import pytest

from src.core.errors import InvalidRangeError
from src.domain.period import ComparisonMode, PeriodRange, PeriodToken
from src.services import period_service


@pytest.mark.unit
class TestResolvePeriod:
    """Tests for resolve_period function."""

    def test_all_time_is_unbounded(self, reference_date):
        """all_time resolves to None (use lifetime aggregates)."""
        assert period_service.resolve_period(PeriodToken.ALL_TIME, reference_date=reference_date) is None

    def test_this_year(self, reference_date):
        """this_year runs from Jan 1 to today."""
        result = period_service.resolve_period("this_year", reference_date=reference_date)
        assert result.start == date(2026, 1, 1)
        assert result.end == reference_date
        assert result.label == "This Year"

    def test_this_month(self):
        """this_month runs from the first of the month to today."""
        result = period_service.resolve_period("this_month", reference_date=date(2026, 3, 17))
        assert result.start == date(2026, 3, 1)
        assert result.end == date(2026, 3, 17)

    def test_last_30_days_is_exactly_30_days(self, reference_date):
        """last_30_days is an inclusive 30-day window ending today."""
        result = period_service.resolve_period("last_30_days", reference_date=reference_date)
        assert result.start == date(2025, 12, 16)
        assert result.end == reference_date
        assert result.day_count == 30

    def test_last_7_days_is_exactly_7_days(self, reference_date):
        """last_7_days is an inclusive 7-day window ending today."""
        result = period_service.resolve_period("last_7_days", reference_date=reference_date)
        assert result.start == date(2026, 1, 8)
        assert result.day_count == 7

    def test_custom_range(self, reference_date):
        """custom uses the explicit bounds."""
        result = period_service.resolve_period(
            "custom", reference_date=reference_date, start=date(2025, 6, 1), end=date(2025, 6, 30)
        )
        assert result == PeriodRange(start=date(2025, 6, 1), end=date(2025, 6, 30), label="Custom")

    def test_custom_single_day(self, reference_date):
        """A custom range may start and end on the same day."""
        result = period_service.resolve_period(
            "custom", reference_date=reference_date, start=date(2026, 1, 1), end=date(2026, 1, 1)
        )
        assert result.day_count == 1

    def test_custom_missing_start_raises(self, reference_date):
        """custom without a start bound is rejected."""
        with pytest.raises(InvalidRangeError, match="both a start and an end"):
            period_service.resolve_period("custom", reference_date=reference_date, end=date(2026, 1, 1))

    def test_custom_missing_end_raises(self, reference_date):
        """custom without an end bound is rejected."""
        with pytest.raises(InvalidRangeError):
            period_service.resolve_period("custom", reference_date=reference_date, start=date(2026, 1, 1))

    def test_custom_inverted_range_raises(self, reference_date):
        """custom with start after end is rejected and carries the bounds."""
        with pytest.raises(InvalidRangeError) as exc_info:
            period_service.resolve_period(
                "custom", reference_date=reference_date, start=date(2026, 2, 1), end=date(2026, 1, 1)
            )
        assert exc_info.value.start == date(2026, 2, 1)
        assert exc_info.value.end == date(2026, 1, 1)

    def test_unknown_token_raises(self, reference_date):
        """Unknown tokens are rejected."""
        with pytest.raises(InvalidRangeError, match="Unknown period"):
            period_service.resolve_period("fortnight", reference_date=reference_date)

    def test_this_week_starts_monday_and_ends_today(self, reference_date):
        """this_week runs from Monday up to today, never into the future."""
        result = period_service.resolve_period("this_week", reference_date=reference_date)
        assert result.start == date(2026, 1, 12)
        assert result.end == reference_date

    def test_last_week_is_previous_monday_to_sunday(self, reference_date):
        """last_week is the full previous Monday-Sunday week."""
        result = period_service.resolve_period("last_week", reference_date=reference_date)
        assert result.start == date(2026, 1, 5)
        assert result.end == date(2026, 1, 11)

    def test_last_month_crosses_year_boundary(self, reference_date):
        """last_month in January is the previous December."""
        result = period_service.resolve_period("last_month", reference_date=reference_date)
        assert result.start == date(2025, 12, 1)
        assert result.end == date(2025, 12, 31)

    def test_today_and_yesterday(self, reference_date):
        """today and yesterday are single-day ranges."""
        today = period_service.resolve_period("today", reference_date=reference_date)
        yesterday = period_service.resolve_period("yesterday", reference_date=reference_date)
        assert (today.start, today.end) == (reference_date, reference_date)
        assert (yesterday.start, yesterday.end) == (date(2026, 1, 13), date(2026, 1, 13))

    def test_last_90_days(self, reference_date):
        """last_90_days is an inclusive 90-day window."""
        result = period_service.resolve_period("last_90_days", reference_date=reference_date)
        assert result.day_count == 90


@pytest.mark.unit
class TestResolveComparisonRange:
    """Tests for resolve_comparison_range function."""

    def test_previous_immediately_precedes_primary(self):
        """previous ends the day before the primary range starts."""
        primary = PeriodRange(start=date(2026, 1, 8), end=date(2026, 1, 14))
        result = period_service.resolve_comparison_range(primary, ComparisonMode.PREVIOUS)
        assert result.start == date(2026, 1, 1)
        assert result.end == date(2026, 1, 7)

    @pytest.mark.parametrize(
        ("start", "end"),
        [
            (date(2026, 1, 1), date(2026, 1, 1)),
            (date(2026, 1, 1), date(2026, 1, 14)),
            (date(2024, 2, 1), date(2024, 3, 31)),
            (date(2025, 3, 1), date(2025, 12, 31)),
        ],
    )
    def test_previous_has_identical_duration(self, start, end):
        """previous always covers the same number of days as the primary range."""
        primary = PeriodRange(start=start, end=end)
        result = period_service.resolve_comparison_range(primary, "previous")
        assert result.day_count == primary.day_count
        assert (primary.start - result.end).days == 1

    def test_last_year_shifts_both_bounds(self):
        """last_year shifts each bound back one calendar year."""
        primary = PeriodRange(start=date(2026, 1, 1), end=date(2026, 1, 14))
        result = period_service.resolve_comparison_range(primary, "last_year")
        assert result.start == date(2025, 1, 1)
        assert result.end == date(2025, 1, 14)

    def test_last_year_from_leap_day(self):
        """Feb 29 maps to Feb 28 of the previous year."""
        primary = PeriodRange(start=date(2024, 2, 1), end=date(2024, 2, 29))
        result = period_service.resolve_comparison_range(primary, "last_year")
        assert result.start == date(2023, 2, 1)
        assert result.end == date(2023, 2, 28)

    def test_custom_comparison(self):
        """custom comparison uses the explicit bounds."""
        primary = PeriodRange(start=date(2026, 1, 1), end=date(2026, 1, 14))
        result = period_service.resolve_comparison_range(
            primary, "custom", start=date(2025, 7, 1), end=date(2025, 7, 14)
        )
        assert result.start == date(2025, 7, 1)
        assert result.end == date(2025, 7, 14)

    def test_custom_comparison_inverted_raises(self):
        """custom comparison bounds are validated like the primary range."""
        primary = PeriodRange(start=date(2026, 1, 1), end=date(2026, 1, 14))
        with pytest.raises(InvalidRangeError):
            period_service.resolve_comparison_range(
                primary, "custom", start=date(2025, 7, 14), end=date(2025, 7, 1)
            )

    def test_unbounded_primary_yields_no_comparison(self):
        """Without a resolved primary range there is no comparison, and no error."""
        assert period_service.resolve_comparison_range(None, "previous") is None
        assert period_service.resolve_comparison_range(None, "custom") is None

    def test_unknown_mode_raises(self):
        """Unknown comparison modes are rejected."""
        primary = PeriodRange(start=date(2026, 1, 1), end=date(2026, 1, 14))
        with pytest.raises(InvalidRangeError, match="Unknown comparison mode"):
            period_service.resolve_comparison_range(primary, "next_year")

    def test_validate_comparison_without_primary(self):
        """Comparison requests are checked even before a primary range exists."""
        assert period_service.validate_comparison("previous") == ComparisonMode.PREVIOUS
        with pytest.raises(InvalidRangeError, match="Unknown comparison mode"):
            period_service.validate_comparison("next_year")
        with pytest.raises(InvalidRangeError, match="both a start and an end"):
            period_service.validate_comparison("custom", start=date(2025, 12, 1))


@pytest.mark.unit
class TestCountingStartClamp:
    """Tests for clamp_to_counting_start and resolve_league_period."""

    def test_no_counting_start_leaves_range_unchanged(self):
        """Ranges pass through when the league has no counting start."""
        period = PeriodRange(start=date(2026, 1, 1), end=date(2026, 1, 14))
        assert period_service.clamp_to_counting_start(period, None) == period

    def test_range_starting_before_counting_start_is_moved(self):
        """A range straddling the counting start begins at the counting start."""
        period = PeriodRange(start=date(2026, 1, 1), end=date(2026, 1, 14), label="This Month")
        result = period_service.clamp_to_counting_start(period, date(2026, 1, 10))
        assert result.start == date(2026, 1, 10)
        assert result.end == date(2026, 1, 14)
        assert result.label == "This Month"

    def test_range_entirely_before_counting_start_is_dropped(self):
        """A range ending before the counting start has no valid period."""
        period = PeriodRange(start=date(2025, 12, 1), end=date(2025, 12, 31))
        assert period_service.clamp_to_counting_start(period, date(2026, 1, 1)) is None

    def test_league_all_time_uses_counting_start(self, reference_date):
        """all_time for a league with a counting start becomes [counting_start, today]."""
        result, out_of_bounds = period_service.resolve_league_period(
            "all_time", reference_date=reference_date, counting_start=date(2026, 1, 5)
        )
        assert result.start == date(2026, 1, 5)
        assert result.end == reference_date
        assert out_of_bounds is False

    def test_league_all_time_without_counting_start_is_unbounded(self, reference_date):
        """all_time for a league without a counting start stays unbounded."""
        result, out_of_bounds = period_service.resolve_league_period("all_time", reference_date=reference_date)
        assert result is None
        assert out_of_bounds is False

    def test_league_period_before_counting_start_is_out_of_bounds(self, reference_date):
        """A period entirely before the counting start is flagged out of bounds."""
        result, out_of_bounds = period_service.resolve_league_period(
            "last_week", reference_date=reference_date, counting_start=date(2026, 1, 13)
        )
        assert result is None
        assert out_of_bounds is True

    def test_apply_counting_start_future_league_is_out_of_bounds(self, reference_date):
        """all_time for a league that has not started counting yet has no valid period."""
        result, out_of_bounds = period_service.apply_counting_start(
            None, "all_time", reference_date=reference_date, counting_start=date(2026, 2, 1)
        )
        assert result is None
        assert out_of_bounds is True


@pytest.mark.unit
class TestHelpers:
    """Tests for period helper functions."""

    @pytest.mark.parametrize(
        ("day", "expected"),
        [
            (date(2026, 1, 12), date(2026, 1, 12)),  # Monday
            (date(2026, 1, 14), date(2026, 1, 12)),  # Wednesday
            (date(2026, 1, 18), date(2026, 1, 12)),  # Sunday
            (date(2026, 1, 1), date(2025, 12, 29)),  # Thursday across year boundary
        ],
    )
    def test_get_week_start(self, day, expected):
        """get_week_start returns the Monday of the week."""
        assert period_service.get_week_start(day) == expected

    def test_days_in_range(self):
        """days_in_range counts both ends, and 0 for unbounded periods."""
        assert period_service.days_in_range(PeriodRange(start=date(2026, 1, 1), end=date(2026, 1, 31))) == 31
        assert period_service.days_in_range(None) == 0

    def test_period_label(self):
        """Known tokens get labels, unknown ones are returned as-is."""
        assert period_service.period_label("last_30_days") == "Last 30 Days"
        assert period_service.period_label("mystery") == "mystery"

    def test_parse_date(self):
        """parse_date accepts YYYY-MM-DD and rejects anything else."""
        assert period_service.parse_date("2026-01-14") == date(2026, 1, 14)
        with pytest.raises(InvalidRangeError):
            period_service.parse_date("14/01/2026")

    def test_get_reference_date_returns_date(self):
        """get_reference_date returns a calendar date for the configured zone."""
        result = period_service.get_reference_date("UTC")
        assert isinstance(result, date)
