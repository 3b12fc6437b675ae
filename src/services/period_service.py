"""Period resolution for leaderboards and comparisons.

This module turns period tokens ("this_month", "custom", ...) into concrete,
inclusive calendar date ranges and derives comparison ranges from them.

Key Concepts:
- Reference date: "today" is read from the clock exactly once per request
  (get_reference_date) and passed explicitly to every other function here.
- All-time: resolves to None, meaning "no date bound". Callers use lifetime
  aggregates instead of date-bounded aggregation.
- Comparison ranges: derived from an already-resolved primary range. When the
  primary range is None there is nothing to compare against and no comparison
  is produced.

parse_date and period_label are for route handlers turning query strings into
arguments and ranges into display text; the services themselves take dates.
"""

import logging
from datetime import date, datetime, timedelta
from zoneinfo import ZoneInfo

from dateutil.relativedelta import relativedelta

from src.core.config import Constants, settings
from src.core.errors import InvalidRangeError
from src.domain.period import ComparisonMode, PeriodRange, PeriodToken


logger = logging.getLogger(__name__)

_PERIOD_LABELS: dict[PeriodToken, str] = {
    PeriodToken.ALL_TIME: "All Time",
    PeriodToken.THIS_YEAR: "This Year",
    PeriodToken.THIS_MONTH: "This Month",
    PeriodToken.LAST_30_DAYS: "Last 30 Days",
    PeriodToken.LAST_7_DAYS: "Last 7 Days",
    PeriodToken.CUSTOM: "Custom",
    PeriodToken.TODAY: "Today",
    PeriodToken.YESTERDAY: "Yesterday",
    PeriodToken.THIS_WEEK: "This Week",
    PeriodToken.LAST_WEEK: "Last Week",
    PeriodToken.LAST_MONTH: "Last Month",
    PeriodToken.LAST_90_DAYS: "Last 90 Days",
}

_COMPARISON_LABELS: dict[ComparisonMode, str] = {
    ComparisonMode.PREVIOUS: "Previous Period",
    ComparisonMode.LAST_YEAR: "Same Period Last Year",
    ComparisonMode.CUSTOM: "Custom Comparison",
}


def get_reference_date(tz_name: str | None = None) -> date:
    """Get today's date in the reference time zone.

    Args:
        tz_name: IANA zone name. Defaults to settings.reference_timezone.

    Returns:
        Current calendar date in that zone
    """
    return datetime.now(ZoneInfo(tz_name or settings.reference_timezone)).date()


def parse_date(value: str) -> date:
    """Parse a YYYY-MM-DD string.

    Route handlers use this for date query parameters.

    Raises:
        InvalidRangeError: If the string is not a valid calendar date
    """
    try:
        return datetime.strptime(value, Constants.DATE_FORMAT).date()
    except ValueError as e:
        msg = f"Invalid date '{value}'. Use YYYY-MM-DD format."
        raise InvalidRangeError(msg) from e


def get_week_start(day: date) -> date:
    """Get the Monday of the week containing the given day."""
    return day - timedelta(days=day.weekday())


def period_label(token: PeriodToken | str) -> str:
    """Get the human-readable label for a period token (the raw value if unknown)."""
    try:
        return _PERIOD_LABELS[PeriodToken(token)]
    except ValueError:
        return str(token)


def days_in_range(period: PeriodRange | None) -> int:
    """Number of days in a range, both ends included (0 for an unbounded period)."""
    return period.day_count if period else 0


def _build_range(start: date | None, end: date | None, label: str) -> PeriodRange:
    if start is None or end is None:
        msg = "Custom range requires both a start and an end date"
        raise InvalidRangeError(msg, start=start, end=end)
    if start > end:
        msg = f"Custom range start {start.isoformat()} is after end {end.isoformat()}"
        raise InvalidRangeError(msg, start=start, end=end)
    return PeriodRange(start=start, end=end, label=label)


def _trailing_days(reference_date: date, span: int, label: str) -> PeriodRange:
    return PeriodRange(start=reference_date - timedelta(days=span - 1), end=reference_date, label=label)


def _coerce_token(token: PeriodToken | str) -> PeriodToken:
    try:
        return PeriodToken(token)
    except ValueError as e:
        msg = f"Unknown period '{token}'"
        raise InvalidRangeError(msg) from e


def resolve_period(  # noqa: C901, PLR0911
    token: PeriodToken | str,
    *,
    reference_date: date,
    start: date | None = None,
    end: date | None = None,
) -> PeriodRange | None:
    """Resolve a period token into a concrete date range.

    Args:
        token: Period token
        reference_date: "Today" for this request
        start: Explicit start (custom periods only)
        end: Explicit end (custom periods only)

    Returns:
        Inclusive PeriodRange, or None for all_time (no date bound)

    Raises:
        InvalidRangeError: Unknown token, or custom period with a missing/inverted bound
    """
    period = _coerce_token(token)
    label = _PERIOD_LABELS[period]

    match period:
        case PeriodToken.ALL_TIME:
            return None
        case PeriodToken.CUSTOM:
            return _build_range(start, end, label)
        case PeriodToken.THIS_YEAR:
            return PeriodRange(start=reference_date.replace(month=1, day=1), end=reference_date, label=label)
        case PeriodToken.THIS_MONTH:
            return PeriodRange(start=reference_date.replace(day=1), end=reference_date, label=label)
        case PeriodToken.LAST_30_DAYS:
            return _trailing_days(reference_date, Constants.LAST_30_DAYS_SPAN, label)
        case PeriodToken.LAST_7_DAYS:
            return _trailing_days(reference_date, Constants.LAST_7_DAYS_SPAN, label)
        case PeriodToken.LAST_90_DAYS:
            return _trailing_days(reference_date, Constants.LAST_90_DAYS_SPAN, label)
        case PeriodToken.TODAY:
            return PeriodRange(start=reference_date, end=reference_date, label=label)
        case PeriodToken.YESTERDAY:
            yesterday = reference_date - timedelta(days=1)
            return PeriodRange(start=yesterday, end=yesterday, label=label)
        case PeriodToken.THIS_WEEK:
            # Up to today, never into the future
            return PeriodRange(start=get_week_start(reference_date), end=reference_date, label=label)
        case PeriodToken.LAST_WEEK:
            last_week_end = get_week_start(reference_date) - timedelta(days=1)
            return PeriodRange(start=get_week_start(last_week_end), end=last_week_end, label=label)
        case PeriodToken.LAST_MONTH:
            last_month_end = reference_date.replace(day=1) - timedelta(days=1)
            return PeriodRange(start=last_month_end.replace(day=1), end=last_month_end, label=label)

    msg = f"Unknown period '{token}'"
    raise InvalidRangeError(msg)


def _coerce_mode(mode: ComparisonMode | str) -> ComparisonMode:
    try:
        return ComparisonMode(mode)
    except ValueError as e:
        msg = f"Unknown comparison mode '{mode}'"
        raise InvalidRangeError(msg) from e


def validate_comparison(
    mode: ComparisonMode | str,
    *,
    start: date | None = None,
    end: date | None = None,
) -> ComparisonMode:
    """Check a comparison request before the primary range is final.

    Used when the primary range still depends on data that has not been read
    yet (a league's counting start), so bad input fails before any store read.

    Raises:
        InvalidRangeError: Unknown mode, or custom mode with a missing/inverted bound
    """
    comparison = _coerce_mode(mode)
    if comparison == ComparisonMode.CUSTOM:
        _build_range(start, end, _COMPARISON_LABELS[comparison])
    return comparison


def resolve_comparison_range(
    primary: PeriodRange | None,
    mode: ComparisonMode | str,
    *,
    start: date | None = None,
    end: date | None = None,
) -> PeriodRange | None:
    """Derive the range a primary range is compared against.

    Modes:
    - previous: same length, ending the day before the primary range starts
    - last_year: both bounds shifted back one calendar year independently
      (Feb 29 maps to Feb 28)
    - custom: explicit bounds, validated like a custom primary range

    Args:
        primary: Resolved primary range (None for all_time)
        mode: Comparison mode
        start: Explicit start (custom mode only)
        end: Explicit end (custom mode only)

    Returns:
        Comparison range, or None when the primary range is unbounded

    Raises:
        InvalidRangeError: Unknown mode, or custom mode with a missing/inverted bound
    """
    comparison = _coerce_mode(mode)

    if primary is None:
        logger.info("Comparison '%s' dropped: primary period has no date bounds", comparison)
        return None

    label = _COMPARISON_LABELS[comparison]

    if comparison == ComparisonMode.PREVIOUS:
        previous_end = primary.start - timedelta(days=1)
        previous_start = previous_end - timedelta(days=primary.day_count - 1)
        return PeriodRange(start=previous_start, end=previous_end, label=label)

    if comparison == ComparisonMode.LAST_YEAR:
        one_year = relativedelta(years=1)
        return PeriodRange(start=primary.start - one_year, end=primary.end - one_year, label=label)

    return _build_range(start, end, label)


def clamp_to_counting_start(period: PeriodRange | None, counting_start: date | None) -> PeriodRange | None:
    """Clamp a range so it never starts before a league's counting start date.

    Returns:
        The range unchanged when there is no counting start or it already starts
        on/after it, a range moved forward to the counting start, or None when
        the whole range lies before the counting start
    """
    if period is None or counting_start is None:
        return period
    if period.end < counting_start:
        return None
    if period.start < counting_start:
        return period.model_copy(update={"start": counting_start})
    return period


def resolve_league_period(
    token: PeriodToken | str,
    *,
    reference_date: date,
    counting_start: date | None = None,
    start: date | None = None,
    end: date | None = None,
) -> tuple[PeriodRange | None, bool]:
    """Resolve a period for a league that may have a counting start date.

    For all_time, a league with a counting start gets the bounded range
    [counting_start, today] instead of an unbounded period.

    Returns:
        Tuple of (range, is_out_of_bounds). is_out_of_bounds is True when the
        requested period lies entirely before the league's counting start, in
        which case the league has no stats for it.

    Raises:
        InvalidRangeError: Unknown token, or custom period with a missing/inverted bound
    """
    period = resolve_period(token, reference_date=reference_date, start=start, end=end)
    return apply_counting_start(period, token, reference_date=reference_date, counting_start=counting_start)


def apply_counting_start(
    period: PeriodRange | None,
    token: PeriodToken | str,
    *,
    reference_date: date,
    counting_start: date | None,
) -> tuple[PeriodRange | None, bool]:
    """Apply a league's counting start to a period already resolved from token.

    Returns:
        Tuple of (range, is_out_of_bounds), as for resolve_league_period
    """
    if PeriodToken(token) == PeriodToken.ALL_TIME and counting_start is not None:
        if counting_start > reference_date:
            return None, True
        return PeriodRange(start=counting_start, end=reference_date, label=_PERIOD_LABELS[PeriodToken.ALL_TIME]), False

    clamped = clamp_to_counting_start(period, counting_start)
    return clamped, period is not None and clamped is None
