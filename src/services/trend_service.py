"""Trend series and summary statistics for a user's activity.

A trend is a sequence of consecutive buckets (days, weeks or months), each
holding the de-duplicated activity total for that bucket. The summary
reduces the series to headline numbers: total, average, best and worst
bucket, percent change from the first bucket to the last, and direction.
"""

import logging
from collections.abc import Iterable
from datetime import date, timedelta
from enum import StrEnum

from dateutil.relativedelta import relativedelta

from src.core.config import Constants, settings
from src.core.logging import span
from src.core.rounding import round_percent, round_to_int
from src.domain.activity import ActivityRecord, VerifiedFilter
from src.domain.period import PeriodRange
from src.models.service_models import (
    TrendComparisonPoint,
    TrendDataPoint,
    TrendDirection,
    TrendReport,
    TrendSummary,
)
from src.services import aggregation_service, period_service


logger = logging.getLogger(__name__)


class TrendPeriod(StrEnum):
    """Bucket size of a trend series."""

    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


def _weekly_label(weeks_back: int) -> str:
    if weeks_back == 0:
        return "This Week"
    if weeks_back == 1:
        return "Last Week"
    return f"Week -{weeks_back}"


def generate_period_buckets(period: TrendPeriod | str, count: int, end_date: date) -> list[PeriodRange]:
    """Generate consecutive buckets ending with the one containing end_date.

    - daily: single days, labelled "Mon", "Tue", ...
    - weekly: Monday to Sunday weeks, labelled "This Week", "Last Week", "Week -N"
    - monthly: calendar months, labelled "Jan", "Feb", ...

    Buckets are returned oldest first. Weekly and monthly buckets always cover
    the full week/month, even when it extends past end_date.

    Raises:
        ValueError: If count is below 1 or the period is unknown
    """
    if count < 1:
        msg = f"Bucket count must be at least 1, got {count}"
        raise ValueError(msg)

    trend_period = TrendPeriod(period)
    buckets: list[PeriodRange] = []

    for back in range(count - 1, -1, -1):
        match trend_period:
            case TrendPeriod.DAILY:
                day = end_date - timedelta(days=back)
                buckets.append(PeriodRange(start=day, end=day, label=day.strftime("%a")))
            case TrendPeriod.WEEKLY:
                week_start = period_service.get_week_start(end_date - timedelta(weeks=back))
                buckets.append(
                    PeriodRange(start=week_start, end=week_start + timedelta(days=6), label=_weekly_label(back))
                )
            case TrendPeriod.MONTHLY:
                month_start = end_date.replace(day=1) - relativedelta(months=back)
                month_end = month_start + relativedelta(months=1) - timedelta(days=1)
                buckets.append(PeriodRange(start=month_start, end=month_end, label=month_start.strftime("%b")))

    return buckets


def aggregate_by_bucket(
    records: Iterable[ActivityRecord],
    buckets: list[PeriodRange],
    *,
    verified: VerifiedFilter = VerifiedFilter.ALL,
) -> list[TrendDataPoint]:
    """Aggregate records into one data point per bucket.

    Each bucket's value is the sum of de-duplicated daily values (highest
    submission per user and day) that fall inside the bucket. days_with_data
    counts every day with a submission, including a submission of 0.
    """
    records = list(records)
    points: list[TrendDataPoint] = []

    for bucket in buckets:
        values = aggregation_service.daily_values(records, bucket, verified=verified)
        days_with_data = {day for _, day in values}
        points.append(
            TrendDataPoint(
                label=bucket.label,
                value=sum(values.values()),
                period_start=bucket.start,
                period_end=bucket.end,
                days_with_data=len(days_with_data),
                total_days=bucket.day_count,
            )
        )
    return points


def calculate_trend_summary(points: list[TrendDataPoint]) -> TrendSummary:
    """Calculate headline statistics over a trend series.

    Best and worst report the first bucket holding the max/min value. Percent
    change compares the last bucket with the first and is 0 when the first
    bucket is 0. The trend is up above +5%, down below -5%, stable otherwise.
    """
    if not points:
        return TrendSummary(
            total=0,
            average=0,
            best=0,
            best_period_label="",
            worst=0,
            worst_period_label="",
            trend=TrendDirection.STABLE,
            percent_change=0.0,
        )

    values = [point.value for point in points]
    total = sum(values)
    best = max(values)
    worst = min(values)

    first = points[0].value
    last = points[-1].value
    percent_change = round_percent((last - first) / first * 100) if first > 0 else 0.0

    trend = TrendDirection.STABLE
    if percent_change > Constants.TREND_DIRECTION_THRESHOLD_PCT:
        trend = TrendDirection.UP
    elif percent_change < -Constants.TREND_DIRECTION_THRESHOLD_PCT:
        trend = TrendDirection.DOWN

    return TrendSummary(
        total=total,
        average=round_to_int(total / len(values)),
        best=best,
        best_period_label=next(point.label for point in points if point.value == best),
        worst=worst,
        worst_period_label=next(point.label for point in points if point.value == worst),
        trend=trend,
        percent_change=percent_change,
    )


def generate_comparison_data(
    current: list[TrendDataPoint],
    comparison: list[TrendDataPoint],
) -> list[TrendComparisonPoint]:
    """Pair each bucket with the bucket at the same position of the comparison series.

    Per-bucket percent change is 0 when the comparison bucket is missing or 0.
    """
    paired: list[TrendComparisonPoint] = []
    for index, point in enumerate(current):
        previous = comparison[index] if index < len(comparison) else None
        percent_change = 0.0
        if previous is not None and previous.value > 0:
            percent_change = round_percent((point.value - previous.value) / previous.value * 100)

        paired.append(
            TrendComparisonPoint(
                **point.model_dump(),
                comparison_value=previous.value if previous else None,
                comparison_start=previous.period_start if previous else None,
                percent_change=percent_change,
            )
        )
    return paired


def format_percent_change(change: float) -> str:
    """Format a percent change with an explicit sign ("+12.5%", "0%", "-3%")."""
    if change == 0:
        return "0%"
    sign = "+" if change > 0 else ""
    return f"{sign}{change:g}%"


async def build_user_trends(
    *,
    user_id: str,
    period: TrendPeriod | str = TrendPeriod.WEEKLY,
    count: int | None = None,
    include_comparison: bool = False,
    verified: VerifiedFilter = VerifiedFilter.ALL,
    reference_date: date | None = None,
) -> TrendReport:
    """Build a user's trend series, summary and optional comparison series.

    The comparison series covers the same number of buckets immediately
    before the first bucket of the current series.

    Args:
        user_id: User to build trends for
        period: Bucket size
        count: Number of buckets (defaults to settings.trend_default_bucket_count)
        include_comparison: Also build the preceding series
        verified: Which records to count
        reference_date: "Today" for this request (defaults to the current date)

    Returns:
        TrendReport

    Raises:
        ValueError: If count is outside 2..52 or the period is unknown
        StoreError: If the store read fails
    """
    count = count if count is not None else settings.trend_default_bucket_count
    if not Constants.TREND_MIN_BUCKETS <= count <= Constants.TREND_MAX_BUCKETS:
        msg = f"Trend bucket count must be between {Constants.TREND_MIN_BUCKETS} and {Constants.TREND_MAX_BUCKETS}"
        raise ValueError(msg)

    reference_date = reference_date or period_service.get_reference_date()

    with span("trend_service.build_user_trends"):
        buckets = generate_period_buckets(period, count, reference_date)
        comparison_buckets: list[PeriodRange] = []
        if include_comparison:
            comparison_buckets = generate_period_buckets(period, count, buckets[0].start - timedelta(days=1))

        query_start = comparison_buckets[0].start if comparison_buckets else buckets[0].start
        query_range = PeriodRange(start=query_start, end=buckets[-1].end)
        records = await aggregation_service.fetch_activity(period=query_range, user_ids=[user_id], verified=verified)

        points = aggregate_by_bucket(records, buckets, verified=verified)
        comparison = None
        if include_comparison:
            previous_points = aggregate_by_bucket(records, comparison_buckets, verified=verified)
            comparison = generate_comparison_data(points, previous_points)

        summary = calculate_trend_summary(points)
        logger.info(
            "Built %s trend for user %s: %d buckets, trend=%s (%s)",
            TrendPeriod(period),
            user_id,
            len(points),
            summary.trend,
            format_percent_change(summary.percent_change),
        )
        return TrendReport(points=points, comparison=comparison, summary=summary)
